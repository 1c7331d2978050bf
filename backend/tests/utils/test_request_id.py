import pytest
from buddybox.main import request_id_middleware
from buddybox.utils.request_id import (
    MAX_REQUEST_ID_LENGTH,
    generate_request_id,
    get_request_id,
    resolve_request_id,
    set_request_id,
)
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient


def test_request_id_set_and_get() -> None:
    set_request_id("req-abc")
    assert get_request_id() == "req-abc"
    set_request_id(None)
    assert get_request_id() is None


def test_generate_request_id_is_not_empty() -> None:
    value = generate_request_id()
    assert isinstance(value, str)
    assert len(value) > 0


def test_resolve_request_id_keeps_sane_values() -> None:
    assert resolve_request_id("  req-1  ") == "req-1"
    assert resolve_request_id(None) != ""
    too_long = "x" * (MAX_REQUEST_ID_LENGTH + 1)
    assert resolve_request_id(too_long) != too_long
    assert resolve_request_id("   ").strip() != ""


def _make_app() -> FastAPI:
    app = FastAPI()

    @app.get("/check")
    async def check() -> dict[str, str]:
        return {"rid": get_request_id() or ""}

    app.middleware("http")(request_id_middleware)
    return app


@pytest.mark.asyncio
async def test_request_id_middleware_generates_and_sets_header() -> None:
    transport = ASGITransport(app=_make_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/check")
    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.json()["rid"] == resp.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_middleware_uses_incoming_header() -> None:
    incoming = "req-custom-123"
    transport = ASGITransport(app=_make_app())
    async with AsyncClient(transport=transport, base_url="http://test", headers={"X-Request-ID": incoming}) as client:
        resp = await client.get("/check")
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == incoming
    assert resp.json()["rid"] == incoming
