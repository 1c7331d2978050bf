import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response

from .config import get_settings
from .database import async_session, create_tables
from .infrastructure.repositories import (
    SqlAlchemyHistoryRepository,
    SqlAlchemyPromoRepository,
    SqlAlchemySlotRepository,
)
from .infrastructure.sync_store import TimestampedStore
from .routers import admin, auth, bookings, display, slots
from .usecases.engine import BookingEngine
from .usecases.history import HistoryLedger
from .usecases.promos import PromoRegistry
from .utils.request_id import REQUEST_ID_HEADER, resolve_request_id, set_request_id
from .utils.time import now_local

logger = logging.getLogger(__name__)


async def build_engine(sync_store: TimestampedStore) -> BookingEngine:
    settings = get_settings()
    promos = PromoRegistry(SqlAlchemyPromoRepository(async_session))
    await promos.load()
    engine = BookingEngine(
        SqlAlchemySlotRepository(async_session),
        HistoryLedger(SqlAlchemyHistoryRepository(async_session), clock=now_local),
        promos,
        sync_store,
        payment_delay_seconds=settings.payment_delay_seconds,
    )
    await engine.load()
    return engine


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    await create_tables()
    sync_store = await TimestampedStore.connect(
        settings.redis_url,
        freshness_seconds=settings.sync_freshness_seconds,
        retention_seconds=settings.sync_retention_seconds,
    )
    app.state.engine = await build_engine(sync_store)
    logger.info("booking engine ready with %d slots", len(app.state.engine.slots))
    yield
    await sync_store.close()


async def request_id_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
    set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


app = FastAPI(title="Buddy Box Booking API", lifespan=lifespan)
app.middleware("http")(request_id_middleware)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(slots.router)
app.include_router(display.router)
app.include_router(bookings.router)
app.include_router(auth.router)
app.include_router(admin.router)
