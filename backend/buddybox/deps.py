from fastapi import Depends, Header, HTTPException, Request, status

from .config import Settings, get_settings
from .usecases.engine import BookingEngine
from .utils.auth import ADMIN_SUBJECT, decode_access_token


async def get_engine(request: Request) -> BookingEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="booking engine not ready")
    return engine


async def require_admin(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    if authorization is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization header required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Bearer token required")
    try:
        subject = decode_access_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    if subject != ADMIN_SUBJECT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="staff only")
    return subject
