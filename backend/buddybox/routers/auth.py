from fastapi import APIRouter, Depends, HTTPException, status

from ..config import Settings, get_settings
from ..schemas import AdminLogin, AdminToken
from ..utils.auth import ADMIN_SUBJECT, create_access_token, verify_admin_password

router = APIRouter(prefix="/admin", tags=["auth"])


@router.post("/login", response_model=AdminToken)
async def login(payload: AdminLogin, settings: Settings = Depends(get_settings)) -> AdminToken:
    if not verify_admin_password(payload.password, settings.admin_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="wrong password")
    token = create_access_token(
        subject=ADMIN_SUBJECT,
        secret=settings.auth_secret,
        algorithm=settings.auth_algorithm,
    )
    return AdminToken(access_token=token)
