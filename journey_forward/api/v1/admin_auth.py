"""Admin session API: login, logout and current admin."""

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.admin.auth import issue_session_token, verify_password
from journey_forward.admin.dependencies import get_current_admin
from journey_forward.config import settings
from journey_forward.database import get_db
from journey_forward.errors import AuthenticationError
from journey_forward.models.admin import Admin
from journey_forward.repositories.admin import AdminRepository
from journey_forward.schemas.admin import AdminOut, LoginRequest

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/admin/auth", tags=["admin-auth"])


@router.post("/login", response_model=AdminOut)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> AdminOut:
    """Verify credentials and set the session cookie."""
    admin = await AdminRepository(db).get_by_username(data.username)
    if admin is None or not verify_password(data.password, admin.password_hash):
        logger.warning("admin_login_failed", username=data.username)
        raise AuthenticationError("Invalid username or password")

    token = issue_session_token(
        admin.id,
        admin.username,
        settings.admin_jwt_secret,
        settings.admin_session_max_age,
    )
    response.set_cookie(
        key=settings.admin_session_name,
        value=token,
        max_age=settings.admin_session_max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )

    logger.info("admin_logged_in", admin_id=admin.id, username=admin.username)
    return AdminOut.model_validate(admin)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.admin_session_name, path="/")
    return {"success": True}


@router.get("/me", response_model=AdminOut)
async def me(admin: Admin = Depends(get_current_admin)) -> AdminOut:
    return AdminOut.model_validate(admin)
