"""FastAPI dependencies for admin authentication."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.admin.auth import verify_session_token
from journey_forward.config import settings
from journey_forward.database import get_db
from journey_forward.errors import AuthenticationError
from journey_forward.models.admin import Admin

logger = structlog.get_logger()


async def get_current_admin(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """Resolve the admin from the session cookie.

    Raises:
        AuthenticationError: no cookie, a bad or expired token, or an
            admin that no longer exists.
    """
    token: Optional[str] = request.cookies.get(settings.admin_session_name)
    if not token:
        raise AuthenticationError("Unauthorized")

    session = verify_session_token(token, settings.admin_jwt_secret)
    admin = await db.get(Admin, session.admin_id)
    if admin is None:
        logger.warning("admin_session_orphaned", admin_id=session.admin_id)
        raise AuthenticationError("Unauthorized")

    return admin
