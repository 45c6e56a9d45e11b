"""Admin password hashing and signed session tokens.

Sessions are stateless: the server signs ``{sub, username, iat, exp}``
with HS256 and stores nothing. The token travels in an httpOnly cookie.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog
from pydantic import BaseModel

from journey_forward.errors import AuthenticationError

logger = structlog.get_logger()

ALGORITHM = "HS256"


class AdminSession(BaseModel):
    """Claims recovered from a verified session token."""

    sub: str
    username: str
    iat: Optional[int] = None
    exp: Optional[int] = None

    @property
    def admin_id(self) -> int:
        return int(self.sub)


def hash_password(password: str, rounds: int = 10) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def issue_session_token(
    admin_id: int,
    username: str,
    secret: str,
    max_age_seconds: int,
    now: Optional[datetime] = None,
) -> str:
    """Sign a session token for a verified admin.

    Args:
        admin_id: Admin primary key, stored as the ``sub`` claim
        username: Admin username for display
        secret: HMAC signing secret
        max_age_seconds: Token lifetime
        now: Issue time (defaults to the current UTC time)

    Returns:
        Encoded JWT
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(admin_id),
        "username": username,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=max_age_seconds),
    }
    token = jwt.encode(payload, secret, algorithm=ALGORITHM)

    logger.info("admin_session_issued", admin_id=admin_id, username=username)
    return token


def verify_session_token(token: str, secret: str) -> AdminSession:
    """Recover the admin identity from a session token.

    Raises:
        AuthenticationError: on a missing, expired, tampered or
            wrongly signed token.
    """
    if not token:
        raise AuthenticationError("Unauthorized")

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired")
    except jwt.InvalidTokenError as e:
        logger.warning("admin_session_invalid", error=str(e))
        raise AuthenticationError("Unauthorized")

    return AdminSession(
        sub=str(claims["sub"]),
        username=claims.get("username", ""),
        iat=claims.get("iat"),
        exp=claims.get("exp"),
    )
