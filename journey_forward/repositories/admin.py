"""Admin user repository."""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.admin.auth import hash_password
from journey_forward.errors import ConflictError, NotFoundError, ValidationError
from journey_forward.models.admin import Admin
from journey_forward.schemas.admin import AdminCreate, AdminUpdate

logger = structlog.get_logger()

USERNAME_TAKEN_MESSAGE = "This username is already taken."
EMAIL_TAKEN_MESSAGE = "This email is already in use."


class AdminRepository:
    def __init__(self, db: AsyncSession, bcrypt_rounds: int = 10):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    async def list(self) -> list[Admin]:
        result = await self.db.execute(select(Admin).order_by(Admin.id))
        return list(result.scalars().all())

    async def get(self, admin_id: int) -> Optional[Admin]:
        return await self.db.get(Admin, admin_id)

    async def get_by_username(self, username: str) -> Optional[Admin]:
        result = await self.db.execute(select(Admin).where(Admin.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Admin]:
        result = await self.db.execute(select(Admin).where(Admin.email == email.lower()))
        return result.scalar_one_or_none()

    async def _check_unique(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        if username:
            existing = await self.get_by_username(username)
            if existing and existing.id != exclude_id:
                raise ConflictError(USERNAME_TAKEN_MESSAGE)
        if email:
            existing = await self.get_by_email(email)
            if existing and existing.id != exclude_id:
                raise ConflictError(EMAIL_TAKEN_MESSAGE)

    async def _commit_unique(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # A concurrent write took the name or email after our check
            await self._check_unique(username, email, exclude_id)
            raise ConflictError(USERNAME_TAKEN_MESSAGE)

    async def create(self, data: AdminCreate) -> Admin:
        await self._check_unique(data.username, data.email)

        admin = Admin(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password, rounds=self.bcrypt_rounds),
        )
        self.db.add(admin)
        await self._commit_unique(data.username, data.email)

        logger.info("admin_created", admin_id=admin.id, username=admin.username)
        return admin

    async def update(self, admin_id: int, data: AdminUpdate) -> Admin:
        admin = await self.get(admin_id)
        if admin is None:
            raise NotFoundError("Admin not found")

        await self._check_unique(data.username, data.email, exclude_id=admin_id)

        if data.username:
            admin.username = data.username
        if data.email:
            admin.email = data.email
        if data.password:
            admin.password_hash = hash_password(data.password, rounds=self.bcrypt_rounds)

        await self._commit_unique(data.username, data.email, exclude_id=admin_id)
        logger.info("admin_updated", admin_id=admin_id)
        return admin

    async def set_password(self, admin: Admin, password: str) -> None:
        admin.password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        await self.db.commit()
        logger.info("admin_password_changed", admin_id=admin.id)

    async def delete(self, admin_id: int, current_admin_id: int) -> None:
        if admin_id == current_admin_id:
            raise ValidationError("You cannot delete your own account.")

        admin = await self.get(admin_id)
        if admin is None:
            raise NotFoundError("Admin not found")

        await self.db.delete(admin)
        await self.db.commit()
        logger.info("admin_deleted", admin_id=admin_id, deleted_by=current_admin_id)
