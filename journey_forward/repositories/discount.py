"""Discount code repository: admin CRUD."""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.booking.cancellation import ensure_utc
from journey_forward.errors import ConflictError, NotFoundError, ValidationError
from journey_forward.models.base import utcnow
from journey_forward.models.discount import DiscountCode, DiscountType
from journey_forward.schemas.discount import (
    EXPIRY_BEFORE_START_MESSAGE,
    PERCENTAGE_OVER_100_MESSAGE,
    DiscountCreate,
    DiscountUpdate,
)

logger = structlog.get_logger()

DUPLICATE_CODE_MESSAGE = "Discount code already exists."

# description and expires_at may be cleared with null; these may not
NON_NULLABLE_FIELDS = {"code", "type", "value", "starts_at", "is_active"}


class DiscountRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> list[DiscountCode]:
        result = await self.db.execute(
            select(DiscountCode).order_by(DiscountCode.created_at.desc(), DiscountCode.id.desc())
        )
        return list(result.scalars().all())

    async def get(self, discount_id: int) -> DiscountCode:
        discount = await self.db.get(DiscountCode, discount_id)
        if discount is None:
            raise NotFoundError("Discount code not found")
        return discount

    async def get_by_code(self, code: str) -> Optional[DiscountCode]:
        result = await self.db.execute(
            select(DiscountCode).where(DiscountCode.code == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def _commit_unique(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_CODE_MESSAGE)

    @staticmethod
    def _check_rules(discount_type: str, value, starts_at, expires_at) -> None:
        if discount_type == DiscountType.PERCENTAGE.value and value > 100:
            raise ValidationError(PERCENTAGE_OVER_100_MESSAGE)
        if starts_at and expires_at and ensure_utc(expires_at) < ensure_utc(starts_at):
            raise ValidationError(EXPIRY_BEFORE_START_MESSAGE)

    async def create(self, data: DiscountCreate) -> DiscountCode:
        if await self.get_by_code(data.code):
            raise ConflictError(DUPLICATE_CODE_MESSAGE)

        discount = DiscountCode(
            code=data.code,
            description=data.description,
            type=data.type.value,
            value=data.value,
            starts_at=data.starts_at or utcnow(),
            expires_at=data.expires_at,
            is_active=data.is_active,
        )
        self.db.add(discount)
        await self._commit_unique()

        logger.info("discount_created", code=discount.code, type=discount.type)
        return discount

    async def update(self, discount_id: int, data: DiscountUpdate) -> DiscountCode:
        discount = await self.get(discount_id)
        changes = data.model_dump(exclude_unset=True)

        new_code = changes.get("code")
        if new_code and new_code != discount.code:
            existing = await self.get_by_code(new_code)
            if existing and existing.id != discount.id:
                raise ConflictError(DUPLICATE_CODE_MESSAGE)

        merged = {}
        for field, value in changes.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            if field == "type":
                value = value.value
            merged[field] = value

        # Checked against the merged row
        self._check_rules(
            merged.get("type", discount.type),
            merged.get("value", discount.value),
            merged.get("starts_at", discount.starts_at),
            merged.get("expires_at", discount.expires_at),
        )

        for field, value in merged.items():
            setattr(discount, field, value)

        await self._commit_unique()
        logger.info("discount_updated", discount_id=discount_id, fields=list(changes))
        return discount

    async def set_active(self, discount_id: int, is_active: bool) -> DiscountCode:
        discount = await self.get(discount_id)
        discount.is_active = is_active
        await self.db.commit()
        logger.info("discount_toggled", discount_id=discount_id, is_active=is_active)
        return discount

    async def delete(self, discount_id: int) -> None:
        discount = await self.get(discount_id)
        await self.db.delete(discount)
        await self.db.commit()
        logger.info("discount_deleted", discount_id=discount_id, code=discount.code)
