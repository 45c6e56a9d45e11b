"""Customer repository."""

from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from journey_forward.models.customer import Customer
from journey_forward.schemas.booking import CustomerIn

logger = structlog.get_logger()


class CustomerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[Customer]:
        result = await self.db.execute(
            select(Customer).where(Customer.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def upsert(self, data: CustomerIn) -> Customer:
        """Match on email; refresh name and phone from the latest submission."""
        email = data.email.strip().lower()
        customer = await self.get_by_email(email)

        if customer is None:
            customer = Customer(
                first_name=data.first_name,
                last_name=data.last_name,
                email=email,
                phone=data.phone,
            )
            self.db.add(customer)
            await self.db.flush()
            logger.info("customer_created", customer_id=customer.id)
        else:
            customer.first_name = data.first_name
            customer.last_name = data.last_name
            if data.phone:
                customer.phone = data.phone
            await self.db.flush()

        return customer
