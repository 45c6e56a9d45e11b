"""SQLAlchemy ORM models."""

from journey_forward.models.base import Base
from journey_forward.models.admin import Admin
from journey_forward.models.customer import Customer
from journey_forward.models.request import Request, Item
from journey_forward.models.quotation import Quotation
from journey_forward.models.payment import Payment
from journey_forward.models.discount import DiscountCode, DiscountType

__all__ = [
    "Base",
    "Admin",
    "Customer",
    "Request",
    "Item",
    "Quotation",
    "Payment",
    "DiscountCode",
    "DiscountType",
]
