"""Admin user model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from journey_forward.models.base import Base, IntIdMixin, TimestampMixin


class Admin(Base, IntIdMixin, TimestampMixin):
    __tablename__ = "admins"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
