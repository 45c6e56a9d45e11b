"""Domain errors, translated to HTTP responses in ``main``."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400


class ConflictError(ServiceError):
    """Duplicate unique key (discount code, admin username/email)."""

    status_code = 400


class InvalidTransitionError(ServiceError):
    """Status change outside the permitted lifecycle edges."""

    status_code = 400

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change status from {current} to {target}.")
        self.current = current
        self.target = target


class NotFoundError(ServiceError):
    status_code = 404


class AuthenticationError(ServiceError):
    status_code = 401


class PaymentError(ServiceError):
    """Payment processor call failed."""

    status_code = 502
