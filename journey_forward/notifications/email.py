"""Email notifications: renders booking emails and sends them via Resend."""

from __future__ import annotations

import asyncio
import pathlib
from enum import Enum
from typing import Any, Optional

import resend
import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

from journey_forward.booking.cancellation import ensure_utc
from journey_forward.booking.status import STATUS_LABELS, RequestStatus
from journey_forward.models.request import Request

logger = structlog.get_logger()

TEMPLATES_DIR = pathlib.Path(__file__).parent / "templates"

CUSTOMER = "customer"
ADMIN = "admin"


class NotificationEvent(str, Enum):
    BOOKING_RECEIVED = "booking-received"
    QUOTATION_SENT = "quotation-sent"
    BOOKING_CONFIRMED = "booking-confirmed"
    INVOICE_SENT = "invoice-sent"
    PAYMENT_CONFIRMED = "payment-confirmed"
    BOOKING_CANCELLED = "booking-cancelled"


# event -> {audience: subject template}
EVENT_SUBJECTS: dict[NotificationEvent, dict[str, str]] = {
    NotificationEvent.BOOKING_RECEIVED: {
        CUSTOMER: "[Journey Forward Services] Estimate Request Received (No. {id})",
        ADMIN: "[New Request] Request #{id} - {last_name}",
    },
    NotificationEvent.QUOTATION_SENT: {
        CUSTOMER: "[Journey Forward Services] Your Estimate is Ready (No. {id})",
    },
    NotificationEvent.BOOKING_CONFIRMED: {
        CUSTOMER: "[Journey Forward Services] Booking Confirmed (No. {id})",
        ADMIN: "[Booking Confirmed] Request #{id} - {last_name}",
    },
    NotificationEvent.INVOICE_SENT: {
        CUSTOMER: "[Journey Forward Services] Invoice for Request #{id}",
    },
    NotificationEvent.PAYMENT_CONFIRMED: {
        CUSTOMER: "[Journey Forward Services] Payment Confirmed (No. {id})",
        ADMIN: "[Payment Received] Request #{id} - {last_name}",
    },
    NotificationEvent.BOOKING_CANCELLED: {
        CUSTOMER: "[Journey Forward Services] Cancellation Confirmed (No. {id})",
        ADMIN: "[Cancelled] Request #{id} - {last_name}",
    },
}


def format_currency(amount: Any) -> str:
    if amount is None:
        return "$0.00"
    return f"${float(amount):,.2f}"


def format_datetime(value: Any) -> str:
    if value is None:
        return ""
    return ensure_utc(value).strftime("%B %d, %Y %I:%M %p UTC")


class EmailNotifier:
    """Sends templated lifecycle emails to the customer and/or admin."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        admin_email: str,
        public_base_url: str,
        admin_dashboard_url: str,
    ):
        self.enabled = bool(api_key)
        if self.enabled:
            resend.api_key = api_key
        self.from_email = from_email
        self.admin_email = admin_email
        self.public_base_url = public_base_url.rstrip("/")
        self.admin_dashboard_url = admin_dashboard_url.rstrip("/")

        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["currency"] = format_currency
        self.env.filters["datetime"] = format_datetime

    def booking_link(self, token: str) -> str:
        return f"{self.public_base_url}/booking/{token}/confirm"

    def payment_link(self, token: str) -> str:
        return f"{self.public_base_url}/booking/{token}/pay"

    def dashboard_link(self, request_id: int) -> str:
        return f"{self.admin_dashboard_url}/requests/{request_id}"

    def render(
        self,
        event: NotificationEvent,
        audience: str,
        request: Request,
        **extra: Any,
    ) -> tuple[str, str]:
        """Render (subject, html) for one recipient."""
        customer = request.customer
        subject = EVENT_SUBJECTS[event][audience].format(
            id=request.id, last_name=customer.last_name
        )

        token = request.quotation.booking_token if request.quotation else None
        context = {
            "request": request,
            "customer": customer,
            "items": request.items,
            "quotation": request.quotation,
            "payment": request.payment,
            "status_label": STATUS_LABELS.get(RequestStatus(request.status), request.status),
            "booking_link": self.booking_link(token) if token else None,
            "payment_link": self.payment_link(token) if token else None,
            "dashboard_link": self.dashboard_link(request.id),
            **extra,
        }
        template = self.env.get_template(f"{event.value.replace('-', '_')}_{audience}.html")
        return subject, template.render(**context)

    async def send_email(self, to: str, subject: str, html: str) -> Optional[str]:
        """Send one email. Returns the Resend email id."""
        params = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        # Resend SDK is synchronous, run in thread pool
        response = await asyncio.to_thread(resend.Emails.send, params)
        email_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)

        logger.info("email_sent", to=to, subject=subject, email_id=email_id)
        return email_id

    async def notify(
        self,
        event: NotificationEvent,
        request: Request,
        **extra: Any,
    ) -> list[str]:
        """Send every email configured for ``event``.

        Never raises: each failed recipient is logged and returned as a
        warning string so the caller can surface it.
        """
        if not self.enabled:
            logger.debug("email_not_configured", notification_event=event.value, request_id=request.id)
            return []

        warnings: list[str] = []
        for audience in EVENT_SUBJECTS[event]:
            to = request.customer.email if audience == CUSTOMER else self.admin_email
            try:
                subject, html = self.render(event, audience, request, **extra)
                await self.send_email(to, subject, html)
            except Exception as e:
                logger.error(
                    "notification_failed",
                    notification_event=event.value,
                    audience=audience,
                    request_id=request.id,
                    error=str(e),
                )
                warnings.append(f"Failed to send {event.value} email to {audience}.")

        return warnings
