"""Tests for templated lifecycle emails."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import resend

from journey_forward.models import Customer, Item, Payment, Quotation, Request
from journey_forward.notifications.email import (
    ADMIN,
    CUSTOMER,
    EVENT_SUBJECTS,
    EmailNotifier,
    NotificationEvent,
    format_currency,
)


def make_request(status: str = "QUOTED") -> Request:
    request = Request(
        id=42,
        status=status,
        delivery_required=False,
        pickup_postal_code="V6B1A1",
        pickup_address_line1="123 Main St",
        pickup_city="Vancouver",
        pickup_state="BC",
        preferred_datetime=datetime(2026, 5, 20, 15, 0, tzinfo=timezone.utc),
        free_cancellation_deadline=datetime(2026, 5, 19, 15, 0, tzinfo=timezone.utc),
        created_at=datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc),
        cancelled_at=None,
        cancellation_fee=None,
    )
    request.customer = Customer(
        id=7, first_name="Jane", last_name="Doe", email="jane@example.com", phone=None
    )
    request.items = [Item(id=1, name="Sofa", size="large", quantity=1)]
    request.quotation = Quotation(
        subtotal=Decimal("100.00"),
        tax=Decimal("12.00"),
        total=Decimal("112.00"),
        booking_token="tok123",
        note="Two movers",
    )
    request.payment = Payment(
        subtotal=Decimal("100.00"),
        tax=Decimal("12.00"),
        total=Decimal("112.00"),
        currency="CAD",
        status="READY_FOR_PAYMENT",
    )
    return request


def make_notifier(api_key: str = "re_test") -> EmailNotifier:
    return EmailNotifier(
        api_key=api_key,
        from_email="bookings@example.com",
        admin_email="ops@example.com",
        public_base_url="https://jfs.example/",
        admin_dashboard_url="https://jfs.example/admin",
    )


class TestRender:
    @pytest.mark.parametrize(
        "event,audience",
        [(event, audience) for event, subjects in EVENT_SUBJECTS.items() for audience in subjects],
    )
    def test_every_template_renders(self, event, audience):
        subject, html = make_notifier().render(
            event, audience, make_request(), cancellation_fee=Decimal("25"), cancellation_hours=24
        )
        assert "42" in subject
        assert "Request #42" in html

    def test_quotation_email_has_booking_link(self):
        subject, html = make_notifier().render(
            NotificationEvent.QUOTATION_SENT, CUSTOMER, make_request()
        )
        assert subject == "[Journey Forward Services] Your Estimate is Ready (No. 42)"
        assert "https://jfs.example/booking/tok123/confirm" in html
        assert "$112.00" in html
        assert "Two movers" in html

    def test_admin_email_has_dashboard_link(self):
        _, html = make_notifier().render(NotificationEvent.BOOKING_RECEIVED, ADMIN, make_request())
        assert "https://jfs.example/admin/requests/42" in html
        assert "Jane Doe" in html

    def test_invoice_email_has_payment_link(self):
        _, html = make_notifier().render(NotificationEvent.INVOICE_SENT, CUSTOMER, make_request())
        assert "https://jfs.example/booking/tok123/pay" in html

    def test_escapes_customer_input(self):
        request = make_request()
        request.customer.first_name = "<script>"
        _, html = make_notifier().render(NotificationEvent.QUOTATION_SENT, CUSTOMER, request)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestNotify:
    @pytest.mark.asyncio
    async def test_disabled_without_api_key(self, monkeypatch):
        send = MagicMock()
        monkeypatch.setattr(resend.Emails, "send", send)

        warnings = await make_notifier(api_key="").notify(
            NotificationEvent.BOOKING_RECEIVED, make_request()
        )

        assert warnings == []
        send.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_to_customer_and_admin(self, monkeypatch):
        send = MagicMock(return_value={"id": "email_1"})
        monkeypatch.setattr(resend.Emails, "send", send)

        warnings = await make_notifier().notify(
            NotificationEvent.BOOKING_CONFIRMED,
            make_request(),
            cancellation_fee=Decimal("25"),
            cancellation_hours=24,
        )

        assert warnings == []
        recipients = [call.args[0]["to"] for call in send.call_args_list]
        assert recipients == [["jane@example.com"], ["ops@example.com"]]
        assert send.call_args_list[0].args[0]["from"] == "bookings@example.com"

    @pytest.mark.asyncio
    async def test_customer_only_event(self, monkeypatch):
        send = MagicMock(return_value={"id": "email_1"})
        monkeypatch.setattr(resend.Emails, "send", send)

        await make_notifier().notify(NotificationEvent.QUOTATION_SENT, make_request())

        assert send.call_count == 1

    @pytest.mark.asyncio
    async def test_failures_become_warnings(self, monkeypatch):
        monkeypatch.setattr(resend.Emails, "send", MagicMock(side_effect=RuntimeError("down")))

        warnings = await make_notifier().notify(
            NotificationEvent.BOOKING_RECEIVED, make_request("RECEIVED")
        )

        assert warnings == [
            "Failed to send booking-received email to customer.",
            "Failed to send booking-received email to admin.",
        ]


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(None) == "$0.00"
