"""HTTP tests for card registration, payment and the Stripe webhook."""

import pytest
from sqlalchemy import select

from journey_forward.errors import ValidationError
from journey_forward.models import Payment, Quotation
from journey_forward.payments.gateway import IntentInfo

QUOTE = {"subtotal": "100.00", "tax": "12.00", "total": "112.00"}
SIGNATURE = {"stripe-signature": "t=1,v1=test"}


@pytest.fixture
def quoted(client, admin_client, session_factory, booking_payload):
    """Factory: submit and quote a request, return (request_id, token)."""

    async def create():
        response = await client.post("/api/v1/requests", json=booking_payload())
        request_id = response.json()["request"]["id"]
        await admin_client.post(f"/api/v1/admin/requests/{request_id}/quotation", json=QUOTE)
        async with session_factory() as session:
            token = (
                await session.execute(
                    select(Quotation.booking_token).where(Quotation.request_id == request_id)
                )
            ).scalar_one()
        return request_id, token

    return create


async def load_payment(session_factory, request_id: int) -> Payment:
    async with session_factory() as session:
        result = await session.execute(select(Payment).where(Payment.request_id == request_id))
        return result.scalar_one()


def setup_succeeded(request_id: int) -> dict:
    return {
        "type": "setup_intent.succeeded",
        "data": {
            "object": {
                "id": "seti_test",
                "customer": "cus_test",
                "payment_method": "pm_test",
                "metadata": {"requestId": str(request_id)},
            }
        },
    }


async def authorize_card(client, gateway, request_id, token):
    response = await client.post("/api/v1/payments/setup-intent", json={"token": token})
    assert response.status_code == 200
    gateway.construct_event.return_value = setup_succeeded(request_id)
    response = await client.post("/api/v1/payments/webhook", content=b"{}", headers=SIGNATURE)
    assert response.json() == {"received": True, "handled": True}


class TestSetupIntent:
    @pytest.mark.asyncio
    async def test_creates_customer_and_pending_payment(
        self, client, gateway, session_factory, quoted
    ):
        request_id, token = await quoted()

        response = await client.post("/api/v1/payments/setup-intent", json={"token": token})

        assert response.status_code == 200
        assert response.json()["client_secret"] == "seti_secret"
        gateway.create_customer.assert_awaited_once()
        assert gateway.create_setup_intent.call_args.args[0] == "cus_test"

        payment = await load_payment(session_factory, request_id)
        assert payment.status == "PENDING"
        assert payment.stripe_customer_id == "cus_test"

    @pytest.mark.asyncio
    async def test_reuses_processor_customer(self, client, gateway, quoted):
        _, token = await quoted()
        await client.post("/api/v1/payments/setup-intent", json={"token": token})
        await client.post("/api/v1/payments/setup-intent", json={"token": token})
        assert gateway.create_customer.await_count == 1

    @pytest.mark.asyncio
    async def test_webhook_authorizes_card(self, client, gateway, session_factory, quoted):
        request_id, token = await quoted()

        await authorize_card(client, gateway, request_id, token)

        payment = await load_payment(session_factory, request_id)
        assert payment.status == "AUTHORIZED"
        assert payment.payment_method == "pm_test"


async def invoiced_request(client, admin_client, gateway, quoted):
    """Quote, authorize a card, confirm and invoice; return (request_id, token)."""
    request_id, token = await quoted()
    await authorize_card(client, gateway, request_id, token)
    await client.post(f"/api/v1/bookings/token/{token}/confirm")
    response = await admin_client.post(f"/api/v1/admin/requests/{request_id}/invoice", json=QUOTE)
    assert response.json()["request"]["status"] == "INVOICED"
    return request_id, token


class TestFinalPayment:
    @pytest.mark.asyncio
    async def test_pay_and_confirm(
        self, client, admin_client, gateway, session_factory, quoted
    ):
        request_id, token = await invoiced_request(client, admin_client, gateway, quoted)

        response = await client.post("/api/v1/payments/payment-intent", json={"token": token})
        assert response.status_code == 200
        assert response.json()["intent_id"] == "pi_test"
        payment = await load_payment(session_factory, request_id)
        assert payment.status == "REQUIRES_CONFIRMATION"

        response = await client.post(
            "/api/v1/payments/confirm",
            json={"token": token, "payment_intent_id": "pi_test"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "SUCCEEDED"

        response = await client.get(f"/api/v1/bookings/token/{token}")
        assert response.json()["status"] == "PAID"
        assert response.json()["payment"]["status"] == "SUCCEEDED"

    @pytest.mark.asyncio
    async def test_requires_processing_status_mirrored(
        self, client, admin_client, gateway, session_factory, quoted
    ):
        request_id, token = await invoiced_request(client, admin_client, gateway, quoted)
        gateway.confirm_payment_intent.return_value = IntentInfo("pi_test", "processing")

        await client.post("/api/v1/payments/payment-intent", json={"token": token})
        response = await client.post(
            "/api/v1/payments/confirm",
            json={"token": token, "payment_intent_id": "pi_test"},
        )

        assert response.json()["status"] == "PROCESSING"
        response = await client.get(f"/api/v1/bookings/token/{token}")
        assert response.json()["status"] == "INVOICED"

    @pytest.mark.asyncio
    async def test_webhook_marks_paid(self, client, admin_client, gateway, quoted):
        request_id, token = await invoiced_request(client, admin_client, gateway, quoted)
        await client.post("/api/v1/payments/payment-intent", json={"token": token})

        gateway.construct_event.return_value = {
            "type": "payment_intent.succeeded",
            "data": {"object": {"id": "pi_test", "status": "succeeded", "metadata": {}}},
        }
        response = await client.post("/api/v1/payments/webhook", content=b"{}", headers=SIGNATURE)
        assert response.status_code == 200

        response = await client.get(f"/api/v1/bookings/token/{token}")
        assert response.json()["status"] == "PAID"

    @pytest.mark.asyncio
    async def test_payment_intent_before_invoice(self, client, quoted):
        _, token = await quoted()
        response = await client.post("/api/v1/payments/payment-intent", json={"token": token})
        assert response.status_code == 400
        assert response.json() == {"error": "This booking is not ready for payment."}

    @pytest.mark.asyncio
    async def test_confirm_foreign_intent(self, client, admin_client, gateway, quoted):
        _, token = await invoiced_request(client, admin_client, gateway, quoted)
        response = await client.post(
            "/api/v1/payments/confirm",
            json={"token": token, "payment_intent_id": "pi_other"},
        )
        assert response.status_code == 400


class TestWebhook:
    @pytest.mark.asyncio
    async def test_bad_signature(self, client, gateway):
        gateway.construct_event.side_effect = ValidationError("Invalid signature")
        response = await client.post("/api/v1/payments/webhook", content=b"{}", headers=SIGNATURE)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid signature"}

    @pytest.mark.asyncio
    async def test_payment_failed_mirrors_status(
        self, client, admin_client, gateway, session_factory, quoted
    ):
        request_id, token = await invoiced_request(client, admin_client, gateway, quoted)
        await client.post("/api/v1/payments/payment-intent", json={"token": token})

        gateway.construct_event.return_value = {
            "type": "payment_intent.payment_failed",
            "data": {"object": {"id": "pi_test", "status": "requires_payment_method"}},
        }
        await client.post("/api/v1/payments/webhook", content=b"{}", headers=SIGNATURE)

        payment = await load_payment(session_factory, request_id)
        assert payment.status == "REQUIRES_PAYMENT_METHOD"

    @pytest.mark.asyncio
    async def test_unhandled_event_type(self, client, gateway):
        gateway.construct_event.return_value = {
            "type": "customer.created",
            "data": {"object": {"id": "cus_1"}},
        }
        response = await client.post("/api/v1/payments/webhook", content=b"{}", headers=SIGNATURE)
        assert response.json() == {"received": True, "handled": False}
