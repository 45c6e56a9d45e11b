"""Payment endpoint schemas."""

from typing import Optional

from pydantic import BaseModel


class SetupIntentCreate(BaseModel):
    token: str


class PaymentIntentCreate(BaseModel):
    token: str


class PaymentConfirm(BaseModel):
    token: str
    payment_intent_id: str


class IntentResponse(BaseModel):
    intent_id: str
    status: str
    client_secret: Optional[str] = None
    warnings: list[str] = []
