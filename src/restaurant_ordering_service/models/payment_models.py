"""Payment intent models for the external payment gateway."""

from decimal import Decimal
from typing import Any

from pydantic import Field

from restaurant_ordering_service.models.menu_models import CamelModel


class PaymentIntentRequest(CamelModel):
    """Checkout request for a new payment intent."""

    amount: Decimal = Field(..., gt=0, description="Amount in major currency units")
    currency: str = Field(default="PHP", description="ISO currency code")
    description: str = Field(..., min_length=1)
    payment_method: str = Field(..., min_length=1, description="e.g. gcash, card, paymaya")


class PaymentIntentResponse(CamelModel):
    """Successful payment intent, passed through to the front end."""

    success: bool = True
    payment_intent: dict[str, Any]
    client_key: str | None = None
    public_key: str | None = None
