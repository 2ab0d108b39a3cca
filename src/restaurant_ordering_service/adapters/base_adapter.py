"""Base adapter for payment gateway integrations.

The provider's wire format is opaque to the rest of the service. Adapters
return a PaymentIntentResult with ``success=False`` on expected failures
(provider rejected the request, network error) rather than raising; the API
layer decides how to report them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass
class PaymentIntentResult:
    """Result of creating a payment intent.

    Attributes:
        success: Whether the provider created the intent
        payment_intent: Provider payload for the intent (includes its ``id``)
        client_key: Key the front end uses to attach a payment method
        error_message: Error description if the call failed, None otherwise
    """

    success: bool
    payment_intent: dict[str, Any] = field(default_factory=dict)
    client_key: str | None = None
    error_message: str | None = None

    @property
    def payment_intent_id(self) -> str | None:
        return self.payment_intent.get("id")


class PaymentGateway(ABC):
    """Abstract base class for payment providers."""

    def __init__(self, provider_name: str, public_key: str | None = None) -> None:
        """Initialize the gateway.

        Args:
            provider_name: Name of the payment provider (e.g. 'paymongo')
            public_key: Publishable key handed to the front end, if any
        """
        self.provider_name = provider_name
        self.public_key = public_key

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        description: str,
        payment_method: str,
    ) -> PaymentIntentResult:
        """Create a payment intent with the provider.

        Args:
            amount: Amount in major currency units (e.g. pesos)
            currency: ISO currency code
            description: Text shown on the customer's statement
            payment_method: Provider payment method type (e.g. 'gcash')

        Returns:
            PaymentIntentResult describing the created intent or the failure
        """
        pass
