"""PayMongo payment gateway adapter.

Creates payment intents through the PayMongo REST API. Amounts are sent in
centavos and requests authenticate with HTTP Basic auth using the secret key.
"""

import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import httpx

from restaurant_ordering_service.adapters.base_adapter import PaymentGateway, PaymentIntentResult
from restaurant_ordering_service.observability.metrics import record_payment_gateway_call

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.paymongo.com/v1"


class PayMongoAdapter(PaymentGateway):
    """Adapter for the PayMongo payment intents API."""

    def __init__(
        self,
        secret_key: str,
        public_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize PayMongo adapter.

        Args:
            secret_key: PayMongo secret API key
            public_key: PayMongo public key returned to the front end
            base_url: API base URL
            timeout_seconds: Request timeout
        """
        super().__init__("paymongo", public_key=public_key)
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def build_payload(
        self, amount: Decimal, currency: str, description: str, payment_method: str
    ) -> dict[str, Any]:
        """Build the PayMongo payment intent request body.

        Returns:
            dict: JSON body with the amount converted to centavos
        """
        centavos = int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return {
            "data": {
                "attributes": {
                    "amount": centavos,
                    "payment_method_allowed": [payment_method],
                    "payment_method_options": {"card": {"request_three_d_secure": "automatic"}},
                    "currency": currency,
                    "description": description,
                    "capture_type": "automatic",
                }
            }
        }

    async def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        description: str,
        payment_method: str,
    ) -> PaymentIntentResult:
        """Create a payment intent with PayMongo.

        Returns:
            PaymentIntentResult; ``success`` is False on HTTP or network errors
        """
        payload = self.build_payload(amount, currency, description, payment_method)
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    f"{self.base_url}/payment_intents",
                    json=payload,
                    auth=(self.secret_key, ""),
                )
                response.raise_for_status()
                intent = response.json()["data"]

        except httpx.HTTPStatusError as e:
            record_payment_gateway_call(self.provider_name, False, time.perf_counter() - started)
            logger.error(f"PayMongo rejected payment intent: {e.response.status_code}")
            return PaymentIntentResult(
                success=False,
                error_message=f"Payment provider returned status {e.response.status_code}",
            )
        except (httpx.RequestError, KeyError, ValueError) as e:
            record_payment_gateway_call(self.provider_name, False, time.perf_counter() - started)
            logger.error(f"PayMongo payment intent request failed: {e}")
            return PaymentIntentResult(success=False, error_message="Payment processing failed")

        record_payment_gateway_call(self.provider_name, True, time.perf_counter() - started)
        logger.info(f"Created PayMongo payment intent {intent.get('id')}")

        return PaymentIntentResult(
            success=True,
            payment_intent=intent,
            client_key=intent.get("attributes", {}).get("client_key"),
        )
