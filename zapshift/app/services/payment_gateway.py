"""
Payment processor client (Stripe).

Creates PaymentIntents for the client to confirm. Confirmation itself is
recorded separately through the payments endpoint.
"""

import asyncio
import logging

import stripe

from zapshift.app.core.config import settings
from zapshift.app.core.exceptions import PaymentGatewayError
from zapshift.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger("zapshift")


class PaymentGateway:
    """Thin async wrapper around stripe.PaymentIntent guarded by a circuit breaker."""

    def __init__(self, api_key: str, currency: str, breaker: CircuitBreaker):
        self.api_key = api_key
        self.currency = currency
        self.breaker = breaker

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """
        Create a card PaymentIntent and return its client secret.

        Raises:
            PaymentGatewayError: processor error or circuit open
        """
        amount = round(amount_in_cents)

        async def _create():
            # stripe's default HTTP client is blocking
            return await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount,
                currency=self.currency,
                payment_method_types=["card"],
                api_key=self.api_key,
            )

        try:
            intent = await self.breaker.call(_create)
        except CircuitOpenError:
            raise PaymentGatewayError("Payment processor temporarily unavailable")
        except stripe.StripeError as e:
            logger.error("Stripe error: %s", e)
            raise PaymentGatewayError(f"Failed to create payment intent: {e.user_message or e}")

        return intent.client_secret


payment_gateway = PaymentGateway(
    api_key=settings.stripe_secret_key,
    currency=settings.payment_currency,
    breaker=CircuitBreaker(
        failure_threshold=settings.gateway_failure_threshold,
        reset_timeout=settings.gateway_reset_timeout,
    ),
)


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency for the process-wide gateway."""
    return payment_gateway
