"""
Stripe client — creates card payment intents for the checkout page.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import stripe
from starlette.concurrency import run_in_threadpool

from app.core.config import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Any failure reported by the payment gateway."""


class StripePaymentGateway:
    def __init__(self, api_key: str, currency: str) -> None:
        self._api_key = api_key
        self._currency = currency

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """Create a card-only intent and return its client secret."""
        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                amount=amount_in_cents,
                currency=self._currency,
                payment_method_types=["card"],
                api_key=self._api_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe rejected payment intent: %s", exc)
            raise PaymentGatewayError(exc.user_message or str(exc)) from exc
        return intent.client_secret


@lru_cache
def get_payment_gateway() -> StripePaymentGateway:
    """FastAPI dependency — process-wide gateway client."""
    return StripePaymentGateway(settings.PAYMENT_GATEWAY_KEY, settings.PAYMENT_CURRENCY)
