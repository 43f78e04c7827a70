"""
Stripe checkout gateway.

Thin adapter over hosted Stripe Checkout. The SDK is blocking, so calls
run in the threadpool behind a circuit breaker.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from zap_shift.app.core.config import settings
from zap_shift.app.core.exceptions import ResourceNotFoundError, UpstreamServiceError
from zap_shift.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger(__name__)

# Metadata attached to every session and read back on completion
METADATA_KEYS = ("parcelId", "parcelName", "trackingId")

# Rejected requests are our fault, not an outage
payment_circuit_breaker = CircuitBreaker(
    "stripe",
    failure_threshold=5,
    reset_timeout=30,
    ignored_exceptions=(stripe.InvalidRequestError,),
)


@dataclass
class CheckoutSession:
    """The parts of a Stripe checkout session reconciliation needs."""
    id: str
    payment_status: str
    payment_intent: Optional[str] = None
    amount_total: int = 0
    currency: str = "usd"
    customer_email: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


class StripeGateway:

    def __init__(self, api_key: str, currency: str, site_domain: str):
        self.api_key = api_key
        self.currency = currency
        self.site_domain = site_domain.rstrip("/")
        self.breaker = payment_circuit_breaker

    async def create_checkout_session(
        self,
        *,
        unit_amount: int,
        product_name: str,
        customer_email: Optional[str],
        metadata: Dict[str, str]
    ) -> str:
        """Open a one-item hosted checkout page and return its URL."""
        session = await self._call(
            stripe.checkout.Session.create,
            api_key=self.api_key,
            mode="payment",
            line_items=[{
                "price_data": {
                    "currency": self.currency,
                    "unit_amount": unit_amount,
                    "product_data": {"name": product_name},
                },
                "quantity": 1,
            }],
            customer_email=customer_email,
            metadata=metadata,
            success_url=f"{self.site_domain}/dashboard/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self.site_domain}/dashboard/payment-cancelled",
        )
        return session.url

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        session = await self._call(stripe.checkout.Session.retrieve, session_id, api_key=self.api_key)

        customer_email = session.customer_email
        details = session.customer_details
        if not customer_email and details:
            customer_email = details.email

        metadata = {}
        if session.metadata:
            for key in METADATA_KEYS:
                value = getattr(session.metadata, key, None)
                if value is not None:
                    metadata[key] = value

        return CheckoutSession(
            id=session.id,
            payment_status=session.payment_status,
            payment_intent=session.payment_intent,
            amount_total=session.amount_total or 0,
            currency=session.currency or self.currency,
            customer_email=customer_email,
            metadata=metadata,
        )

    async def _call(self, func, *args, **kwargs):
        try:
            return await self.breaker.call(run_in_threadpool, func, *args, **kwargs)
        except stripe.InvalidRequestError as exc:
            logger.warning("Stripe rejected request: %s", exc)
            if exc.code == "resource_missing":
                raise ResourceNotFoundError("Checkout session")
            raise UpstreamServiceError("stripe", message=str(exc.user_message or exc))
        except stripe.StripeError as exc:
            logger.error("Stripe call failed: %s", exc)
            raise UpstreamServiceError("stripe")
        except CircuitOpenError:
            raise UpstreamServiceError("stripe", status_code=503)


def get_payment_gateway() -> StripeGateway:
    """FastAPI dependency for the configured payment gateway."""
    return StripeGateway(
        api_key=settings.stripe_secret_key,
        currency=settings.stripe_currency,
        site_domain=settings.site_domain,
    )
