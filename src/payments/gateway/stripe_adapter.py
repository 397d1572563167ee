"""Stripe payment gateway adapter.

Uses stripe-python's hosted Checkout. The API key is passed on every call
so that no module-level SDK state is shared between gateway instances.
"""

from decimal import ROUND_HALF_UP, Decimal

import stripe
import structlog

from ordering.order.order import Order
from payments.gateway.port import CheckoutLineItem, CheckoutSession, PaymentEvent, PaymentGateway, SessionStatus
from shared.errors import InvalidSignature, PaymentGatewayError

logger = structlog.get_logger(__name__)


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, webhook_secret: str, frontend_url: str, currency: str = "npr") -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency

    def create_checkout_session(self, order: Order, line_items: list[CheckoutLineItem]) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": self.currency,
                            "product_data": {"name": item.name},
                            "unit_amount": to_minor_units(item.unit_price),
                        },
                        "quantity": item.quantity,
                    }
                    for item in line_items
                ],
                success_url=f"{self.frontend_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{self.frontend_url}/payment/cancel",
                metadata={"order_id": order.id, "order_number": order.order_number},
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed", order_id=order.id, error=str(exc))
            raise PaymentGatewayError(detail=str(exc)) from exc

        return CheckoutSession(session_id=session.id, url=session.url)

    def get_session(self, session_id: str) -> SessionStatus:
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session lookup failed", session_id=session_id, error=str(exc))
            raise PaymentGatewayError(detail=str(exc)) from exc

        metadata = session.metadata
        return SessionStatus(
            session_id=session.id,
            payment_status=session.payment_status,
            order_id=getattr(metadata, "order_id", None),
            order_number=getattr(metadata, "order_number", None),
        )

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise InvalidSignature() from exc
        except ValueError as exc:
            raise InvalidSignature("malformed webhook payload") from exc

        session_id = getattr(event.data.object, "id", None)
        if not session_id:
            raise InvalidSignature("webhook event has no object id")
        return PaymentEvent(type=event.type, session_id=session_id)
