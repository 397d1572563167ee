"""Payment gateway factory.

``build_gateway(settings)`` picks the adapter named by ``PAYMENT_GATEWAY``:
- FakeGateway for development and testing
- StripeGateway for production
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from payments.gateway.stripe_adapter import StripeGateway
from shared.config import Settings


def build_gateway(settings: Settings) -> PaymentGateway:
    if settings.payment_gateway == "stripe":
        return StripeGateway(
            api_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            frontend_url=settings.frontend_url,
            currency=settings.currency,
        )
    if settings.payment_gateway == "fake":
        return FakeGateway(frontend_url=settings.frontend_url)
    raise ValueError(f"unknown payment gateway: {settings.payment_gateway}")


__all__ = ["FakeGateway", "PaymentGateway", "StripeGateway", "build_gateway"]
