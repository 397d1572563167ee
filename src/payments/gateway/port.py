"""What checkout and reconciliation need from a hosted-checkout provider.

Three calls: open a session for an order, poll a session, and turn a signed
webhook body into a ``PaymentEvent``. ``build_gateway`` picks the adapter.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from pydantic import Field

from ordering.order.order import Order
from shared.domain import ValueObject


class CheckoutLineItem(ValueObject):
    """One line of a hosted checkout page."""

    name: str
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)


class CheckoutSession(ValueObject):
    """A hosted checkout session the customer is redirected to."""

    session_id: str
    url: str


class SessionStatus(ValueObject):
    """Gateway-side view of a checkout session."""

    session_id: str
    payment_status: str
    order_id: str | None = None
    order_number: str | None = None


class PaymentEvent(ValueObject):
    """A verified webhook event."""

    type: str
    session_id: str = Field(min_length=1)


def line_items_for(order: Order) -> list[CheckoutLineItem]:
    return [
        CheckoutLineItem(name=item.product_name, unit_price=item.unit_price, quantity=item.quantity)
        for item in order.items
    ]


class PaymentGateway(ABC):
    """Hosted-checkout provider."""

    @abstractmethod
    def create_checkout_session(self, order: Order, line_items: list[CheckoutLineItem]) -> CheckoutSession:
        """Open a hosted checkout session for ``order``."""
        ...

    @abstractmethod
    def get_session(self, session_id: str) -> SessionStatus:
        """Look up the current state of a checkout session."""
        ...

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        """Verify a webhook payload's signature and parse it.

        Raises ``InvalidSignature`` when the payload is not authentically
        from the gateway.
        """
        ...
