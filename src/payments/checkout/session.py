"""Hosted checkout: opening a payment session for a new order, and the
post-redirect status poll."""

import structlog
from pydantic import ConfigDict

from ordering.order.creation import PlaceOrder, place_order
from ordering.order.order import Order, PaymentMethod
from ordering.order.repository import OrderRepository
from payments.gateway.port import PaymentGateway, SessionStatus, line_items_for
from shared.database import Database
from shared.domain import ValueObject
from shared.errors import OrderNotFound

logger = structlog.get_logger(__name__)


class StartedCheckout(ValueObject):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    order: Order
    checkout_url: str


class CheckoutSessionHandler:
    def __init__(self, database: Database, gateway: PaymentGateway) -> None:
        self.database = database
        self.gateway = gateway

    def start_checkout(self, command: PlaceOrder) -> StartedCheckout:
        """Place a card-paid order and open its gateway session.

        The gateway call runs inside the order's unit of work: if the
        gateway fails, the order, its stock reservations and the cart clear
        are all rolled back.
        """
        command = command.model_copy(update={"payment_method": PaymentMethod.STRIPE})

        with self.database.transaction() as session:
            order = place_order(session, command)
            checkout = self.gateway.create_checkout_session(order, line_items_for(order))
            order.attach_payment_session(checkout.session_id)

            logger.info(
                "Checkout session created",
                order_id=order.id,
                order_number=order.order_number,
                session_id=checkout.session_id,
            )
            order = OrderRepository(session).get_hydrated(order.id)
            return StartedCheckout(order=order, checkout_url=checkout.url)

    def verify_session(self, session_id: str, user_id: str) -> SessionStatus:
        """Report the gateway's view of a session, for the order's owner only."""
        with self.database.transaction() as session:
            order = OrderRepository(session).find_by_payment_session(session_id)
            if order is None or order.user_id != user_id:
                raise OrderNotFound()

        return self.gateway.get_session(session_id)
