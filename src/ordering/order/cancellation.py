"""Order cancellation: command and handler."""

import structlog
from sqlalchemy.orm import Session

from catalogue.product.stock import release_stock
from ordering.order.order import Order, OrderStatus
from ordering.order.repository import OrderRepository
from shared.database import Database
from shared.domain import Command
from shared.errors import InvalidTransition

logger = structlog.get_logger(__name__)

# Customers may only cancel orders that are confirmed but not yet in
# fulfilment. Pending orders are left to the payment provider's expiry.
_CUSTOMER_CANCELLABLE = {OrderStatus.CONFIRMED}


def release_order_stock(session: Session, order: Order) -> None:
    """Return every line's quantity to the stock ledger."""
    for item in order.items:
        release_stock(session, item.product_id, item.quantity)
    logger.info("Released stock for cancelled order", order_id=order.id, lines=len(order.items))


class CancelOrder(Command):
    order_id: str
    user_id: str


class CancelOrderHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def cancel_order(self, command: CancelOrder) -> Order:
        with self.database.transaction() as session:
            repo = OrderRepository(session)
            order = repo.get_owned(command.order_id, command.user_id)

            if order.current_status not in _CUSTOMER_CANCELLABLE:
                raise InvalidTransition(f"order cannot be cancelled in current status: {order.status}")

            release_order_stock(session, order)
            order.transition_to(OrderStatus.CANCELLED)

            logger.info("Order cancelled by customer", order_id=order.id, user_id=command.user_id)
            return repo.get_hydrated(order.id)
