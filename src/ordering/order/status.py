"""Operator-driven status changes (vendors and admins)."""

import structlog

from catalogue.shop.shop import ShopRepository
from identity.user.user import UserRepository, UserRole
from ordering.order.cancellation import release_order_stock
from ordering.order.order import Order, OrderStatus
from ordering.order.repository import OrderRepository
from shared.database import Database
from shared.domain import Command
from shared.errors import Forbidden, OrderNotFound

logger = structlog.get_logger(__name__)


class UpdateOrderStatus(Command):
    order_id: str
    new_status: OrderStatus
    actor_id: str


class UpdateOrderStatusHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def update_order_status(self, command: UpdateOrderStatus) -> Order:
        """Apply a transition from the state machine table.

        Admins may act on any order; a vendor only on orders holding at least
        one line from their shop. The transition table is enforced for both.
        """
        with self.database.transaction() as session:
            actor = UserRepository(session).get(command.actor_id)
            repo = OrderRepository(session)
            order = repo.get(command.order_id)

            if not actor.has_role(UserRole.ADMIN):
                if not actor.has_role(UserRole.VENDOR):
                    raise Forbidden("vendor access required")
                shop = ShopRepository(session).find_by_owner(actor.id)
                if shop is None or not order.contains_shop(shop.id):
                    raise OrderNotFound()

            previous = order.current_status
            order.transition_to(command.new_status)
            if command.new_status == OrderStatus.CANCELLED:
                release_order_stock(session, order)

            logger.info(
                "Order status updated",
                order_id=order.id,
                from_status=previous.value,
                to_status=command.new_status.value,
                payment_status=order.payment_status,
                actor_id=actor.id,
            )
            return repo.get_hydrated(order.id)
