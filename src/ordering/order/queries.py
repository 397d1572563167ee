"""Read side for orders: customer and vendor views."""

from catalogue.shop.shop import ShopRepository
from ordering.order.order import Order
from ordering.order.repository import OrderRepository
from shared.database import Database


class OrderQueries:
    def __init__(self, database: Database) -> None:
        self.database = database

    def get_order(self, order_id: str, user_id: str) -> Order:
        with self.database.transaction() as session:
            repo = OrderRepository(session)
            order = repo.get_owned(order_id, user_id)
            return repo.get_hydrated(order.id)

    def list_orders(self, user_id: str) -> list[Order]:
        with self.database.transaction() as session:
            return OrderRepository(session).list_for_user(user_id)

    def list_vendor_orders(self, owner_id: str) -> list[Order]:
        with self.database.transaction() as session:
            shop = ShopRepository(session).get_by_owner(owner_id)
            return OrderRepository(session).list_for_shop(shop.id)
