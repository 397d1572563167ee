"""Order persistence and read queries."""

from sqlalchemy import exists, or_, select
from sqlalchemy.orm import Session, joinedload, selectinload

from ordering.order.order import Order, OrderItem
from shared.errors import OrderNotFound

# Everything the API shows for an order: items with product/shop display
# data plus both addresses.
_HYDRATED = (
    selectinload(Order.items).joinedload(OrderItem.product),
    selectinload(Order.items).joinedload(OrderItem.shop),
    joinedload(Order.shipping_address),
    joinedload(Order.billing_address),
)


class OrderRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, order: Order) -> Order:
        self.session.add(order)
        self.session.flush()
        return order

    def get(self, order_id: str) -> Order:
        order = self.session.get(Order, order_id)
        if order is None:
            raise OrderNotFound()
        return order

    def get_owned(self, order_id: str, user_id: str) -> Order:
        """Load an order, treating other users' orders as absent."""
        order = self.session.get(Order, order_id)
        if order is None or order.user_id != user_id:
            raise OrderNotFound()
        return order

    def get_hydrated(self, order_id: str) -> Order:
        stmt = select(Order).where(Order.id == order_id).options(*_HYDRATED).execution_options(populate_existing=True)
        order = self.session.scalars(stmt).unique().first()
        if order is None:
            raise OrderNotFound()
        return order

    def list_for_user(self, user_id: str) -> list[Order]:
        stmt = select(Order).where(Order.user_id == user_id).options(*_HYDRATED).order_by(Order.created_at.desc())
        return list(self.session.scalars(stmt).unique())

    def list_for_shop(self, shop_id: str) -> list[Order]:
        """Orders with at least one line sold by ``shop_id``."""
        has_shop_line = select(OrderItem.order_id).where(OrderItem.shop_id == shop_id)
        stmt = select(Order).where(Order.id.in_(has_shop_line)).options(*_HYDRATED).order_by(Order.created_at.desc())
        return list(self.session.scalars(stmt).unique())

    def find_by_payment_session(self, session_id: str | None) -> Order | None:
        if not session_id:
            return None
        return self.session.scalars(select(Order).where(Order.payment_session_id == session_id)).first()

    def references_address(self, address_id: str) -> bool:
        stmt = select(
            exists().where(or_(Order.shipping_address_id == address_id, Order.billing_address_id == address_id))
        )
        return bool(self.session.scalar(stmt))
