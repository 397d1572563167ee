"""Checkout: turning a user's cart into an order.

Every cart line is validated against the catalogue before anything is
written, so ordinary conflicts (inactive product, not enough stock) leave no
trace. The writes that follow (addresses, order, items, stock reservations,
cart clear) share one unit of work: if a reservation is lost to a concurrent
checkout between validation and reservation, all of it rolls back.
"""

import structlog
from pydantic import Field
from sqlalchemy.orm import Session

from catalogue.product.stock import reserve_stock
from ordering.address.address import AddressDetails
from ordering.address.resolver import resolve_billing_address, resolve_shipping_address
from ordering.cart.cart import Cart, CartRepository
from ordering.order.order import Order, OrderLine, PaymentMethod
from ordering.order.repository import OrderRepository
from shared.database import Database
from shared.domain import Command
from shared.errors import EmptyCart, InsufficientStock, ProductUnavailable

logger = structlog.get_logger(__name__)


class PlaceOrder(Command):
    user_id: str
    payment_method: PaymentMethod
    shipping_address_id: str | None = None
    shipping_address: AddressDetails | None = None
    billing_address: AddressDetails | None = None
    use_same_address: bool = False
    notes: str | None = Field(default=None, max_length=1000)


def snapshot_cart(cart: Cart) -> list[OrderLine]:
    """Validate every line and freeze name/price. Raises before any write."""
    lines = []
    for item in cart.items:
        product = item.product
        if not product.is_active:
            raise ProductUnavailable(f"product {product.name} is no longer available")
        if product.stock_quantity < item.quantity:
            raise InsufficientStock(
                f"insufficient stock for {product.name}: only {product.stock_quantity} available"
            )
        lines.append(
            OrderLine(
                product_id=product.id,
                shop_id=product.shop_id,
                product_name=product.name,
                unit_price=product.price,
                quantity=item.quantity,
            )
        )
    return lines


def place_order(session: Session, command: PlaceOrder) -> Order:
    """Run checkout inside the caller's unit of work and return the new order."""
    carts = CartRepository(session)
    cart = carts.find_for_user(command.user_id)
    if cart is None or cart.is_empty:
        raise EmptyCart()

    lines = snapshot_cart(cart)

    shipping = resolve_shipping_address(
        session, command.user_id, command.shipping_address_id, command.shipping_address
    )
    billing = resolve_billing_address(
        session, command.user_id, shipping, command.use_same_address, command.billing_address
    )

    order = OrderRepository(session).add(
        Order.create(
            user_id=command.user_id,
            payment_method=command.payment_method,
            lines=lines,
            shipping_address_id=shipping.id,
            billing_address_id=billing.id if billing is not None else None,
            notes=command.notes,
        )
    )

    for line in lines:
        try:
            reserve_stock(session, line.product_id, line.quantity)
        except InsufficientStock:
            # Validation passed but another checkout took the stock first.
            logger.warning(
                "Stock reservation lost to a concurrent checkout, rolling back",
                event_type="checkout.reservation_lost_race",
                user_id=command.user_id,
                order_number=order.order_number,
                product_id=line.product_id,
                quantity=line.quantity,
            )
            raise InsufficientStock(f"insufficient stock for {line.product_name}") from None

    carts.clear(cart.id)

    logger.info(
        "Order placed",
        order_id=order.id,
        order_number=order.order_number,
        user_id=command.user_id,
        status=order.status,
        payment_method=order.payment_method,
        total=str(order.total),
        lines=len(lines),
    )
    return order


class CreateOrderHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def create_order_from_cart(self, command: PlaceOrder) -> Order:
        with self.database.transaction() as session:
            order = place_order(session, command)
            return OrderRepository(session).get_hydrated(order.id)
