"""Order aggregate: the order, its frozen line items and its totals.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED → REFUNDED
    CANCELLED (from PENDING, CONFIRMED, PROCESSING)

Payment status moves independently (pending → paid | failed, paid → refunded)
and is advanced either by payment reconciliation or, for cash on delivery,
by the delivery transition.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import Field
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalogue.product.product import Product
from catalogue.shop.shop import Shop
from ordering.address.address import Address
from shared.database import Base, new_id, utcnow
from shared.domain import ValueObject
from shared.errors import InvalidTransition

ZERO = Decimal("0.00")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cod"
    STRIPE = "stripe"

    @property
    def is_online(self) -> bool:
        """Online methods are confirmed by the payment provider, not at checkout."""
        return self is not PaymentMethod.CASH_ON_DELIVERY


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

# Lifecycle timestamps stamped on entering a status
_STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
}


def allowed_transitions(status: OrderStatus) -> set[OrderStatus]:
    return set(_VALID_TRANSITIONS[status])


def generate_order_number(now: datetime | None = None) -> str:
    """``ORD-YYYYMMDD-<8 hex chars>``."""
    now = now or utcnow()
    return f"ORD-{now:%Y%m%d}-{uuid4().hex[:8]}"


class OrderLine(ValueObject):
    """Snapshot of one cart line taken at checkout time."""

    product_id: str
    shop_id: str
    product_name: str
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
class OrderItem(Base):
    """A frozen copy of a cart line. Later catalogue edits never reach it."""

    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), index=True)
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id"), index=True)
    product_name: Mapped[str] = mapped_column(String(255))
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    quantity: Mapped[int] = mapped_column(Integer)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped[Product] = relationship()
    shop: Mapped[Shop] = relationship()

    @property
    def shop_name(self) -> str | None:
        return self.shop.name if self.shop is not None else None

    @property
    def product_image_url(self) -> str | None:
        return self.product.image_url if self.product is not None else None


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    order_number: Mapped[str] = mapped_column(String(32), unique=True)
    status: Mapped[str] = mapped_column(String(20), default=OrderStatus.PENDING.value, index=True)
    payment_status: Mapped[str] = mapped_column(String(20), default=PaymentStatus.PENDING.value)
    payment_method: Mapped[str] = mapped_column(String(20))
    payment_session_id: Mapped[str | None] = mapped_column(String(255), unique=True)

    shipping_address_id: Mapped[str] = mapped_column(ForeignKey("addresses.id"))
    billing_address_id: Mapped[str | None] = mapped_column(ForeignKey("addresses.id"))

    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    shipped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    items: Mapped[list[OrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by=OrderItem.created_at,
    )
    shipping_address: Mapped[Address] = relationship(foreign_keys=[shipping_address_id])
    billing_address: Mapped[Address | None] = relationship(foreign_keys=[billing_address_id])

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id: str,
        payment_method: PaymentMethod,
        lines: list[OrderLine],
        shipping_address_id: str,
        billing_address_id: str | None = None,
        notes: str | None = None,
    ) -> "Order":
        """Build a new order from checkout snapshots.

        Shipping, tax and discount are zero for now; the total is fixed here
        and never recomputed. Cash-on-delivery orders start out confirmed,
        online payments wait for the provider in PENDING.
        """
        now = utcnow()
        subtotal = sum((line.subtotal for line in lines), ZERO)
        shipping_cost = tax = discount = ZERO

        order = cls(
            id=new_id(),
            user_id=user_id,
            order_number=generate_order_number(now),
            payment_method=payment_method.value,
            payment_status=PaymentStatus.PENDING.value,
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax=tax,
            discount=discount,
            total=subtotal + shipping_cost + tax - discount,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        if payment_method.is_online:
            order.status = OrderStatus.PENDING.value
        else:
            order.status = OrderStatus.CONFIRMED.value
            order.confirmed_at = now

        order.items = [
            OrderItem(
                product_id=line.product_id,
                shop_id=line.shop_id,
                product_name=line.product_name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                subtotal=line.subtotal,
                created_at=now,
            )
            for line in lines
        ]
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def current_payment_status(self) -> PaymentStatus:
        return PaymentStatus(self.payment_status)

    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS[self.current_status]

    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = self.current_status
        if not self.can_transition_to(target_status):
            raise InvalidTransition(
                f"invalid status transition: cannot move from '{current.value}' to '{target_status.value}'"
            )

    def contains_shop(self, shop_id: str) -> bool:
        return any(item.shop_id == shop_id for item in self.items)

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def transition_to(self, target_status: OrderStatus) -> None:
        """Move to ``target_status`` and apply its side effects on this aggregate.

        Stock side effects of cancellation live with the callers, which hold
        the session.
        """
        self._assert_can_transition(target_status)

        now = utcnow()
        self.status = target_status.value
        self.updated_at = now

        timestamp_field = _STATUS_TIMESTAMPS.get(target_status)
        if timestamp_field and getattr(self, timestamp_field) is None:
            setattr(self, timestamp_field, now)

        if target_status == OrderStatus.DELIVERED and self.payment_method == PaymentMethod.CASH_ON_DELIVERY.value:
            # Cash changes hands at the door
            self.payment_status = PaymentStatus.PAID.value

        if target_status == OrderStatus.REFUNDED and self.current_payment_status == PaymentStatus.PAID:
            self.payment_status = PaymentStatus.REFUNDED.value

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_payment_session(self, session_id: str) -> None:
        self.payment_session_id = session_id
        self.updated_at = utcnow()

    def mark_paid(self) -> bool:
        """Record a successful payment. Returns False when already recorded."""
        if self.current_payment_status == PaymentStatus.PAID:
            return False
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = utcnow()
        return True

    def mark_payment_failed(self) -> bool:
        """Record a failed or expired payment. Returns False when nothing changed.

        A paid order is never downgraded by a late failure notice.
        """
        if self.current_payment_status in (PaymentStatus.FAILED, PaymentStatus.PAID, PaymentStatus.REFUNDED):
            return False
        self.payment_status = PaymentStatus.FAILED.value
        self.updated_at = utcnow()
        return True
