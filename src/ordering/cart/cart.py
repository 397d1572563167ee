"""Shopping cart: one per user, a staging area for checkout.

The cart never holds prices or stock; both are read from the catalogue
whenever the cart is shown or checked out.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, selectinload

from catalogue.product.product import Product
from shared.database import Base, new_id, utcnow
from shared.errors import CartItemNotFound

ZERO = Decimal("0.00")


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    cart_id: Mapped[str] = mapped_column(ForeignKey("carts.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"))
    quantity: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    cart: Mapped["Cart"] = relationship(back_populates="items")
    product: Mapped[Product] = relationship(lazy="joined")

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


class Cart(Base):
    __tablename__ = "carts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items: Mapped[list[CartItem]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by=CartItem.created_at,
    )

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.subtotal for item in self.items), ZERO)

    @property
    def is_empty(self) -> bool:
        return not self.items


_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class CartRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_for_user(self, user_id: str) -> Cart | None:
        stmt = (
            select(Cart)
            .where(Cart.user_id == user_id)
            .options(selectinload(Cart.items))
            .execution_options(populate_existing=True)
        )
        return self.session.scalars(stmt).first()

    def get_or_create(self, user_id: str) -> Cart:
        cart = self.find_for_user(user_id)
        if cart is None:
            cart = Cart(user_id=user_id, items=[])
            self.session.add(cart)
            self.session.flush()
        return cart

    def get_owned_item(self, item_id: str, user_id: str) -> CartItem:
        stmt = (
            select(CartItem)
            .join(Cart, CartItem.cart_id == Cart.id)
            .where(CartItem.id == item_id, Cart.user_id == user_id)
        )
        item = self.session.scalars(stmt).first()
        if item is None:
            raise CartItemNotFound()
        return item

    def find_item(self, cart_id: str, product_id: str) -> CartItem | None:
        stmt = select(CartItem).where(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
        return self.session.scalars(stmt).first()

    def merge_item(self, cart_id: str, product_id: str, quantity: int) -> None:
        """Insert a line, or add ``quantity`` to the existing line for the product."""
        insert = _UPSERT_DIALECTS[self.session.get_bind().dialect.name]
        now = utcnow()
        stmt = insert(CartItem).values(
            id=new_id(),
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["cart_id", "product_id"],
            set_={"quantity": CartItem.__table__.c.quantity + stmt.excluded.quantity, "updated_at": now},
        )
        self.session.execute(stmt)

    def count_items(self, user_id: str) -> int:
        stmt = (
            select(func.coalesce(func.sum(CartItem.quantity), 0))
            .select_from(CartItem)
            .join(Cart, CartItem.cart_id == Cart.id)
            .where(Cart.user_id == user_id)
        )
        return int(self.session.scalar(stmt) or 0)

    def clear(self, cart_id: str) -> None:
        self.session.execute(
            delete(CartItem).where(CartItem.cart_id == cart_id).execution_options(synchronize_session="fetch")
        )
