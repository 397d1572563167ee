"""Product model.

``stock_quantity`` is the authoritative stock count. It is never assigned
directly once a product exists; ``catalogue.product.stock`` changes it with
conditional updates, and the check constraint backs that up.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from catalogue.shop.shop import Shop
from shared.database import Base, new_id, utcnow
from shared.errors import ProductNotFound


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price > 0", name="ck_products_price_positive"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0)
    image_url: Mapped[str | None] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    shop: Mapped[Shop] = relationship(lazy="joined")


class ProductRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, product_id: str) -> Product:
        product = self.session.get(Product, product_id)
        if product is None:
            raise ProductNotFound()
        return product

    def get_active(self, product_id: str) -> Product:
        product = self.get(product_id)
        if not product.is_active:
            raise ProductNotFound()
        return product

    def add(self, product: Product) -> Product:
        self.session.add(product)
        self.session.flush()
        return product

    def get_in_shop(self, product_id: str, shop_id: str) -> Product:
        """Load a product, treating another shop's product as absent."""
        product = self.session.get(Product, product_id)
        if product is None or product.shop_id != shop_id:
            raise ProductNotFound()
        return product

    def list_for_shop(self, shop_id: str) -> list[Product]:
        """Every product of the shop, inactive ones included."""
        stmt = select(Product).where(Product.shop_id == shop_id).order_by(Product.created_at.desc())
        return list(self.session.scalars(stmt))
