"""Vendor-side product maintenance: edits, stock corrections, deactivation.

A vendor can only touch products of their own shop; anything else looks
like an unknown product. Stock is never assigned here, corrections go
through the ledger as deltas.
"""

from decimal import Decimal

import structlog
from pydantic import Field

from catalogue.product.product import Product, ProductRepository
from catalogue.product.stock import adjust_stock
from catalogue.shop.shop import ShopRepository
from shared.database import Database
from shared.domain import Command

logger = structlog.get_logger(__name__)

_EDITABLE_FIELDS = ("name", "description", "price", "image_url", "is_active")


class UpdateProduct(Command):
    owner_id: str
    product_id: str
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(default=None, gt=0)
    image_url: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None
    stock_adjustment: int = 0


class DeactivateProduct(Command):
    owner_id: str
    product_id: str


class ProductManagementHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def list_shop_products(self, owner_id: str) -> list[Product]:
        with self.database.transaction() as session:
            shop = ShopRepository(session).get_by_owner(owner_id)
            return ProductRepository(session).list_for_shop(shop.id)

    def update_product(self, command: UpdateProduct) -> Product:
        """Apply the fields that were given, then the stock delta.

        A delta that would leave stock negative raises ``InsufficientStock``
        and none of the edits are kept.
        """
        with self.database.transaction() as session:
            shop = ShopRepository(session).get_by_owner(command.owner_id)
            product = ProductRepository(session).get_in_shop(command.product_id, shop.id)

            changed = []
            for field in _EDITABLE_FIELDS:
                value = getattr(command, field)
                if value is not None:
                    setattr(product, field, value)
                    changed.append(field)
            session.flush()

            adjust_stock(session, product.id, command.stock_adjustment)
            session.refresh(product)

            logger.info(
                "Product updated",
                product_id=product.id,
                shop_id=shop.id,
                fields=changed,
                stock_adjustment=command.stock_adjustment,
            )
            return product

    def deactivate_product(self, command: DeactivateProduct) -> Product:
        """Hide a product from the storefront. Order history keeps referencing it."""
        with self.database.transaction() as session:
            shop = ShopRepository(session).get_by_owner(command.owner_id)
            product = ProductRepository(session).get_in_shop(command.product_id, shop.id)

            product.is_active = False
            session.flush()
            logger.info("Product deactivated", product_id=product.id, shop_id=shop.id)
            return product
