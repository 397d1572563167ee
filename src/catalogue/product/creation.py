"""Product creation: command and handler."""

from decimal import Decimal

import structlog
from pydantic import Field

from catalogue.product.product import Product, ProductRepository
from catalogue.shop.shop import ShopRepository
from shared.database import Database
from shared.domain import Command

logger = structlog.get_logger(__name__)


class CreateProduct(Command):
    owner_id: str
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(gt=0)
    stock_quantity: int = Field(ge=0)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=500)


class CreateProductHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def create_product(self, command: CreateProduct) -> Product:
        with self.database.transaction() as session:
            shop = ShopRepository(session).get_by_owner(command.owner_id)
            product = ProductRepository(session).add(
                Product(
                    shop_id=shop.id,
                    name=command.name,
                    description=command.description,
                    price=command.price,
                    stock_quantity=command.stock_quantity,
                    image_url=command.image_url,
                )
            )
            logger.info("Product created", product_id=product.id, shop_id=shop.id)
            return product
