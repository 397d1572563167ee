"""Cart item management: commands and handler."""

import structlog
from pydantic import Field

from catalogue.product.product import Product, ProductRepository
from ordering.cart.cart import Cart, CartRepository
from shared.database import Database
from shared.domain import Command
from shared.errors import InsufficientStock

logger = structlog.get_logger(__name__)


class AddToCart(Command):
    user_id: str
    product_id: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartQuantity(Command):
    user_id: str
    item_id: str
    quantity: int = Field(ge=1)


class RemoveFromCart(Command):
    user_id: str
    item_id: str


def _assert_in_stock(product: Product, quantity: int) -> None:
    if product.stock_quantity < quantity:
        raise InsufficientStock(f"insufficient stock for {product.name}: only {product.stock_quantity} available")


class ManageCartHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def get_cart(self, user_id: str) -> Cart:
        with self.database.transaction() as session:
            return CartRepository(session).get_or_create(user_id)

    def add_item(self, command: AddToCart) -> Cart:
        """Add a product, merging with an existing line for the same product."""
        with self.database.transaction() as session:
            repo = CartRepository(session)
            product = ProductRepository(session).get_active(command.product_id)
            cart = repo.get_or_create(command.user_id)

            existing = repo.find_item(cart.id, product.id)
            already_in_cart = existing.quantity if existing is not None else 0
            _assert_in_stock(product, already_in_cart + command.quantity)

            repo.merge_item(cart.id, product.id, command.quantity)
            logger.info(
                "Item added to cart",
                user_id=command.user_id,
                product_id=product.id,
                quantity=command.quantity,
            )
            return repo.find_for_user(command.user_id)

    def update_item_quantity(self, command: UpdateCartQuantity) -> Cart:
        with self.database.transaction() as session:
            repo = CartRepository(session)
            item = repo.get_owned_item(command.item_id, command.user_id)
            _assert_in_stock(item.product, command.quantity)

            item.quantity = command.quantity
            session.flush()
            return repo.find_for_user(command.user_id)

    def remove_item(self, command: RemoveFromCart) -> Cart:
        with self.database.transaction() as session:
            repo = CartRepository(session)
            item = repo.get_owned_item(command.item_id, command.user_id)
            session.delete(item)
            session.flush()
            return repo.find_for_user(command.user_id)

    def clear_cart(self, user_id: str) -> Cart:
        with self.database.transaction() as session:
            repo = CartRepository(session)
            cart = repo.get_or_create(user_id)
            repo.clear(cart.id)
            logger.info("Cart cleared", user_id=user_id)
            return repo.find_for_user(user_id)

    def count_items(self, user_id: str) -> int:
        with self.database.transaction() as session:
            return CartRepository(session).count_items(user_id)
