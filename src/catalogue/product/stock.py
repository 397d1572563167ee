"""Stock ledger.

Stock is only ever changed here, and always by a single UPDATE statement
executed by the database. A reservation is a compare-and-decrement
(``WHERE stock_quantity >= qty``), so two checkouts racing for the last unit
cannot both succeed no matter how their reads interleaved.
"""

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session

from catalogue.product.product import Product
from shared.errors import InsufficientStock, ProductNotFound, ValidationError

logger = structlog.get_logger(__name__)


def _assert_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(f"quantity must be a positive integer, got {quantity!r}")


def reserve_stock(session: Session, product_id: str, quantity: int) -> None:
    """Decrement stock by ``quantity`` if, and only if, enough is on hand."""
    _assert_positive(quantity)

    result = session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock_quantity >= quantity)
        .values(stock_quantity=Product.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.info("Stock reservation refused", product_id=product_id, quantity=quantity)
        raise InsufficientStock(f"insufficient stock or product not found: {product_id}")

    logger.debug("Stock reserved", product_id=product_id, quantity=quantity)


def release_stock(session: Session, product_id: str, quantity: int) -> None:
    """Return ``quantity`` units to stock."""
    _assert_positive(quantity)

    result = session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock_quantity=Product.stock_quantity + quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ProductNotFound(f"product not found: {product_id}")

    logger.debug("Stock released", product_id=product_id, quantity=quantity)


def current_stock(session: Session, product_id: str) -> int:
    """Read stock straight from the database, bypassing the identity map."""
    product = session.get(Product, product_id, populate_existing=True)
    if product is None:
        raise ProductNotFound()
    return product.stock_quantity


def adjust_stock(session: Session, product_id: str, delta: int) -> None:
    """Apply a vendor's stock correction. A negative ``delta`` is a reservation,
    so it is refused rather than taking stock below zero."""
    if delta == 0:
        return
    if delta > 0:
        release_stock(session, product_id, delta)
    else:
        reserve_stock(session, product_id, -delta)

    logger.info("Stock adjusted", product_id=product_id, delta=delta)
