"""Typed product listing query."""

from decimal import Decimal
from enum import Enum

from pydantic import Field
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from catalogue.product.product import Product
from shared.domain import ValueObject


class ProductSort(Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME_ASC = "name_asc"


_ORDERING = {
    ProductSort.NEWEST: (Product.created_at.desc(),),
    ProductSort.PRICE_ASC: (Product.price.asc(), Product.created_at.desc()),
    ProductSort.PRICE_DESC: (Product.price.desc(), Product.created_at.desc()),
    ProductSort.NAME_ASC: (Product.name.asc(),),
}


class ProductQuery(ValueObject):
    search: str | None = Field(default=None, max_length=100)
    min_price: Decimal | None = Field(default=None, ge=0)
    max_price: Decimal | None = Field(default=None, ge=0)
    shop_id: str | None = None
    sort: ProductSort = ProductSort.NEWEST
    limit: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


def search_products(session: Session, query: ProductQuery) -> list[Product]:
    """Active products matching ``query``."""
    stmt = select(Product).where(Product.is_active.is_(True))

    if query.search:
        pattern = f"%{query.search.strip()}%"
        stmt = stmt.where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
    if query.min_price is not None:
        stmt = stmt.where(Product.price >= query.min_price)
    if query.max_price is not None:
        stmt = stmt.where(Product.price <= query.max_price)
    if query.shop_id:
        stmt = stmt.where(Product.shop_id == query.shop_id)

    stmt = stmt.order_by(*_ORDERING[query.sort]).limit(query.limit).offset(query.offset)
    return list(session.scalars(stmt))
