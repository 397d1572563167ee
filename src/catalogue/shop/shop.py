"""Shop model: the storefront a vendor sells from. One shop per vendor."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.database import Base, new_id, utcnow
from shared.errors import ShopNotFound


class Shop(Base):
    __tablename__ = "shops"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ShopRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_owner(self, owner_id: str) -> Shop | None:
        return self.session.scalars(select(Shop).where(Shop.owner_id == owner_id)).first()

    def get_by_owner(self, owner_id: str) -> Shop:
        shop = self.find_by_owner(owner_id)
        if shop is None:
            raise ShopNotFound("no shop found for vendor")
        return shop

    def add(self, shop: Shop) -> Shop:
        self.session.add(shop)
        self.session.flush()
        return shop
