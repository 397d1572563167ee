"""Address model and repository.

An address belongs to a user and may be referenced (not owned) by orders.
At most one address per user carries ``is_default``; the flag is moved with
"unset all, then set one", which is last-writer-wins under concurrency.
"""

from datetime import datetime
from enum import Enum

from pydantic import Field
from sqlalchemy import Boolean, DateTime, ForeignKey, String, select, update
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.database import Base, new_id, utcnow
from shared.domain import ValueObject
from shared.errors import AddressNotFound


class AddressType(Enum):
    SHIPPING = "shipping"
    BILLING = "billing"


class AddressDetails(ValueObject):
    """Postal fields supplied by a user, either for the address book or inline at checkout."""

    full_name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=30)
    address_line1: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=1, max_length=100)
    address_line2: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    is_default: bool = False


class Address(Base):
    __tablename__ = "addresses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    full_name: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str] = mapped_column(String(30))
    address_line1: Mapped[str] = mapped_column(String(255))
    address_line2: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(20))
    country: Mapped[str] = mapped_column(String(100))
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    address_type: Mapped[str] = mapped_column(String(20), default=AddressType.SHIPPING.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @classmethod
    def create(cls, user_id: str, details: AddressDetails, address_type: AddressType, is_default: bool) -> "Address":
        return cls(
            user_id=user_id,
            full_name=details.full_name,
            phone=details.phone,
            address_line1=details.address_line1,
            address_line2=details.address_line2,
            city=details.city,
            state=details.state,
            postal_code=details.postal_code,
            country=details.country,
            is_default=is_default,
            address_type=address_type.value,
        )

    def apply(self, details: AddressDetails) -> None:
        """Overwrite the postal fields. The default flag is managed separately."""
        self.full_name = details.full_name
        self.phone = details.phone
        self.address_line1 = details.address_line1
        self.address_line2 = details.address_line2
        self.city = details.city
        self.state = details.state
        self.postal_code = details.postal_code
        self.country = details.country


class AddressRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_owned(self, address_id: str, user_id: str) -> Address:
        """Load an address, treating someone else's address as absent."""
        address = self.session.get(Address, address_id)
        if address is None or address.user_id != user_id:
            raise AddressNotFound()
        return address

    def list_for_user(self, user_id: str) -> list[Address]:
        stmt = (
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at.desc())
        )
        return list(self.session.scalars(stmt))

    def find_default(self, user_id: str) -> Address | None:
        stmt = select(Address).where(Address.user_id == user_id, Address.is_default.is_(True))
        return self.session.scalars(stmt).first()

    def unset_default_for_user(self, user_id: str) -> None:
        self.session.execute(
            update(Address)
            .where(Address.user_id == user_id, Address.is_default.is_(True))
            .values(is_default=False, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )

    def add(self, address: Address) -> Address:
        self.session.add(address)
        self.session.flush()
        return address

    def delete(self, address: Address) -> None:
        self.session.delete(address)
        self.session.flush()
