"""User model and repository.

Users are owned by the external identity provider; locally we only keep the
mapping from the provider's subject (``external_id``) to an internal id,
plus the marketplace role.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.database import Base, new_id, utcnow
from shared.errors import UserNotFound


class UserRole(Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20), default=UserRole.CUSTOMER.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def has_role(self, *roles: UserRole) -> bool:
        return UserRole(self.role) in roles


class UserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User:
        user = self.session.get(User, user_id)
        if user is None or not user.is_active:
            raise UserNotFound()
        return user

    def find_by_external_id(self, external_id: str) -> User | None:
        return self.session.scalars(select(User).where(User.external_id == external_id)).first()

    def get_by_external_id(self, external_id: str) -> User:
        """Map a verified identity-provider subject to a local user.

        Never provisions: an unknown or deactivated subject is ``UserNotFound``.
        """
        user = self.find_by_external_id(external_id)
        if user is None or not user.is_active:
            raise UserNotFound()
        return user

    def add(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user
