"""User provisioning and role changes."""

import structlog
from pydantic import Field
from sqlalchemy.orm import Session

from identity.user.user import User, UserRepository, UserRole
from shared.database import Database
from shared.domain import Command
from shared.errors import AlreadyExists, Conflict

logger = structlog.get_logger(__name__)


class SyncUser(Command):
    external_id: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    first_name: str | None = None
    last_name: str | None = None
    role: UserRole = UserRole.CUSTOMER


def sync_user(session: Session, command: SyncUser) -> User:
    """Create the user for ``external_id``, or refresh its profile and role."""
    repo = UserRepository(session)
    user = repo.find_by_external_id(command.external_id)

    if user is None:
        user = repo.add(
            User(
                external_id=command.external_id,
                email=command.email,
                first_name=command.first_name,
                last_name=command.last_name,
                role=command.role.value,
            )
        )
        logger.info("User provisioned", user_id=user.id, role=user.role)
        return user

    user.email = command.email
    user.first_name = command.first_name
    user.last_name = command.last_name
    user.role = command.role.value
    user.is_active = True
    session.flush()
    logger.info("User synchronised", user_id=user.id, role=user.role)
    return user


class RoleHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def become_vendor(self, user_id: str) -> User:
        with self.database.transaction() as session:
            user = UserRepository(session).get(user_id)

            role = UserRole(user.role)
            if role == UserRole.VENDOR:
                raise AlreadyExists("user is already a vendor")
            if role == UserRole.ADMIN:
                raise Conflict("admins cannot change role to vendor")

            user.role = UserRole.VENDOR.value
            logger.info("User upgraded to vendor", user_id=user.id)
            return user
