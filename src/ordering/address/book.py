"""Address book: commands and handler.

Ownership failures surface as ``AddressNotFound`` so that other users'
address ids are indistinguishable from unknown ones.
"""

import structlog
from sqlalchemy.orm import Session

from ordering.address.address import Address, AddressDetails, AddressRepository, AddressType
from ordering.order.repository import OrderRepository
from shared.database import Database
from shared.domain import Command
from shared.errors import AddressInUse, AddressNotFound

logger = structlog.get_logger(__name__)


def add_address(session: Session, user_id: str, details: AddressDetails, address_type: AddressType) -> Address:
    """Persist a new address, moving the user's default onto it when requested."""
    repo = AddressRepository(session)
    is_default = details.is_default and address_type == AddressType.SHIPPING
    if is_default:
        repo.unset_default_for_user(user_id)
    return repo.add(Address.create(user_id, details, address_type, is_default))


def promote_to_default(session: Session, address: Address) -> None:
    AddressRepository(session).unset_default_for_user(address.user_id)
    address.is_default = True
    session.flush()


class CreateAddress(Command):
    user_id: str
    details: AddressDetails


class UpdateAddress(Command):
    user_id: str
    address_id: str
    details: AddressDetails


class AddressBookHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def list_addresses(self, user_id: str) -> list[Address]:
        with self.database.transaction() as session:
            return AddressRepository(session).list_for_user(user_id)

    def get_address(self, user_id: str, address_id: str) -> Address:
        with self.database.transaction() as session:
            return AddressRepository(session).get_owned(address_id, user_id)

    def get_default(self, user_id: str) -> Address:
        with self.database.transaction() as session:
            address = AddressRepository(session).find_default(user_id)
            if address is None:
                raise AddressNotFound("no default address set")
            return address

    def create_address(self, command: CreateAddress) -> Address:
        with self.database.transaction() as session:
            address = add_address(session, command.user_id, command.details, AddressType.SHIPPING)
            logger.info("Address added", user_id=command.user_id, address_id=address.id, is_default=address.is_default)
            return address

    def update_address(self, command: UpdateAddress) -> Address:
        """Rewrite an address's postal fields.

        Addresses already used by an order are frozen. ``is_default=True``
        promotes the address; ``False`` leaves the flag as it was.
        """
        with self.database.transaction() as session:
            address = AddressRepository(session).get_owned(command.address_id, command.user_id)
            if OrderRepository(session).references_address(address.id):
                raise AddressInUse()

            address.apply(command.details)
            if command.details.is_default and not address.is_default:
                promote_to_default(session, address)
            session.flush()
            logger.info("Address updated", user_id=command.user_id, address_id=address.id)
            return address

    def delete_address(self, user_id: str, address_id: str) -> None:
        with self.database.transaction() as session:
            repo = AddressRepository(session)
            address = repo.get_owned(address_id, user_id)
            if OrderRepository(session).references_address(address.id):
                raise AddressInUse()
            repo.delete(address)
            logger.info("Address deleted", user_id=user_id, address_id=address_id)

    def set_default(self, user_id: str, address_id: str) -> Address:
        with self.database.transaction() as session:
            address = AddressRepository(session).get_owned(address_id, user_id)
            promote_to_default(session, address)
            logger.info("Default address changed", user_id=user_id, address_id=address_id)
            return address
