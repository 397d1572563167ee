"""Opening and reading a vendor's shop."""

import structlog
from pydantic import Field

from catalogue.shop.shop import Shop, ShopRepository
from shared.database import Database
from shared.domain import Command
from shared.errors import AlreadyExists

logger = structlog.get_logger(__name__)


class OpenShop(Command):
    owner_id: str
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class ShopHandler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def open_shop(self, command: OpenShop) -> Shop:
        with self.database.transaction() as session:
            repo = ShopRepository(session)
            if repo.find_by_owner(command.owner_id) is not None:
                raise AlreadyExists("vendor already has a shop")

            shop = repo.add(Shop(owner_id=command.owner_id, name=command.name, description=command.description))
            logger.info("Shop opened", shop_id=shop.id, owner_id=command.owner_id)
            return shop

    def get_shop_for_owner(self, owner_id: str) -> Shop:
        with self.database.transaction() as session:
            return ShopRepository(session).get_by_owner(owner_id)
