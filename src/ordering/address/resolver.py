"""Address resolution during checkout."""

from sqlalchemy.orm import Session

from ordering.address.address import Address, AddressDetails, AddressRepository, AddressType
from ordering.address.book import add_address
from shared.errors import MissingShippingAddress


def resolve_shipping_address(
    session: Session,
    user_id: str,
    address_id: str | None,
    inline: AddressDetails | None,
) -> Address:
    """Use the saved address ``address_id`` (if owned) or create one from ``inline``."""
    if address_id:
        return AddressRepository(session).get_owned(address_id, user_id)
    if inline is not None:
        return add_address(session, user_id, inline, AddressType.SHIPPING)
    raise MissingShippingAddress()


def resolve_billing_address(
    session: Session,
    user_id: str,
    shipping_address: Address,
    use_same_address: bool,
    inline: AddressDetails | None,
) -> Address | None:
    if use_same_address:
        return shipping_address
    if inline is not None:
        return add_address(session, user_id, inline, AddressType.BILLING)
    return None
