import pytest


@pytest.fixture()
def customer(make_user):
    return make_user()


@pytest.fixture()
def address_details():
    from ordering.address.address import AddressDetails

    def _address_details(**overrides):
        fields = {
            "full_name": "Sita Sharma",
            "phone": "+977-9800000000",
            "address_line1": "Jhamsikhel Road 12",
            "city": "Lalitpur",
            "country": "Nepal",
        }
        fields.update(overrides)
        return AddressDetails(**fields)

    return _address_details


@pytest.fixture()
def add_to_cart(database):
    from ordering.cart.items import AddToCart, ManageCartHandler

    def _add_to_cart(user, product, quantity=1):
        return ManageCartHandler(database).add_item(
            AddToCart(user_id=user.id, product_id=product.id, quantity=quantity)
        )

    return _add_to_cart

