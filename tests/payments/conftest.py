import json

import pytest


@pytest.fixture()
def customer(make_user):
    return make_user()


@pytest.fixture()
def checkout_command():
    from ordering.address.address import AddressDetails
    from ordering.order.creation import PlaceOrder
    from ordering.order.order import PaymentMethod

    def _checkout_command(user, **overrides):
        fields = {
            "user_id": user.id,
            "payment_method": PaymentMethod.CASH_ON_DELIVERY,
            "shipping_address": AddressDetails(
                full_name="Hari Thapa",
                phone="+977-9811111111",
                address_line1="Lakeside 4",
                city="Pokhara",
                country="Nepal",
            ),
            "use_same_address": True,
        }
        fields.update(overrides)
        return PlaceOrder(**fields)

    return _checkout_command


@pytest.fixture()
def filled_cart(database, customer, vendor_with_shop, make_product):
    """Put 2 units of a 100.00 product (stock 5) in the customer's cart."""
    from ordering.cart.items import AddToCart, ManageCartHandler

    _, shop = vendor_with_shop
    product = make_product(shop, name="Singing Bowl", price="100.00", stock=5)
    ManageCartHandler(database).add_item(AddToCart(user_id=customer.id, product_id=product.id, quantity=2))
    return product


@pytest.fixture()
def webhook_payload():
    def _webhook_payload(event_type, session_id):
        return json.dumps({"type": event_type, "data": {"object": {"id": session_id}}}).encode()

    return _webhook_payload
