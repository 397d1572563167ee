"""Command and value-object construction rules for the ordering context."""

from decimal import Decimal

import pytest
from ordering.address.address import AddressDetails
from ordering.cart.items import AddToCart, UpdateCartQuantity
from ordering.order.creation import PlaceOrder
from ordering.order.order import OrderLine, PaymentMethod
from pydantic import ValidationError

_ADDRESS = {
    "full_name": "Sita Sharma",
    "phone": "+977-9800000000",
    "address_line1": "Jhamsikhel Road 12",
    "city": "Lalitpur",
    "country": "Nepal",
}


class TestAddressDetails:
    def test_equal_by_value(self):
        assert AddressDetails(**_ADDRESS) == AddressDetails(**_ADDRESS)

    @pytest.mark.parametrize("field", ["full_name", "phone", "address_line1", "city", "country"])
    def test_required_fields_cannot_be_blank(self, field):
        with pytest.raises(ValidationError):
            AddressDetails(**{**_ADDRESS, field: "   "})

    def test_immutable(self):
        details = AddressDetails(**_ADDRESS)

        with pytest.raises(ValidationError):
            details.city = "Pokhara"


class TestCartCommands:
    def test_quantity_defaults_to_one(self):
        assert AddToCart(user_id="u1", product_id="p1").quantity == 1

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_requires_positive_quantity(self, quantity):
        with pytest.raises(ValidationError):
            UpdateCartQuantity(user_id="u1", item_id="i1", quantity=quantity)


class TestPlaceOrder:
    def test_nested_address_validated(self):
        with pytest.raises(ValidationError):
            PlaceOrder(
                user_id="u1",
                payment_method=PaymentMethod.CASH_ON_DELIVERY,
                shipping_address={**_ADDRESS, "country": ""},
            )

    def test_payment_method_from_wire_value(self):
        command = PlaceOrder(user_id="u1", payment_method="stripe", shipping_address=_ADDRESS)

        assert command.payment_method is PaymentMethod.STRIPE
        assert command.shipping_address == AddressDetails(**_ADDRESS)

    def test_copy_with_other_payment_method(self):
        command = PlaceOrder(user_id="u1", payment_method=PaymentMethod.CASH_ON_DELIVERY)

        card = command.model_copy(update={"payment_method": PaymentMethod.STRIPE})

        assert card.payment_method is PaymentMethod.STRIPE
        assert command.payment_method is PaymentMethod.CASH_ON_DELIVERY


class TestOrderLine:
    def test_subtotal(self):
        line = OrderLine(product_id="p1", shop_id="s1", product_name="Tea", unit_price=Decimal("50.00"), quantity=2)

        assert line.subtotal == Decimal("100.00")

    def test_rejects_zero_quantity(self):
        with pytest.raises(ValidationError):
            OrderLine(product_id="p1", shop_id="s1", product_name="Tea", unit_price=Decimal("50.00"), quantity=0)
