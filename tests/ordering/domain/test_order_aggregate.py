"""Tests for Order creation, totals and payment bookkeeping."""

import re
from datetime import UTC, datetime
from decimal import Decimal

from ordering.order.order import (
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    generate_order_number,
)


def _line(product_id="prod-001", shop_id="shop-001", price="100.00", quantity=1, name="Widget"):
    return OrderLine(
        product_id=product_id,
        shop_id=shop_id,
        product_name=name,
        unit_price=Decimal(price),
        quantity=quantity,
    )


def _make_order(lines=None, payment_method=PaymentMethod.STRIPE, **kwargs):
    return Order.create(
        user_id="user-001",
        payment_method=payment_method,
        lines=lines or [_line()],
        shipping_address_id="addr-001",
        **kwargs,
    )


class TestOrderNumber:
    def test_format(self):
        number = generate_order_number(datetime(2026, 3, 9, tzinfo=UTC))
        assert re.fullmatch(r"ORD-20260309-[0-9a-f]{8}", number)

    def test_numbers_are_unique(self):
        assert len({generate_order_number() for _ in range(50)}) == 50


class TestOrderCreation:
    def test_totals_from_lines(self):
        order = _make_order([_line(price="100.00", quantity=2), _line(product_id="prod-002", price="12.50", quantity=3)])

        assert order.subtotal == Decimal("237.50")
        assert order.shipping_cost == Decimal("0.00")
        assert order.tax == Decimal("0.00")
        assert order.discount == Decimal("0.00")
        assert order.total == order.subtotal + order.shipping_cost + order.tax - order.discount

    def test_two_product_round_trip(self):
        order = _make_order(
            [
                _line(product_id="prod-001", price="100.00", quantity=1),
                _line(product_id="prod-002", price="50.00", quantity=2),
            ]
        )

        assert order.subtotal == Decimal("200.00")
        assert order.total == Decimal("200.00")
        assert len(order.items) == 2
        assert sum(item.subtotal for item in order.items) == order.subtotal

    def test_item_subtotals(self):
        order = _make_order([_line(price="19.99", quantity=3)])
        assert order.items[0].subtotal == Decimal("59.97")
        assert order.items[0].unit_price == Decimal("19.99")

    def test_lines_snapshot_name_and_shop(self):
        order = _make_order([_line(shop_id="shop-xyz", name="Pashmina Shawl")])
        item = order.items[0]
        assert item.product_name == "Pashmina Shawl"
        assert item.shop_id == "shop-xyz"

    def test_card_order_starts_pending(self):
        order = _make_order(payment_method=PaymentMethod.STRIPE)
        assert order.current_status == OrderStatus.PENDING
        assert order.current_payment_status == PaymentStatus.PENDING
        assert order.confirmed_at is None

    def test_cash_on_delivery_starts_confirmed(self):
        order = _make_order(payment_method=PaymentMethod.CASH_ON_DELIVERY)
        assert order.current_status == OrderStatus.CONFIRMED
        assert order.current_payment_status == PaymentStatus.PENDING
        assert order.confirmed_at is not None

    def test_optional_fields(self):
        order = _make_order(billing_address_id="addr-002", notes="Ring twice")
        assert order.billing_address_id == "addr-002"
        assert order.notes == "Ring twice"

    def test_contains_shop(self):
        order = _make_order([_line(shop_id="shop-a"), _line(product_id="prod-002", shop_id="shop-b")])
        assert order.contains_shop("shop-a")
        assert order.contains_shop("shop-b")
        assert not order.contains_shop("shop-c")


class TestPaymentBookkeeping:
    def test_mark_paid_once(self):
        order = _make_order()
        assert order.mark_paid() is True
        assert order.current_payment_status == PaymentStatus.PAID
        assert order.mark_paid() is False

    def test_mark_payment_failed_once(self):
        order = _make_order()
        assert order.mark_payment_failed() is True
        assert order.current_payment_status == PaymentStatus.FAILED
        assert order.mark_payment_failed() is False

    def test_failure_never_downgrades_paid(self):
        order = _make_order()
        order.mark_paid()
        assert order.mark_payment_failed() is False
        assert order.current_payment_status == PaymentStatus.PAID

    def test_payment_failure_leaves_status(self):
        order = _make_order()
        order.mark_payment_failed()
        assert order.current_status == OrderStatus.PENDING

    def test_attach_payment_session(self):
        order = _make_order()
        order.attach_payment_session("cs_test_123")
        assert order.payment_session_id == "cs_test_123"

    def test_payment_method_is_online(self):
        assert PaymentMethod.STRIPE.is_online
        assert not PaymentMethod.CASH_ON_DELIVERY.is_online
