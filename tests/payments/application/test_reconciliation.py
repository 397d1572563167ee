"""Application tests for applying payment provider events to orders."""

import pytest
from ordering.order.order import OrderStatus, PaymentStatus
from ordering.order.queries import OrderQueries
from payments.checkout.reconciliation import PaymentReconciler
from payments.checkout.session import CheckoutSessionHandler
from payments.gateway.port import PaymentEvent
from shared.errors import OrderNotFound, ValidationError
from structlog.testing import capture_logs


@pytest.fixture()
def pending_order(database, gateway, customer, filled_cart, checkout_command):
    return CheckoutSessionHandler(database, gateway).start_checkout(checkout_command(customer)).order


def _reload(database, order):
    return OrderQueries(database).get_order(order.id, order.user_id)


class TestPaymentSuccess:
    def test_confirms_and_marks_paid(self, database, pending_order):
        PaymentReconciler(database).handle_payment_success(pending_order.payment_session_id)

        order = _reload(database, pending_order)
        assert order.current_status == OrderStatus.CONFIRMED
        assert order.current_payment_status == PaymentStatus.PAID
        assert order.confirmed_at is not None

    def test_idempotent(self, database, pending_order):
        reconciler = PaymentReconciler(database)
        reconciler.handle_payment_success(pending_order.payment_session_id)
        first = _reload(database, pending_order)

        reconciler.handle_payment_success(pending_order.payment_session_id)

        second = _reload(database, pending_order)
        assert second.current_status == OrderStatus.CONFIRMED
        assert second.current_payment_status == PaymentStatus.PAID
        assert second.confirmed_at == first.confirmed_at

    def test_does_not_rewind_fulfilment(self, database, make_user, pending_order):
        from identity.user.user import UserRole
        from ordering.order.status import UpdateOrderStatus, UpdateOrderStatusHandler

        reconciler = PaymentReconciler(database)
        reconciler.handle_payment_success(pending_order.payment_session_id)
        admin = make_user(role=UserRole.ADMIN)
        UpdateOrderStatusHandler(database).update_order_status(
            UpdateOrderStatus(order_id=pending_order.id, new_status=OrderStatus.PROCESSING, actor_id=admin.id)
        )

        reconciler.handle_payment_success(pending_order.payment_session_id)

        assert _reload(database, pending_order).current_status == OrderStatus.PROCESSING

    def test_unknown_session(self, database):
        with pytest.raises(OrderNotFound):
            PaymentReconciler(database).handle_payment_success("cs_unknown")

    @pytest.mark.parametrize("session_id", [None, ""])
    def test_missing_session_id_touches_nothing(self, database, customer, filled_cart, checkout_command, session_id):
        from ordering.order.creation import CreateOrderHandler
        from ordering.order.order import PaymentMethod

        unpaid = CreateOrderHandler(database).create_order_from_cart(
            checkout_command(customer, payment_method=PaymentMethod.STRIPE)
        )
        assert unpaid.payment_session_id is None

        with pytest.raises(ValidationError):
            PaymentReconciler(database).handle_payment_success(session_id)

        order = _reload(database, unpaid)
        assert order.current_payment_status == PaymentStatus.PENDING
        assert order.current_status == OrderStatus.PENDING

    def test_payment_after_cancellation_is_flagged(self, database, make_user, stock_of, filled_cart, pending_order):
        from identity.user.user import UserRole
        from ordering.order.status import UpdateOrderStatus, UpdateOrderStatusHandler

        admin = make_user(role=UserRole.ADMIN)
        UpdateOrderStatusHandler(database).update_order_status(
            UpdateOrderStatus(order_id=pending_order.id, new_status=OrderStatus.CANCELLED, actor_id=admin.id)
        )

        with capture_logs() as logs:
            PaymentReconciler(database).handle_payment_success(pending_order.payment_session_id)

        order = _reload(database, pending_order)
        assert order.current_status == OrderStatus.CANCELLED
        assert order.current_payment_status == PaymentStatus.PAID
        assert stock_of(filled_cart) == 5
        flagged = [log for log in logs if log.get("event_type") == "payment.succeeded_after_cancellation"]
        assert len(flagged) == 1
        assert flagged[0]["log_level"] == "warning"
        assert flagged[0]["order_id"] == pending_order.id
        assert not any(log["event"] == "Payment succeeded" for log in logs)


class TestPaymentFailure:
    def test_missing_session_id(self, database):
        with pytest.raises(ValidationError):
            PaymentReconciler(database).handle_payment_failure(None)

    def test_marks_failed_and_keeps_status(self, database, pending_order):
        PaymentReconciler(database).handle_payment_failure(pending_order.payment_session_id)

        order = _reload(database, pending_order)
        assert order.current_payment_status == PaymentStatus.FAILED
        assert order.current_status == OrderStatus.PENDING

    def test_idempotent(self, database, pending_order):
        reconciler = PaymentReconciler(database)
        reconciler.handle_payment_failure(pending_order.payment_session_id)
        reconciler.handle_payment_failure(pending_order.payment_session_id)

        assert _reload(database, pending_order).current_payment_status == PaymentStatus.FAILED

    def test_late_failure_does_not_downgrade_paid(self, database, pending_order):
        reconciler = PaymentReconciler(database)
        reconciler.handle_payment_success(pending_order.payment_session_id)

        reconciler.handle_payment_failure(pending_order.payment_session_id)

        order = _reload(database, pending_order)
        assert order.current_payment_status == PaymentStatus.PAID
        assert order.current_status == OrderStatus.CONFIRMED

    def test_success_after_failure(self, database, pending_order):
        reconciler = PaymentReconciler(database)
        reconciler.handle_payment_failure(pending_order.payment_session_id)

        reconciler.handle_payment_success(pending_order.payment_session_id)

        assert _reload(database, pending_order).current_payment_status == PaymentStatus.PAID


class TestDispatch:
    @pytest.mark.parametrize(
        "event_type,payment_status,status",
        [
            ("checkout.session.completed", PaymentStatus.PAID, OrderStatus.CONFIRMED),
            ("checkout.session.async_payment_succeeded", PaymentStatus.PAID, OrderStatus.CONFIRMED),
            ("checkout.session.expired", PaymentStatus.FAILED, OrderStatus.PENDING),
            ("checkout.session.async_payment_failed", PaymentStatus.FAILED, OrderStatus.PENDING),
            ("charge.refunded", PaymentStatus.PENDING, OrderStatus.PENDING),
        ],
    )
    def test_event_routing(self, database, pending_order, event_type, payment_status, status):
        PaymentReconciler(database).dispatch_event(
            PaymentEvent(type=event_type, session_id=pending_order.payment_session_id)
        )

        order = _reload(database, pending_order)
        assert order.current_payment_status == payment_status
        assert order.current_status == status
