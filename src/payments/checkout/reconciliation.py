"""Payment reconciliation: applying verified gateway events to orders.

Both handlers are idempotent. Gateways deliver events at least once, so
re-applying a terminal payment status is logged and otherwise ignored.
"""

import structlog

from ordering.order.order import OrderStatus, PaymentStatus
from ordering.order.repository import OrderRepository
from payments.gateway.port import PaymentEvent
from shared.database import Database
from shared.errors import OrderNotFound, ValidationError

logger = structlog.get_logger(__name__)

SUCCESS_EVENTS = frozenset({"checkout.session.completed", "checkout.session.async_payment_succeeded"})
FAILURE_EVENTS = frozenset({"checkout.session.expired", "checkout.session.async_payment_failed"})


class PaymentReconciler:
    def __init__(self, database: Database) -> None:
        self.database = database

    def _require_session_id(self, session_id: str | None) -> str:
        if not session_id:
            raise ValidationError("payment event carries no session id")
        return session_id

    def handle_payment_success(self, session_id: str) -> None:
        session_id = self._require_session_id(session_id)
        with self.database.transaction() as session:
            order = OrderRepository(session).find_by_payment_session(session_id)
            if order is None:
                raise OrderNotFound(f"no order for payment session {session_id}")

            if not order.mark_paid():
                logger.info("Payment already recorded", order_id=order.id, session_id=session_id)

            if order.current_status == OrderStatus.CANCELLED:
                # Cancelled orders stay cancelled; the charge needs a manual refund.
                logger.warning(
                    "Payment succeeded for a cancelled order",
                    event_type="payment.succeeded_after_cancellation",
                    order_id=order.id,
                    order_number=order.order_number,
                    session_id=session_id,
                )
                return

            if order.current_status == OrderStatus.PENDING:
                order.transition_to(OrderStatus.CONFIRMED)

            logger.info(
                "Payment succeeded",
                order_id=order.id,
                order_number=order.order_number,
                status=order.status,
                payment_status=order.payment_status,
            )

    def handle_payment_failure(self, session_id: str) -> None:
        """Record a failed or expired payment. The order status is left alone."""
        session_id = self._require_session_id(session_id)
        with self.database.transaction() as session:
            order = OrderRepository(session).find_by_payment_session(session_id)
            if order is None:
                raise OrderNotFound(f"no order for payment session {session_id}")

            if order.mark_payment_failed():
                logger.info("Payment failed", order_id=order.id, order_number=order.order_number)
            elif order.current_payment_status == PaymentStatus.FAILED:
                logger.info("Payment failure already recorded", order_id=order.id, session_id=session_id)
            else:
                logger.warning(
                    "Ignoring payment failure for settled order",
                    order_id=order.id,
                    payment_status=order.payment_status,
                )

    def dispatch_event(self, event: PaymentEvent) -> None:
        if event.type in SUCCESS_EVENTS:
            self.handle_payment_success(event.session_id)
        elif event.type in FAILURE_EVENTS:
            self.handle_payment_failure(event.session_id)
        else:
            logger.debug("Ignoring unhandled payment event", event_type=event.type)
