"""Configurable fake payment gateway for development and testing.

This adapter simulates the hosted-checkout gateway without any external
calls. It can be configured at runtime to succeed or fail, making it useful for:
- Manual API testing via /checkout/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials

Webhook payloads are plain JSON (``{"type": ..., "data": {"object": {"id": ...}}}``)
signed with the fixed signature ``test-signature``.
"""

import json
from uuid import uuid4

from ordering.order.order import Order
from payments.gateway.port import CheckoutLineItem, CheckoutSession, PaymentEvent, PaymentGateway, SessionStatus
from shared.errors import InvalidSignature, PaymentGatewayError

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, frontend_url: str = "http://localhost:5173") -> None:
        self.frontend_url = frontend_url
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []
        self.sessions: dict[str, SessionStatus] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def mark_session_paid(self, session_id: str) -> None:
        """Simulate the customer completing payment on the hosted page."""
        current = self.sessions[session_id]
        self.sessions[session_id] = SessionStatus(
            session_id=session_id,
            payment_status="paid",
            order_id=current.order_id,
            order_number=current.order_number,
        )

    def create_checkout_session(self, order: Order, line_items: list[CheckoutLineItem]) -> CheckoutSession:
        self.calls.append(
            {
                "method": "create_checkout_session",
                "order_id": order.id,
                "order_number": order.order_number,
                "line_items": line_items,
            }
        )
        if not self.should_succeed:
            raise PaymentGatewayError(detail=self.failure_reason)

        session_id = f"cs_fake_{uuid4().hex[:16]}"
        self.sessions[session_id] = SessionStatus(
            session_id=session_id,
            payment_status="unpaid",
            order_id=order.id,
            order_number=order.order_number,
        )
        return CheckoutSession(session_id=session_id, url=f"{self.frontend_url}/fake-checkout/{session_id}")

    def get_session(self, session_id: str) -> SessionStatus:
        self.calls.append({"method": "get_session", "session_id": session_id})
        if not self.should_succeed:
            raise PaymentGatewayError(detail=self.failure_reason)
        try:
            return self.sessions[session_id]
        except KeyError:
            raise PaymentGatewayError(detail=f"unknown checkout session {session_id}") from None

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        if signature != TEST_SIGNATURE:
            raise InvalidSignature()
        try:
            event = json.loads(payload)
            event_type = event["type"]
            session_id = event.get("data", {}).get("object", {}).get("id")
        except (ValueError, KeyError, TypeError, AttributeError):
            raise InvalidSignature("malformed webhook payload") from None
        if not session_id:
            raise InvalidSignature("webhook event has no object id")
        return PaymentEvent(type=event_type, session_id=session_id)
