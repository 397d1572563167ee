"""FastAPI routes for the Payments context: hosted checkout and webhooks."""

import structlog
from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.concurrency import run_in_threadpool

from identity.api.dependencies import get_current_user
from identity.user.user import User
from ordering.api.schemas import OrderSchema
from ordering.order.order import PaymentMethod
from payments.api.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    SessionStatusResponse,
    StatusResponse,
)
from payments.checkout.reconciliation import PaymentReconciler
from payments.checkout.session import CheckoutSessionHandler
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from shared.api import ApiResponse, get_database, get_settings
from shared.errors import Forbidden, ValidationError

logger = structlog.get_logger(__name__)


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/session", status_code=201, response_model=ApiResponse[CheckoutSessionResponse])
def create_checkout_session(
    request: Request,
    body: CheckoutSessionRequest,
    user: User = Depends(get_current_user),
) -> ApiResponse:
    """Create a card-paid order from the cart and return the hosted checkout URL."""
    handler = CheckoutSessionHandler(get_database(request), get_gateway(request))
    started = handler.start_checkout(body.to_command(user.id, PaymentMethod.STRIPE))
    return ApiResponse(
        message="checkout session created",
        data=CheckoutSessionResponse(
            order=OrderSchema.model_validate(started.order),
            checkout_url=started.checkout_url,
        ),
    )


@checkout_router.get("/verify", response_model=ApiResponse[SessionStatusResponse])
def verify_checkout_session(
    request: Request,
    session_id: str = Query(..., min_length=1),
    user: User = Depends(get_current_user),
) -> ApiResponse:
    handler = CheckoutSessionHandler(get_database(request), get_gateway(request))
    status = handler.verify_session(session_id, user.id)
    return ApiResponse(
        message="session verified",
        data=SessionStatusResponse(
            session_id=status.session_id,
            payment_status=status.payment_status,
            order_id=status.order_id,
            order_number=status.order_number,
        ),
    )


@checkout_router.post("/gateway/configure", response_model=GatewayConfigResponse)
def configure_gateway(
    request: Request,
    body: ConfigureGatewayRequest,
    user: User = Depends(get_current_user),  # noqa: ARG001
) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    Allows toggling success/failure behavior for manual API testing.
    """
    if get_settings(request).is_production:
        raise Forbidden("gateway configuration not available in production")

    gateway = get_gateway(request)
    if not isinstance(gateway, FakeGateway):
        raise ValidationError("gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )


# ---------------------------------------------------------------------------
# Webhook Router
# ---------------------------------------------------------------------------
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/payment", response_model=StatusResponse)
async def payment_webhook(
    request: Request,
    stripe_signature: str = Header(default=""),
) -> StatusResponse:
    """Ingest a payment provider event.

    No bearer auth: the signature over the raw body is the trust boundary.
    """
    payload = await request.body()
    event = get_gateway(request).construct_event(payload, stripe_signature)
    logger.info("Payment webhook received", event_type=event.type, session_id=event.session_id)

    reconciler = PaymentReconciler(get_database(request))
    await run_in_threadpool(reconciler.dispatch_event, event)
    return StatusResponse(status="ok")
