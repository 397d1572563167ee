"""Pydantic request/response schemas for the Payments API."""

from pydantic import BaseModel

from ordering.api.schemas import CheckoutRequest, OrderSchema


class CheckoutSessionRequest(CheckoutRequest):
    """Same shape as an order request; the payment method is always card."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address_id": "5d0c7c1e-6a43-4d0e-9a8e-5a3f1d2b7c10",
                    "use_same_address": True,
                    "notes": "Leave at the reception",
                }
            ]
        }
    }


class CheckoutSessionResponse(BaseModel):
    order: OrderSchema
    checkout_url: str


class SessionStatusResponse(BaseModel):
    session_id: str
    payment_status: str
    order_id: str | None = None
    order_number: str | None = None


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Gateway unavailable"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str


class StatusResponse(BaseModel):
    status: str
