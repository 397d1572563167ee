"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal commands in each module.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ordering.address.address import AddressDetails
from ordering.cart.cart import Cart
from ordering.order.creation import PlaceOrder
from ordering.order.order import OrderStatus, PaymentMethod


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
class AddressInput(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=30)
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    is_default: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "full_name": "Sita Sharma",
                    "phone": "+977-9800000000",
                    "address_line1": "Jhamsikhel Road 12",
                    "city": "Lalitpur",
                    "state": "Bagmati",
                    "postal_code": "44700",
                    "country": "Nepal",
                    "is_default": True,
                }
            ]
        }
    }

    def to_details(self) -> AddressDetails:
        return AddressDetails(**self.model_dump())


class AddressSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str | None = None
    country: str
    is_default: bool
    address_type: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class CartItemSchema(BaseModel):
    id: str
    product_id: str
    product_name: str
    price: float
    image_url: str | None = None
    stock_quantity: int
    quantity: int
    subtotal: float


class CartSchema(BaseModel):
    id: str
    items: list[CartItemSchema]
    item_count: int
    subtotal: float

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartSchema":
        return cls(
            id=cart.id,
            items=[
                CartItemSchema(
                    id=item.id,
                    product_id=item.product_id,
                    product_name=item.product.name,
                    price=item.product.price,
                    image_url=item.product.image_url,
                    stock_quantity=item.product.stock_quantity,
                    quantity=item.quantity,
                    subtotal=item.subtotal,
                )
                for item in cart.items
            ],
            item_count=cart.item_count,
            subtotal=cart.subtotal,
        )


class CartCountSchema(BaseModel):
    count: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping_address_id: str | None = None
    shipping_address: AddressInput | None = None
    billing_address: AddressInput | None = None
    use_same_address: bool = False
    notes: str | None = Field(None, max_length=1000)

    def to_command(self, user_id: str, payment_method: PaymentMethod) -> PlaceOrder:
        return PlaceOrder(
            user_id=user_id,
            payment_method=payment_method,
            shipping_address_id=self.shipping_address_id,
            shipping_address=self.shipping_address.to_details() if self.shipping_address else None,
            billing_address=self.billing_address.to_details() if self.billing_address else None,
            use_same_address=self.use_same_address,
            notes=self.notes,
        )


class CreateOrderRequest(CheckoutRequest):
    payment_method: PaymentMethod

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address_id": "5d0c7c1e-6a43-4d0e-9a8e-5a3f1d2b7c10",
                    "use_same_address": True,
                    "payment_method": "cod",
                    "notes": "Please call before delivery",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus


class OrderItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    shop_id: str
    shop_name: str | None = None
    product_name: str
    product_image_url: str | None = None
    unit_price: float
    quantity: int
    subtotal: float


class OrderSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    status: str
    payment_status: str
    payment_method: str
    subtotal: float
    shipping_cost: float
    tax: float
    discount: float
    total: float
    notes: str | None = None
    items: list[OrderItemSchema]
    shipping_address: AddressSchema | None = None
    billing_address: AddressSchema | None = None
    created_at: datetime
    updated_at: datetime
    confirmed_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
