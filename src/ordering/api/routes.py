"""FastAPI routes for the Ordering context: cart, addresses and orders."""

from fastapi import APIRouter, Depends, Request

from identity.api.dependencies import get_current_user, require_role
from identity.user.user import User, UserRole
from ordering.address.book import AddressBookHandler, CreateAddress, UpdateAddress
from ordering.api.schemas import (
    AddressInput,
    AddressSchema,
    AddToCartRequest,
    CartCountSchema,
    CartSchema,
    CreateOrderRequest,
    OrderSchema,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.items import AddToCart, ManageCartHandler, RemoveFromCart, UpdateCartQuantity
from ordering.order.cancellation import CancelOrder, CancelOrderHandler
from ordering.order.creation import CreateOrderHandler
from ordering.order.queries import OrderQueries
from ordering.order.status import UpdateOrderStatus, UpdateOrderStatusHandler
from shared.api import ApiResponse, get_database

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=ApiResponse[CartSchema])
def get_cart(request: Request, user: User = Depends(get_current_user)) -> ApiResponse:
    cart = ManageCartHandler(get_database(request)).get_cart(user.id)
    return ApiResponse(message="cart retrieved successfully", data=CartSchema.from_cart(cart))


@cart_router.get("/count", response_model=ApiResponse[CartCountSchema])
def get_cart_count(request: Request, user: User = Depends(get_current_user)) -> ApiResponse:
    count = ManageCartHandler(get_database(request)).count_items(user.id)
    return ApiResponse(message="cart count retrieved successfully", data=CartCountSchema(count=count))


@cart_router.post("/items", status_code=201, response_model=ApiResponse[CartSchema])
def add_cart_item(request: Request, body: AddToCartRequest, user: User = Depends(get_current_user)) -> ApiResponse:
    command = AddToCart(user_id=user.id, product_id=body.product_id, quantity=body.quantity)
    cart = ManageCartHandler(get_database(request)).add_item(command)
    return ApiResponse(message="item added to cart", data=CartSchema.from_cart(cart))


@cart_router.patch("/items/{item_id}", response_model=ApiResponse[CartSchema])
def update_cart_item(
    request: Request,
    item_id: str,
    body: UpdateCartItemRequest,
    user: User = Depends(get_current_user),
) -> ApiResponse:
    command = UpdateCartQuantity(user_id=user.id, item_id=item_id, quantity=body.quantity)
    cart = ManageCartHandler(get_database(request)).update_item_quantity(command)
    return ApiResponse(message="cart item updated", data=CartSchema.from_cart(cart))


@cart_router.delete("/items/{item_id}", response_model=ApiResponse[CartSchema])
def remove_cart_item(request: Request, item_id: str, user: User = Depends(get_current_user)) -> ApiResponse:
    command = RemoveFromCart(user_id=user.id, item_id=item_id)
    cart = ManageCartHandler(get_database(request)).remove_item(command)
    return ApiResponse(message="item removed from cart", data=CartSchema.from_cart(cart))


@cart_router.delete("", response_model=ApiResponse[CartSchema])
def clear_cart(request: Request, user: User = Depends(get_current_user)) -> ApiResponse:
    cart = ManageCartHandler(get_database(request)).clear_cart(user.id)
    return ApiResponse(message="cart cleared", data=CartSchema.from_cart(cart))


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.get("", response_model=ApiResponse[list[AddressSchema]])
def list_addresses(request: Request, user: User = Depends(get_current_user)) -> ApiResponse:
    addresses = AddressBookHandler(get_database(request)).list_addresses(user.id)
    return ApiResponse(
        message="addresses retrieved successfully",
        data=[AddressSchema.model_validate(a) for a in addresses],
    )


@address_router.get("/default", response_model=ApiResponse[AddressSchema])
def get_default_address(request: Request, user: User = Depends(get_current_user)) -> ApiResponse:
    address = AddressBookHandler(get_database(request)).get_default(user.id)
    return ApiResponse(message="default address retrieved successfully", data=AddressSchema.model_validate(address))


@address_router.get("/{address_id}", response_model=ApiResponse[AddressSchema])
def get_address(request: Request, address_id: str, user: User = Depends(get_current_user)) -> ApiResponse:
    address = AddressBookHandler(get_database(request)).get_address(user.id, address_id)
    return ApiResponse(message="address retrieved successfully", data=AddressSchema.model_validate(address))


@address_router.post("", status_code=201, response_model=ApiResponse[AddressSchema])
def create_address(request: Request, body: AddressInput, user: User = Depends(get_current_user)) -> ApiResponse:
    command = CreateAddress(user_id=user.id, details=body.to_details())
    address = AddressBookHandler(get_database(request)).create_address(command)
    return ApiResponse(message="address created successfully", data=AddressSchema.model_validate(address))


@address_router.put("/{address_id}", response_model=ApiResponse[AddressSchema])
def update_address(
    request: Request,
    address_id: str,
    body: AddressInput,
    user: User = Depends(get_current_user),
) -> ApiResponse:
    command = UpdateAddress(user_id=user.id, address_id=address_id, details=body.to_details())
    address = AddressBookHandler(get_database(request)).update_address(command)
    return ApiResponse(message="address updated successfully", data=AddressSchema.model_validate(address))


@address_router.delete("/{address_id}", response_model=ApiResponse[None])
def delete_address(request: Request, address_id: str, user: User = Depends(get_current_user)) -> ApiResponse:
    AddressBookHandler(get_database(request)).delete_address(user.id, address_id)
    return ApiResponse(message="address deleted successfully")


@address_router.post("/{address_id}/default", response_model=ApiResponse[AddressSchema])
def set_default_address(request: Request, address_id: str, user: User = Depends(get_current_user)) -> ApiResponse:
    address = AddressBookHandler(get_database(request)).set_default(user.id, address_id)
    return ApiResponse(message="default address updated", data=AddressSchema.model_validate(address))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=ApiResponse[OrderSchema])
def create_order(request: Request, body: CreateOrderRequest, user: User = Depends(get_current_user)) -> ApiResponse:
    """Place an order from the caller's cart."""
    command = body.to_command(user.id, body.payment_method)
    order = CreateOrderHandler(get_database(request)).create_order_from_cart(command)
    return ApiResponse(message="order created successfully", data=OrderSchema.model_validate(order))


@order_router.get("", response_model=ApiResponse[list[OrderSchema]])
def list_orders(request: Request, user: User = Depends(get_current_user)) -> ApiResponse:
    orders = OrderQueries(get_database(request)).list_orders(user.id)
    return ApiResponse(message="orders retrieved successfully", data=[OrderSchema.model_validate(o) for o in orders])


@order_router.get("/{order_id}", response_model=ApiResponse[OrderSchema])
def get_order(request: Request, order_id: str, user: User = Depends(get_current_user)) -> ApiResponse:
    order = OrderQueries(get_database(request)).get_order(order_id, user.id)
    return ApiResponse(message="order retrieved successfully", data=OrderSchema.model_validate(order))


@order_router.post("/{order_id}/cancel", response_model=ApiResponse[OrderSchema])
def cancel_order(request: Request, order_id: str, user: User = Depends(get_current_user)) -> ApiResponse:
    order = CancelOrderHandler(get_database(request)).cancel_order(CancelOrder(order_id=order_id, user_id=user.id))
    return ApiResponse(message="order cancelled successfully", data=OrderSchema.model_validate(order))


# ---------------------------------------------------------------------------
# Vendor Order Router
# ---------------------------------------------------------------------------
vendor_order_router = APIRouter(prefix="/vendor/orders", tags=["vendor"])


@vendor_order_router.get("", response_model=ApiResponse[list[OrderSchema]])
def list_vendor_orders(request: Request, vendor: User = Depends(require_role(UserRole.VENDOR))) -> ApiResponse:
    orders = OrderQueries(get_database(request)).list_vendor_orders(vendor.id)
    return ApiResponse(
        message="vendor orders retrieved successfully",
        data=[OrderSchema.model_validate(o) for o in orders],
    )


@vendor_order_router.patch("/{order_id}/status", response_model=ApiResponse[OrderSchema])
def update_order_status(
    request: Request,
    order_id: str,
    body: UpdateOrderStatusRequest,
    actor: User = Depends(require_role(UserRole.VENDOR, UserRole.ADMIN)),
) -> ApiResponse:
    command = UpdateOrderStatus(order_id=order_id, new_status=body.status, actor_id=actor.id)
    order = UpdateOrderStatusHandler(get_database(request)).update_order_status(command)
    return ApiResponse(message="order status updated successfully", data=OrderSchema.model_validate(order))
