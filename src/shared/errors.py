"""Error taxonomy shared by every bounded context.

Domain code raises these; ``shared.api.register_exception_handlers`` turns
them into ``{success: false, error, message}`` responses.
"""


class NepifyError(Exception):
    status_code = 500
    code = "internal_server_error"
    default_message = "an internal error occurred"

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# 404
# ---------------------------------------------------------------------------
class NotFound(NepifyError):
    status_code = 404
    code = "not_found"
    default_message = "resource not found"


class UserNotFound(NotFound):
    code = "user_not_found"
    default_message = "user not found"


class OrderNotFound(NotFound):
    code = "order_not_found"
    default_message = "order not found"


class AddressNotFound(NotFound):
    code = "address_not_found"
    default_message = "address not found"


class ProductNotFound(NotFound):
    code = "product_not_found"
    default_message = "product not found"


class ShopNotFound(NotFound):
    code = "shop_not_found"
    default_message = "shop not found"


class CartItemNotFound(NotFound):
    code = "cart_item_not_found"
    default_message = "cart item not found"


# ---------------------------------------------------------------------------
# 401 / 403
# ---------------------------------------------------------------------------
class Unauthorized(NepifyError):
    status_code = 401
    code = "unauthorized"
    default_message = "authentication required"


class InvalidSignature(Unauthorized):
    code = "invalid_signature"
    default_message = "invalid webhook signature"


class Forbidden(NepifyError):
    status_code = 403
    code = "forbidden"
    default_message = "insufficient privileges"


# ---------------------------------------------------------------------------
# 400
# ---------------------------------------------------------------------------
class ValidationError(NepifyError):
    status_code = 400
    code = "validation_error"
    default_message = "invalid request"


class MissingShippingAddress(ValidationError):
    code = "missing_shipping_address"
    default_message = "shipping address is required: provide shipping_address_id or shipping_address"


# ---------------------------------------------------------------------------
# 409
# ---------------------------------------------------------------------------
class Conflict(NepifyError):
    status_code = 409
    code = "conflict"
    default_message = "request conflicts with the current state"


class InsufficientStock(Conflict):
    code = "insufficient_stock"
    default_message = "insufficient stock"


class ProductUnavailable(Conflict):
    code = "product_unavailable"
    default_message = "product is no longer available"


class EmptyCart(Conflict):
    code = "empty_cart"
    default_message = "cart is empty"


class InvalidTransition(Conflict):
    code = "invalid_transition"
    default_message = "invalid status transition"


class AddressInUse(Conflict):
    code = "address_in_use"
    default_message = "address is referenced by an order and cannot be changed"


class AlreadyExists(Conflict):
    code = "already_exists"
    default_message = "resource already exists"


# ---------------------------------------------------------------------------
# 500
# ---------------------------------------------------------------------------
class InternalError(NepifyError):
    pass


class PaymentGatewayError(InternalError):
    code = "payment_gateway_error"
    default_message = "payment provider request failed"
