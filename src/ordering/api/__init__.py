from ordering.api.routes import address_router, cart_router, order_router, vendor_order_router

__all__ = ["address_router", "cart_router", "order_router", "vendor_order_router"]
