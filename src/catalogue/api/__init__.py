"""Catalogue API package."""

from catalogue.api.routes import product_router, vendor_catalogue_router

__all__ = ["product_router", "vendor_catalogue_router"]
