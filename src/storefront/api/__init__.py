"""Storefront API package."""

from storefront.api.errors import register_storefront_error_handlers
from storefront.api.routes import cart_router, checkout_router, maintenance_router, order_router, product_router

__all__ = [
    "product_router",
    "cart_router",
    "checkout_router",
    "order_router",
    "maintenance_router",
    "register_storefront_error_handlers",
]
