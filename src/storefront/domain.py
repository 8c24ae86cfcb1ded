"""Storefront bounded context: catalog, session cart, checkout and orders.

Handles the catalog of products and their stock, the per-session shopping
cart with coupon discounts, the checkout workflow that turns a cart into an
immutable order, and the order status lifecycle.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
