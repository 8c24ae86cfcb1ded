"""Cart housekeeping: purging carts whose session has expired.

Triggered by an external scheduler through the maintenance endpoint.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class PurgeExpiredCarts:
    as_of = DateTime()  # Optional: defaults to now


@storefront.command_handler(part_of=ShoppingCart)
class PurgeExpiredCartsHandler:
    @handle(PurgeExpiredCarts)
    def purge_expired_carts(self, command):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(ShoppingCart)

        expired = repo.expired(as_of)
        for cart in expired:
            repo._dao.delete(cart)

        logger.info("Expired carts purged", count=len(expired), as_of=as_of.isoformat())
        return len(expired)
