"""Repository for the ShoppingCart aggregate."""

from datetime import UTC, datetime

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class CartRepository:
    def for_session(self, session_id, now=None) -> ShoppingCart | None:
        """The live cart of a session, or None when absent or expired."""
        if not session_id:
            return None

        now = now or datetime.now(UTC)
        carts = self._dao.query.filter(session_id=session_id).limit(None).all().items
        live = [cart for cart in carts if not cart.is_expired(now)]
        return max(live, key=lambda cart: cart.created_at, default=None)

    def expired(self, now=None) -> list[ShoppingCart]:
        now = now or datetime.now(UTC)
        return [cart for cart in self._dao.query.limit(None).all().items if cart.is_expired(now)]
