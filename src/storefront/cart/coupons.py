"""Cart coupons: apply, remove and re-validate the active discount.

``apply_coupon`` is the entry point for customer input: an unknown code
clears whatever discount was active before the ``InvalidCoupon`` error is
reported, and that clearing is committed in its own unit of work.
"""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.cart import discounts
from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.errors import InvalidCoupon

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class ApplyCoupon:
    """Make a coupon code the cart's active discount (an empty code clears it)."""

    session_id = String(required=True, max_length=255)
    coupon_code = String(max_length=100)


@storefront.command(part_of="ShoppingCart")
class RemoveCoupon:
    session_id = String(required=True, max_length=255)
    reason = String(max_length=50, default="removed")


@storefront.command(part_of="ShoppingCart")
class RevalidateCoupon:
    """Drop the active coupon if it has expired since it was applied."""

    session_id = String(required=True, max_length=255)


@storefront.command_handler(part_of=ShoppingCart)
class CartCouponHandler:
    @handle(ApplyCoupon)
    def apply_coupon(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id) or ShoppingCart.start(command.session_id)

        policy = discounts.evaluate(command.coupon_code)
        if policy is None:
            cart.clear_discount(reason="removed")
            repo.add(cart)
            return None

        cart.apply_coupon(policy)
        repo.add(cart)

        logger.info("Coupon applied", session_id=command.session_id, coupon_code=policy.code)
        return cart.discount.message

    @handle(RemoveCoupon)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id)
        if cart is None or not cart.discount:
            return None

        code = cart.clear_discount(reason=command.reason)
        repo.add(cart)
        return code

    @handle(RevalidateCoupon)
    def revalidate_coupon(self, command):
        """Returns the expiry notice when a coupon was dropped, otherwise None."""
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id)
        if cart is None or not cart.discount or not discounts.is_expired(cart.discount.code):
            return None

        code = cart.clear_discount(reason="expired")
        repo.add(cart)

        logger.info("Expired coupon cleared", session_id=command.session_id, coupon_code=code)
        return discounts.expired_message(code)


def apply_coupon(session_id, coupon_code):
    """Apply ``coupon_code`` to the session's cart; returns the confirmation message.

    An unknown code clears the previously active discount and then raises
    ``InvalidCoupon``.
    """
    try:
        return current_domain.process(
            ApplyCoupon(session_id=session_id, coupon_code=coupon_code),
            asynchronous=False,
        )
    except InvalidCoupon:
        current_domain.process(RemoveCoupon(session_id=session_id, reason="invalid"), asynchronous=False)
        raise
