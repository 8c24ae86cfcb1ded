"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased by an add."""

    __version__ = 1

    cart_id = Identifier(required=True)
    session_id = String(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """All lines were removed, explicitly or after a successful checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    lines_removed = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CouponApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    kind = String(required=True)
    value = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CouponRemoved:
    """The active coupon was cleared (replaced, invalid, expired or consumed)."""

    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    reason = String(required=True)
