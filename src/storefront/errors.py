"""Storefront error taxonomy.

Errors extend protean's exceptions so they carry a ``messages`` dict
(``{"field": ["message", ...]}``) like every other validation failure in
the domain, and so that code catching ``ValidationError`` or
``ObjectNotFoundError`` keeps working.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class NotFound(ObjectNotFoundError):
    """A product, order or cart line does not exist."""

    def __init__(self, messages):
        self.messages = messages
        super().__init__(messages)


class ProductNotFound(NotFound):
    pass


class OrderNotFound(NotFound):
    pass


class CartLineNotFound(NotFound):
    pass


class ProductGone(NotFound):
    """A product referenced by the cart disappeared before checkout."""


class InvalidInput(ValidationError):
    pass


class InvalidQuantity(InvalidInput):
    pass


class InvalidEmail(InvalidInput):
    pass


class InsufficientStock(ValidationError):
    pass


class OutOfStock(InsufficientStock):
    pass


class InvalidCoupon(ValidationError):
    pass


class CouponExpired(InvalidCoupon):
    pass


class EmptyCart(ValidationError):
    pass


class InvalidTransition(ValidationError):
    pass


class DuplicateId(ValidationError):
    """A freshly generated order id collided with an existing order."""
