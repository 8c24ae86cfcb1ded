"""Money arithmetic and the two totals policies of the storefront.

The cart page charges the flat shipping fee on any non-empty cart. The
order preview and checkout waive shipping above ``FREE_SHIPPING_THRESHOLD``
and subtract the active discount. Every amount is rounded to the cent and
totals are derived from already-rounded components, so
``total == max(0, subtotal + shipping + tax - discount)`` holds exactly.
"""

from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Float

from storefront.domain import storefront

TAX_RATE = 0.08
SHIPPING_FEE = 5.99
FREE_SHIPPING_THRESHOLD = 50.00

_CENT = Decimal("0.01")


def money(amount) -> float:
    """Round ``amount`` half-up to two decimals."""
    return float(Decimal(str(amount or 0)).quantize(_CENT, rounding=ROUND_HALF_UP))


def tax_on(subtotal) -> float:
    return money(money(subtotal) * TAX_RATE)


def grand_total(subtotal, shipping, tax, discount) -> float:
    return money(max(0.0, money(subtotal) + money(shipping) + money(tax) - money(discount)))


@storefront.value_object
class PriceBreakdown:
    """Subtotal, shipping, tax, discount and grand total of a cart or order."""

    subtotal = Float(default=0.0, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)


def cart_totals(subtotal) -> PriceBreakdown:
    """Totals shown on the cart page: flat shipping, no discount."""
    subtotal = money(subtotal)
    shipping = SHIPPING_FEE if subtotal > 0 else 0.0
    tax = tax_on(subtotal)
    return PriceBreakdown(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        discount=0.0,
        total=grand_total(subtotal, shipping, tax, 0.0),
    )


def checkout_shipping(subtotal) -> float:
    return 0.0 if money(subtotal) > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE


def checkout_totals(subtotal, shipping, discount=0.0) -> PriceBreakdown:
    """Totals charged at checkout for an already-resolved shipping and discount."""
    subtotal = money(subtotal)
    tax = tax_on(subtotal)
    discount = money(discount)
    return PriceBreakdown(
        subtotal=subtotal,
        shipping=money(shipping),
        tax=tax,
        discount=discount,
        total=grand_total(subtotal, shipping, tax, discount),
    )
