"""Coupon evaluation: maps a coupon code to a discount policy.

Stateless: the cart stores only which code is active, and the discount
amount is recomputed from the current subtotal every time it is needed.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from storefront.errors import CouponExpired, InvalidCoupon
from storefront.shared.pricing import checkout_shipping, money

logger = structlog.get_logger(__name__)


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FREE_SHIPPING = "free-shipping"


@dataclass(frozen=True)
class CouponPolicy:
    code: str
    kind: DiscountKind
    rate: float = 0.0


COUPONS = {
    "SAVE10": CouponPolicy("SAVE10", DiscountKind.PERCENTAGE, 0.10),
    "WELCOME15": CouponPolicy("WELCOME15", DiscountKind.PERCENTAGE, 0.15),
    "HOLIDAY25": CouponPolicy("HOLIDAY25", DiscountKind.PERCENTAGE, 0.25),
    "HOLIDAY2023": CouponPolicy("HOLIDAY2023", DiscountKind.PERCENTAGE, 0.20),
    "FREESHIP": CouponPolicy("FREESHIP", DiscountKind.FREE_SHIPPING),
}

# Codes still accepted by ``evaluate`` but refused at preview and checkout
EXPIRED_COUPONS = frozenset({"HOLIDAY2023"})


def normalize_code(raw_code) -> str:
    return (raw_code or "").strip().upper()


def applied_message(code) -> str:
    return f'Coupon "{code}" applied successfully!'


def expired_message(code) -> str:
    return f'Coupon "{code}" has expired.'


def evaluate(raw_code) -> CouponPolicy | None:
    """Resolve a raw coupon string to its policy.

    Returns None for an empty code. Raises ``InvalidCoupon`` for an unknown one.
    """
    code = normalize_code(raw_code)
    if not code:
        return None

    policy = COUPONS.get(code)
    if policy is None:
        logger.info("Coupon rejected", coupon_code=code)
        raise InvalidCoupon({"coupon_code": [f'Invalid coupon code: "{code}". Please try again.']})

    return policy


def is_expired(code) -> bool:
    return normalize_code(code) in EXPIRED_COUPONS


def ensure_not_expired(code) -> None:
    if is_expired(code):
        raise CouponExpired({"coupon_code": [expired_message(normalize_code(code))]})


def resolve(policy, subtotal):
    """Apply ``policy`` to ``subtotal`` under the checkout shipping rule.

    Returns ``(shipping, discount, value)``: the shipping to charge, the
    amount subtracted from the total, and the saving reported to the
    customer. A percentage discount never exceeds the subtotal; free
    shipping zeroes the shipping line and reports the waived fee.
    """
    subtotal = money(subtotal)
    shipping = checkout_shipping(subtotal)

    if policy is None:
        return shipping, 0.0, 0.0

    if policy.kind is DiscountKind.FREE_SHIPPING:
        return 0.0, 0.0, shipping

    discount = min(money(subtotal * policy.rate), subtotal)
    return shipping, discount, discount
