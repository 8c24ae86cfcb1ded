"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, with no cross-user
sharing. The session token doubles as the cart identity.
"""

import uuid
from dataclasses import dataclass, field


def new_session_id() -> str:
    return f"lt-{uuid.uuid4().hex}"


@dataclass
class ShopperState:
    """Tracks a single shopper from browsing to a placed order."""

    session_id: str = field(default_factory=new_session_id)
    email: str | None = None
    product_ids: list[str] = field(default_factory=list)
    cart_item_count: int = 0
    coupon_code: str | None = None
    order_id: str | None = None
    order_status: str | None = None

    @property
    def headers(self) -> dict:
        return {"X-Session-Id": self.session_id}


@dataclass
class FlashSaleTally:
    """Outcome counts for one flash-sale user."""

    placed: int = 0
    sold_out: int = 0
