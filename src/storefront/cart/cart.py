"""Shopping Cart aggregate: the per-session cart.

One cart per session token. A cart lives for ``SESSION_TTL`` from the
moment it is started; after that it is treated as absent and is removed by
the purge command. Lines keep a display snapshot of name and price taken
when the product was first added, but every stock check is made against
the live ``Product`` handed in by the caller.
"""

from datetime import UTC, datetime, timedelta

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.cart.discounts import COUPONS, DiscountKind, applied_message, resolve
from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CouponApplied,
    CouponRemoved,
)
from storefront.domain import storefront
from storefront.errors import CartLineNotFound, InsufficientStock, InvalidQuantity, OutOfStock
from storefront.shared.pricing import cart_totals, money

SESSION_TTL = timedelta(hours=24)


@storefront.entity(part_of="ShoppingCart")
class CartLine:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    image = String(max_length=500)
    quantity = Integer(required=True, min_value=1)
    max_stock = Integer(min_value=0)
    position = Integer(min_value=0, default=0)

    def line_total(self):
        return money(self.price * self.quantity)


@storefront.value_object
class DiscountState:
    """The coupon active on a cart and the saving it currently yields."""

    code = String(required=True, max_length=50)
    kind = String(required=True, choices=DiscountKind)
    rate = Float(default=0.0, min_value=0.0)
    value = Float(default=0.0, min_value=0.0)
    message = String(max_length=255)

    @property
    def policy(self):
        return COUPONS[self.code]


def _as_utc(moment):
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def _quantity_must_be_positive(quantity):
    if quantity is None or quantity < 1:
        raise InvalidQuantity({"quantity": ["Quantity must be at least 1."]})


@storefront.aggregate
class ShoppingCart:
    session_id = String(required=True, max_length=255)
    lines = HasMany(CartLine)
    discount = ValueObject(DiscountState)
    created_at = DateTime()
    expires_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def start(cls, session_id, now=None):
        now = now or datetime.now(UTC)
        return cls(
            session_id=session_id,
            created_at=now,
            expires_at=now + SESSION_TTL,
            updated_at=now,
        )

    def is_expired(self, now=None):
        return _as_utc(now or datetime.now(UTC)) >= _as_utc(self.expires_at)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def ordered_lines(self):
        """Lines in the order they were first added."""
        return sorted(self.lines, key=lambda line: line.position)

    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def is_empty(self):
        return not self.lines

    def item_count(self):
        return sum(line.quantity for line in self.lines)

    def subtotal(self):
        return money(sum(line.price * line.quantity for line in self.lines))

    def totals(self):
        """Cart page totals: flat shipping on any non-empty cart, discount not applied."""
        return cart_totals(self.subtotal())

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Add ``quantity`` units of ``product`` (merging into an existing line)."""
        if product.stock < 1:
            raise OutOfStock({"stock": ["This product is out of stock."]})
        _quantity_must_be_positive(quantity)

        existing = self.line_for(product.id)
        line_quantity = (existing.quantity if existing else 0) + quantity
        if line_quantity > product.stock:
            if existing:
                message = f"Cannot add more than {product.stock} items."
            else:
                message = f"Only {product.stock} items available in stock."
            raise InsufficientStock({"quantity": [message]})

        if existing:
            existing.quantity = line_quantity
            existing.max_stock = product.stock
        else:
            self.add_lines(
                CartLine(
                    product_id=str(product.id),
                    name=product.name,
                    price=product.price,
                    image=product.image,
                    quantity=quantity,
                    max_stock=product.stock,
                    position=max((line.position for line in self.lines), default=-1) + 1,
                )
            )

        self._touched()
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                session_id=self.session_id,
                product_id=str(product.id),
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )

    def update_quantity(self, product, quantity):
        """Set the quantity of the line for ``product``, checked against live stock."""
        if product.stock < 1:
            raise OutOfStock({"stock": ["This product is out of stock."]})
        _quantity_must_be_positive(quantity)
        if quantity > product.stock:
            raise InsufficientStock({"quantity": [f"Only {product.stock} items available in stock."]})

        line = self.line_for(product.id)
        if line is None:
            raise CartLineNotFound({"product_id": ["Item not found in cart."]})

        previous = line.quantity
        line.quantity = quantity
        line.max_stock = product.stock

        self._touched()
        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product.id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        line = self.line_for(product_id)
        if line is None:
            raise CartLineNotFound({"product_id": ["Item not found in cart."]})

        self.remove_lines(line)

        self._touched()
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))
        return line.name

    def clear(self):
        removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)

        self._touched()
        self.raise_(CartCleared(cart_id=str(self.id), lines_removed=removed))

    # -------------------------------------------------------------------
    # Discount
    # -------------------------------------------------------------------
    def apply_coupon(self, policy):
        """Make ``policy`` the active coupon, replacing any previous one."""
        if self.discount and self.discount.code != policy.code:
            self.clear_discount(reason="replaced")

        self.discount = self._discount_state(policy)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CouponApplied(
                cart_id=str(self.id),
                coupon_code=policy.code,
                kind=policy.kind.value,
                value=self.discount.value,
            )
        )

    def clear_discount(self, reason):
        """Drop the active coupon, if any. Returns the code that was cleared."""
        if not self.discount:
            return None

        code = self.discount.code
        self.discount = None
        self.updated_at = datetime.now(UTC)

        self.raise_(CouponRemoved(cart_id=str(self.id), coupon_code=code, reason=reason))
        return code

    def pricing(self):
        """``(shipping, discount, value)`` of the active coupon at the cart's snapshot prices."""
        return resolve(self.discount.policy if self.discount else None, self.subtotal())

    def _discount_state(self, policy):
        _, _, value = resolve(policy, self.subtotal())
        return DiscountState(
            code=policy.code,
            kind=policy.kind.value,
            rate=policy.rate,
            value=value,
            message=applied_message(policy.code),
        )

    def _touched(self):
        """Stamp the change and re-derive the discount from the new subtotal."""
        self.updated_at = datetime.now(UTC)
        if self.discount:
            self.discount = self._discount_state(self.discount.policy)
