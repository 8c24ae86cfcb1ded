"""Order aggregate: the immutable record of a checkout.

Lines and money are snapshotted when the order is placed and never change
afterwards; the only mutable part is the status.

State Machine:
    PLACED → PROCESSING → DELIVERED
    PLACED → CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.errors import InvalidTransition
from storefront.order.events import OrderCancelled, OrderDelivered, OrderPlaced, OrderProcessing
from storefront.shared.pricing import grand_total, money

NOTES_MAX_LENGTH = 500

# Rounding slack when reconciling stored money fields
_TOLERANCE = 0.005


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "Placed"
    PROCESSING = "Processing"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    CREDIT_CARD = "Credit Card"
    PAYPAL = "PayPal"
    CASH_ON_DELIVERY = "Cash on Delivery"
    BANK_TRANSFER = "Bank Transfer"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

PENDING_STATES = {OrderStatus.PLACED, OrderStatus.PROCESSING}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, as entered at checkout."""

    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    zip_code = String(max_length=20)
    country = String(max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A product, its price at commit time and the quantity bought."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_id = Identifier(identifier=True, required=True)
    customer_email = String(required=True, max_length=254)
    customer_name = String(required=True, max_length=100)
    items = HasMany(OrderLine)
    subtotal = Float(required=True, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    discount_code = String(max_length=50)
    total = Float(required=True, min_value=0.0)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CREDIT_CARD.value)
    shipping_address = ValueObject(ShippingAddress)
    notes = Text()
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)
    created_at = DateTime()
    updated_at = DateTime()
    delivered_at = DateTime()

    @invariant.post
    def total_must_reconcile(self):
        expected = grand_total(self.subtotal, self.shipping, self.tax, self.discount)
        if abs((self.total or 0.0) - expected) > _TOLERANCE:
            raise ValidationError({"total": [f"Total {self.total} does not reconcile to {expected}"]})

    @invariant.post
    def line_subtotals_must_sum_to_subtotal(self):
        if self.items and abs(sum(line.subtotal for line in self.items) - (self.subtotal or 0.0)) > _TOLERANCE:
            raise ValidationError({"subtotal": ["Line subtotals do not add up to the order subtotal"]})

    @invariant.post
    def notes_must_fit(self):
        if self.notes and len(self.notes) > NOTES_MAX_LENGTH:
            raise ValidationError({"notes": [f"Notes cannot be more than {NOTES_MAX_LENGTH} characters"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_id,
        customer_email,
        customer_name,
        lines,
        pricing,
        payment_method=None,
        shipping_address=None,
        notes=None,
        discount_code=None,
    ):
        """Record a new order.

        Args:
            lines: List of dicts with product_id, name, unit_price, quantity.
            pricing: ``PriceBreakdown`` computed from the same lines.
            shipping_address: Dict with street, city, state, zip_code, country.
        """
        now = datetime.now(UTC)

        order = cls(
            order_id=order_id,
            customer_email=customer_email,
            customer_name=(customer_name or "").strip(),
            items=[
                OrderLine(
                    product_id=line["product_id"],
                    name=line["name"],
                    unit_price=line["unit_price"],
                    quantity=line["quantity"],
                    subtotal=money(line["unit_price"] * line["quantity"]),
                )
                for line in lines
            ],
            subtotal=pricing.subtotal,
            shipping=pricing.shipping,
            tax=pricing.tax,
            discount=pricing.discount,
            discount_code=discount_code,
            total=pricing.total,
            payment_method=payment_method or PaymentMethod.CREDIT_CARD.value,
            shipping_address=ShippingAddress(**shipping_address) if shipping_address else None,
            notes=(notes or "").strip() or None,
            status=OrderStatus.PLACED.value,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=order.order_id,
                customer_email=order.customer_email,
                item_count=order.item_count(),
                total=order.total,
                discount_code=discount_code,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    def item_count(self):
        return sum(line.quantity for line in self.items)

    def is_pending(self):
        return OrderStatus(self.status) in PENDING_STATES

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def start_processing(self):
        self._assert_can_transition(OrderStatus.PROCESSING)

        now = datetime.now(UTC)
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = now

        self.raise_(OrderProcessing(order_id=self.order_id, processing_at=now))

    def mark_delivered(self):
        """Deliver the order. ``delivered_at`` is stamped only the first time."""
        self._assert_can_transition(OrderStatus.DELIVERED)

        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        if self.delivered_at is None:
            self.delivered_at = now
        self.updated_at = now

        self.raise_(OrderDelivered(order_id=self.order_id, delivered_at=self.delivered_at))

    def cancel(self):
        """Cancel a placed order. Returning its stock is the caller's job."""
        current = OrderStatus(self.status)
        if current != OrderStatus.PLACED:
            raise InvalidTransition(
                {"status": [f"Cannot cancel order in {current.value} state. Only Placed orders can be cancelled"]}
            )

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(OrderCancelled(order_id=self.order_id, item_count=self.item_count(), cancelled_at=now))

    def advance_to(self, target_status):
        """Move to Processing or Delivered. Cancellation goes through ``cancel``."""
        transitions = {
            OrderStatus.PROCESSING: self.start_processing,
            OrderStatus.DELIVERED: self.mark_delivered,
        }
        if target_status not in transitions:
            current = OrderStatus(self.status)
            raise InvalidTransition(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )
        transitions[target_status]()
