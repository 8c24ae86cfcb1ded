"""Checkout: turning a session cart into an Order.

``PlaceOrder`` validates every cart line against the live catalog before
touching any stock, prices the order from current catalog prices, takes
the stock line by line through the repository's conditional decrement and
records the order. The handler runs in one unit of work; if a decrement
fails part-way, the lines already taken are put back before the error
propagates, so a failed checkout leaves stock and orders exactly as they
were.

``checkout`` is the entry point used by the API. It takes the stock locks
of every product in the cart, drops an expired coupon and runs
``PlaceOrder`` while the locks are held.
"""

import random
import time

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.cart import discounts
from storefront.cart.cart import ShoppingCart
from storefront.cart.coupons import RevalidateCoupon
from storefront.catalog.locks import stock_locks
from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import CouponExpired, DuplicateId, EmptyCart, InsufficientStock, NotFound, ProductGone
from storefront.order.order import Order, PaymentMethod
from storefront.shared.email import normalize_email
from storefront.shared.pricing import checkout_totals, money

logger = structlog.get_logger(__name__)

ORDER_ID_ATTEMPTS = 5


def generate_order_id():
    """``ORD-<epoch milliseconds>-<4 random digits>``."""
    return f"ORD-{time.time_ns() // 1_000_000}-{random.randint(0, 9999):04d}"


@storefront.command(part_of="Order")
class PlaceOrder:
    session_id = String(required=True, max_length=255)
    customer_email = String(max_length=254)
    customer_name = String(required=True, max_length=100)
    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    zip_code = String(max_length=20)
    country = String(max_length=100)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CREDIT_CARD.value)
    notes = Text()


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        carts = current_domain.repository_for(ShoppingCart)
        cart = carts.for_session(command.session_id)
        if cart is None or cart.is_empty():
            raise EmptyCart({"cart": ["Your cart is empty."]})

        customer_email = normalize_email(command.customer_email)
        if cart.discount:
            discounts.ensure_not_expired(cart.discount.code)

        products = current_domain.repository_for(Product)
        # Every line is checked before any stock moves
        lines = [self._validated_line(products, line) for line in cart.ordered_lines()]

        subtotal = money(sum(money(line["unit_price"] * line["quantity"]) for line in lines))
        policy = cart.discount.policy if cart.discount else None
        shipping, discount, _ = discounts.resolve(policy, subtotal)
        pricing = checkout_totals(subtotal, shipping, discount)

        orders = current_domain.repository_for(Order)
        order = Order.place(
            order_id=self._new_order_id(orders),
            customer_email=customer_email,
            customer_name=command.customer_name,
            lines=lines,
            pricing=pricing,
            payment_method=command.payment_method,
            shipping_address={
                "street": command.street,
                "city": command.city,
                "state": command.state,
                "zip_code": command.zip_code,
                "country": command.country,
            },
            notes=command.notes,
            discount_code=policy.code if policy else None,
        )

        self._take_stock(products, lines)
        orders.add(order)

        cart.clear()
        cart.clear_discount(reason="consumed")
        carts.add(cart)

        logger.info(
            "Order placed",
            order_id=order.order_id,
            item_count=order.item_count(),
            total=order.total,
            discount_code=order.discount_code,
        )
        return {"order_id": order.order_id, "total": order.total}

    def _validated_line(self, products, line):
        try:
            product = products.get(line.product_id)
        except ObjectNotFoundError as exc:
            raise ProductGone({"product_id": [f'Product "{line.name}" is no longer available.']}) from exc

        if product.stock < line.quantity:
            raise InsufficientStock(
                {"stock": [f'Insufficient stock for "{product.name}". Only {product.stock} available.']}
            )

        return {
            "product_id": str(product.id),
            "name": product.name,
            "unit_price": product.price,
            "quantity": line.quantity,
        }

    def _take_stock(self, products, lines):
        taken = []
        try:
            for line in lines:
                products.conditional_decrement_stock(line["product_id"], line["quantity"])
                taken.append(line)
        except (InsufficientStock, NotFound):
            for line in taken:
                products.increment_stock(line["product_id"], line["quantity"])
            raise

    def _new_order_id(self, orders):
        for _ in range(ORDER_ID_ATTEMPTS):
            candidate = generate_order_id()
            if not orders.exists(candidate):
                return candidate
        raise DuplicateId({"order_id": ["Could not allocate a unique order id. Please try again."]})


def preview_order(session_id):
    """Checkout totals for the session's cart, at the prices shown in the cart.

    An expired coupon is dropped and its notice returned as ``message``.
    """
    notice = current_domain.process(RevalidateCoupon(session_id=session_id), asynchronous=False)

    cart = current_domain.repository_for(ShoppingCart).for_session(session_id)
    if cart is None or cart.is_empty():
        raise EmptyCart({"cart": ["Your cart is empty."]})

    shipping, discount, value = cart.pricing()
    return {
        "lines": cart.ordered_lines(),
        "item_count": cart.item_count(),
        "pricing": checkout_totals(cart.subtotal(), shipping, discount),
        "coupon_code": cart.discount.code if cart.discount else None,
        "discount_value": value,
        "message": notice or (cart.discount.message if cart.discount else None),
    }


def checkout(
    session_id,
    customer_email,
    customer_name,
    street=None,
    city=None,
    state=None,
    zip_code=None,
    country=None,
    payment_method=None,
    notes=None,
):
    """Place the order for the session's cart. Returns ``{"order_id", "total"}``."""
    cart = current_domain.repository_for(ShoppingCart).for_session(session_id)
    product_ids = [line.product_id for line in cart.lines] if cart else []

    with stock_locks(product_ids):
        notice = current_domain.process(RevalidateCoupon(session_id=session_id), asynchronous=False)
        if notice:
            logger.info("Checkout aborted", session_id=session_id, reason="CouponExpired")
            raise CouponExpired({"coupon_code": [notice]})

        try:
            return current_domain.process(
                PlaceOrder(
                    session_id=session_id,
                    customer_email=customer_email,
                    customer_name=customer_name,
                    street=street,
                    city=city,
                    state=state,
                    zip_code=zip_code,
                    country=country,
                    payment_method=payment_method or PaymentMethod.CREDIT_CARD.value,
                    notes=notes,
                ),
                asynchronous=False,
            )
        except (ValidationError, ObjectNotFoundError) as exc:
            logger.info("Checkout aborted", session_id=session_id, reason=type(exc).__name__)
            raise
