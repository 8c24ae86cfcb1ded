"""Tests for the ShoppingCart aggregate."""

from datetime import UTC, datetime, timedelta

import pytest
from storefront.cart.cart import SESSION_TTL, ShoppingCart
from storefront.cart.discounts import COUPONS
from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CouponApplied,
    CouponRemoved,
)
from storefront.catalog.product import Product
from storefront.errors import CartLineNotFound, InsufficientStock, InvalidQuantity, OutOfStock


def _product(name="Desk Lamp", price=20.00, stock=5):
    return Product.create(name=name, description=f"{name} description", price=price, category="Home", stock=stock)


def _make_cart():
    return ShoppingCart.start("sess-001")


class TestStart:
    def test_cart_expires_after_session_ttl(self):
        now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
        cart = ShoppingCart.start("sess-001", now=now)
        assert cart.expires_at == now + SESSION_TTL
        assert not cart.is_expired(now + timedelta(hours=23))
        assert cart.is_expired(now + timedelta(hours=24))

    def test_new_cart_is_empty(self):
        cart = _make_cart()
        assert cart.is_empty()
        assert cart.item_count() == 0


class TestAddItem:
    def test_add_item_snapshots_product(self):
        cart = _make_cart()
        product = _product()
        cart.add_item(product, 2)

        line = cart.line_for(product.id)
        assert line.name == "Desk Lamp"
        assert line.price == 20.00
        assert line.quantity == 2
        assert line.max_stock == 5

    def test_add_item_raises_event(self):
        cart = _make_cart()
        product = _product()
        cart.add_item(product, 1)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 1
        assert added[0].product_id == str(product.id)
        assert added[0].line_quantity == 1

    def test_adding_same_product_merges_lines(self):
        cart = _make_cart()
        product = _product()
        cart.add_item(product, 1)
        cart.add_item(product, 2)
        assert len(cart.lines) == 1
        assert cart.item_count() == 3

    def test_merge_refreshes_stock_bound(self):
        cart = _make_cart()
        product = _product(stock=5)
        cart.add_item(product, 1)
        product.stock = 8
        cart.add_item(product, 1)
        assert cart.line_for(product.id).max_stock == 8

    def test_out_of_stock_product(self):
        cart = _make_cart()
        with pytest.raises(OutOfStock):
            cart.add_item(_product(stock=0), 1)
        assert cart.is_empty()

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(InvalidQuantity):
            _make_cart().add_item(_product(), quantity)

    def test_cannot_exceed_stock(self):
        cart = _make_cart()
        with pytest.raises(InsufficientStock):
            cart.add_item(_product(stock=2), 3)

    def test_existing_plus_new_cannot_exceed_stock(self):
        cart = _make_cart()
        product = _product(stock=3)
        cart.add_item(product, 2)
        with pytest.raises(InsufficientStock) as exc:
            cart.add_item(product, 2)
        assert exc.value.messages["quantity"] == ["Cannot add more than 3 items."]
        assert cart.line_for(product.id).quantity == 2

    def test_lines_keep_insertion_order(self):
        cart = _make_cart()
        first, second, third = _product("A"), _product("B"), _product("C")
        for product in (first, second, third):
            cart.add_item(product, 1)
        assert [line.name for line in cart.ordered_lines()] == ["A", "B", "C"]


class TestUpdateQuantity:
    def test_update_quantity(self):
        cart = _make_cart()
        product = _product()
        cart.add_item(product, 1)
        cart._events.clear()

        cart.update_quantity(product, 4)

        assert cart.line_for(product.id).quantity == 4
        event = cart._events[0]
        assert isinstance(event, CartQuantityUpdated)
        assert event.previous_quantity == 1
        assert event.new_quantity == 4

    def test_update_checked_against_live_stock(self):
        cart = _make_cart()
        product = _product(stock=5)
        cart.add_item(product, 1)
        product.stock = 2
        with pytest.raises(InsufficientStock):
            cart.update_quantity(product, 3)
        assert cart.line_for(product.id).quantity == 1

    def test_update_when_sold_out(self):
        cart = _make_cart()
        product = _product(stock=5)
        cart.add_item(product, 1)
        product.stock = 0
        with pytest.raises(OutOfStock):
            cart.update_quantity(product, 1)
        assert cart.line_for(product.id).quantity == 1

    def test_update_missing_line(self):
        with pytest.raises(CartLineNotFound):
            _make_cart().update_quantity(_product(), 1)

    def test_update_to_zero_rejected(self):
        cart = _make_cart()
        product = _product()
        cart.add_item(product, 1)
        with pytest.raises(InvalidQuantity):
            cart.update_quantity(product, 0)


class TestRemoveAndClear:
    def test_remove_item(self):
        cart = _make_cart()
        product = _product()
        cart.add_item(product, 1)
        assert cart.remove_item(product.id) == "Desk Lamp"
        assert cart.is_empty()
        assert any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_remove_absent_item_changes_nothing(self):
        cart = _make_cart()
        product = _product()
        cart.add_item(product, 1)
        with pytest.raises(CartLineNotFound):
            cart.remove_item("not-in-cart")
        assert cart.item_count() == 1

    def test_clear(self):
        cart = _make_cart()
        cart.add_item(_product("A"), 1)
        cart.add_item(_product("B"), 2)
        cart.clear()
        assert cart.is_empty()
        cleared = [e for e in cart._events if isinstance(e, CartCleared)]
        assert cleared[0].lines_removed == 2

    def test_clear_empty_cart(self):
        cart = _make_cart()
        cart.clear()
        assert cart.is_empty()


class TestTotals:
    def test_cart_totals(self):
        cart = _make_cart()
        cart.add_item(_product(price=20.00), 2)
        totals = cart.totals()
        assert totals.subtotal == 40.00
        assert totals.shipping == 5.99
        assert totals.tax == 3.20
        assert totals.total == 49.19

    def test_empty_cart_totals(self):
        assert _make_cart().totals().total == 0.0

    def test_item_count_sums_quantities(self):
        cart = _make_cart()
        cart.add_item(_product("A"), 2)
        cart.add_item(_product("B"), 3)
        assert cart.item_count() == 5


class TestDiscount:
    def test_apply_coupon(self):
        cart = _make_cart()
        cart.add_item(_product(price=50.00, stock=10), 2)
        cart.apply_coupon(COUPONS["SAVE10"])

        assert cart.discount.code == "SAVE10"
        assert cart.discount.value == 10.00
        assert cart.discount.message == 'Coupon "SAVE10" applied successfully!'
        assert any(isinstance(e, CouponApplied) for e in cart._events)

    def test_discount_recomputed_when_cart_changes(self):
        cart = _make_cart()
        product = _product(price=50.00, stock=10)
        cart.add_item(product, 2)
        cart.apply_coupon(COUPONS["SAVE10"])

        cart.update_quantity(product, 4)

        assert cart.discount.value == 20.00

    def test_replacing_coupon_removes_previous(self):
        cart = _make_cart()
        cart.add_item(_product(), 1)
        cart.apply_coupon(COUPONS["SAVE10"])
        cart.apply_coupon(COUPONS["WELCOME15"])

        assert cart.discount.code == "WELCOME15"
        removed = [e for e in cart._events if isinstance(e, CouponRemoved)]
        assert removed[0].coupon_code == "SAVE10"
        assert removed[0].reason == "replaced"

    def test_clear_discount(self):
        cart = _make_cart()
        cart.apply_coupon(COUPONS["FREESHIP"])
        assert cart.clear_discount(reason="invalid") == "FREESHIP"
        assert cart.discount is None

    def test_clear_discount_without_coupon(self):
        assert _make_cart().clear_discount(reason="invalid") is None

    def test_pricing_uses_checkout_shipping(self):
        cart = _make_cart()
        cart.add_item(_product(price=20.00), 1)
        cart.apply_coupon(COUPONS["FREESHIP"])
        assert cart.pricing() == (0.0, 0.0, 5.99)
