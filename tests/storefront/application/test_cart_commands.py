"""Application tests for cart commands."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import PurgeExpiredCarts
from storefront.catalog.product import Product
from storefront.errors import CartLineNotFound, InsufficientStock, OutOfStock, ProductNotFound


def _cart(session_id):
    return current_domain.repository_for(ShoppingCart).for_session(session_id)


def _add(session_id, product_id, quantity=1):
    return current_domain.process(
        AddToCart(session_id=session_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


class TestAddToCartCommand:
    def test_first_add_starts_a_cart(self, add_product, session_id):
        product = add_product(stock=5)
        _add(session_id, product.id, 2)

        cart = _cart(session_id)
        assert cart.item_count() == 2
        assert cart.line_for(product.id).max_stock == 5

    def test_adds_go_to_the_same_cart(self, add_product, session_id):
        first = add_product("A")
        second = add_product("B")
        cart_id = _add(session_id, first.id)
        assert _add(session_id, second.id) == cart_id
        assert len(_cart(session_id).lines) == 2

    def test_sessions_are_isolated(self, add_product):
        product = add_product()
        _add("sess-a", product.id, 1)
        _add("sess-b", product.id, 3)
        assert _cart("sess-a").item_count() == 1
        assert _cart("sess-b").item_count() == 3

    def test_unknown_product(self, session_id):
        with pytest.raises(ProductNotFound):
            _add(session_id, "missing")

    def test_out_of_stock(self, add_product, session_id):
        product = add_product(stock=0)
        with pytest.raises(OutOfStock):
            _add(session_id, product.id)
        assert _cart(session_id) is None

    def test_insufficient_stock_leaves_cart_unchanged(self, add_product, session_id):
        product = add_product(stock=3)
        _add(session_id, product.id, 2)
        with pytest.raises(InsufficientStock):
            _add(session_id, product.id, 2)
        assert _cart(session_id).item_count() == 2

    def test_adding_does_not_touch_stock(self, add_product, session_id):
        product = add_product(stock=5)
        _add(session_id, product.id, 4)
        assert current_domain.repository_for(Product).get(product.id).stock == 5


class TestUpdateCartQuantityCommand:
    def test_update_quantity_persists(self, add_product, session_id):
        product = add_product(stock=5)
        _add(session_id, product.id)
        current_domain.process(
            UpdateCartQuantity(session_id=session_id, product_id=product.id, quantity=4),
            asynchronous=False,
        )
        assert _cart(session_id).line_for(product.id).quantity == 4

    def test_update_beyond_stock(self, add_product, session_id):
        product = add_product(stock=2)
        _add(session_id, product.id)
        with pytest.raises(InsufficientStock):
            current_domain.process(
                UpdateCartQuantity(session_id=session_id, product_id=product.id, quantity=3),
                asynchronous=False,
            )

    def test_update_line_not_in_cart(self, add_product, session_id):
        product = add_product()
        with pytest.raises(CartLineNotFound):
            current_domain.process(
                UpdateCartQuantity(session_id=session_id, product_id=product.id, quantity=1),
                asynchronous=False,
            )


class TestRemoveAndClearCommands:
    def test_remove_item(self, add_product, session_id):
        product = add_product()
        _add(session_id, product.id)
        name = current_domain.process(
            RemoveFromCart(session_id=session_id, product_id=product.id),
            asynchronous=False,
        )
        assert name == product.name
        assert _cart(session_id).is_empty()

    def test_remove_absent_item_reports_not_found(self, add_product, session_id):
        product = add_product()
        _add(session_id, product.id)
        with pytest.raises(CartLineNotFound):
            current_domain.process(
                RemoveFromCart(session_id=session_id, product_id="not-in-cart"),
                asynchronous=False,
            )
        assert _cart(session_id).item_count() == 1

    def test_remove_without_cart(self, session_id):
        with pytest.raises(CartLineNotFound):
            current_domain.process(RemoveFromCart(session_id=session_id, product_id="x"), asynchronous=False)

    def test_clear_cart(self, add_product, session_id):
        _add(session_id, add_product("A").id)
        _add(session_id, add_product("B").id, 2)
        current_domain.process(ClearCart(session_id=session_id), asynchronous=False)
        assert _cart(session_id).is_empty()

    def test_clear_without_cart_is_a_no_op(self, session_id):
        current_domain.process(ClearCart(session_id=session_id), asynchronous=False)
        assert _cart(session_id) is None


class TestSessionExpiry:
    def test_expired_cart_is_ignored(self, add_product, session_id):
        _add(session_id, add_product().id)
        tomorrow = datetime.now(UTC) + timedelta(hours=25)
        assert current_domain.repository_for(ShoppingCart).for_session(session_id, now=tomorrow) is None

    def test_purge_expired_carts(self, add_product):
        product = add_product()
        _add("sess-old", product.id)
        purged = current_domain.process(
            PurgeExpiredCarts(as_of=datetime.now(UTC) + timedelta(hours=25)),
            asynchronous=False,
        )
        assert purged == 1
        assert current_domain.repository_for(ShoppingCart).expired() == []
        assert _cart("sess-old") is None

    def test_purge_removes_every_expired_cart(self):
        repo = current_domain.repository_for(ShoppingCart)
        long_ago = datetime.now(UTC) - timedelta(days=3)
        for i in range(105):
            repo.add(ShoppingCart.start(f"sess-stale-{i:03d}", now=long_ago))

        assert current_domain.process(PurgeExpiredCarts(), asynchronous=False) == 105
        assert repo.expired() == []

    def test_purge_keeps_live_carts(self, add_product, session_id):
        _add(session_id, add_product().id)
        assert current_domain.process(PurgeExpiredCarts(), asynchronous=False) == 0
        assert _cart(session_id) is not None
