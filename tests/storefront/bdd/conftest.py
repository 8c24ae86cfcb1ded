"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart
from storefront.catalog.product import Product
from storefront.checkout.placement import checkout
from storefront.order.order import Order

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the error raised by the last When step."""
    return {"exc": None}


@pytest.fixture()
def catalog():
    """Product ids by name, for products created in Given steps."""
    return {}


@pytest.fixture()
def outcome():
    """Results of checkouts run in the scenario."""
    return {"orders": [], "failures": []}


@pytest.fixture()
def other_session_id():
    return "sess-test-0002"


@pytest.fixture()
def checkout_as():
    """Check out a session's cart with a fixed customer and address."""
    return _checkout_for


@pytest.fixture()
def latest_order(outcome):
    """Loads the most recently placed order of the scenario."""
    return lambda: _placed_order(outcome)


def _checkout_for(session_id):
    return checkout(
        session_id=session_id,
        customer_email="Jane.Doe@Example.com",
        customer_name="Jane Doe",
        street="123 Main St",
        city="Springfield",
        state="IL",
        zip_code="62701",
        country="US",
    )


def _stock_of(catalog, name):
    return current_domain.repository_for(Product).get(catalog[name]).stock


def _placed_order(outcome):
    return current_domain.repository_for(Order).get_order(outcome["orders"][-1]["order_id"])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(add_product, catalog, name, price, stock):
    catalog[name] = str(add_product(name=name, price=price, stock=stock).id)


@given(parsers.cfparse('the cart holds {qty:d} of "{name}"'))
@when(parsers.cfparse('the cart holds {qty:d} more of "{name}"'))
def _(catalog, session_id, qty, name):
    current_domain.process(
        AddToCart(session_id=session_id, product_id=catalog[name], quantity=qty),
        asynchronous=False,
    )


@given(parsers.cfparse('another customer\'s cart holds {qty:d} of "{name}"'))
def _(catalog, other_session_id, qty, name):
    current_domain.process(
        AddToCart(session_id=other_session_id, product_id=catalog[name], quantity=qty),
        asynchronous=False,
    )


@given(parsers.cfparse('only {stock:d} of "{name}" remain in stock'))
def _(catalog, stock, name):
    repo = current_domain.repository_for(Product)
    product = repo.get(catalog[name])
    product.stock = stock
    repo.add(product)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@given("the customer checks out")
@when("the customer checks out")
def _(session_id, outcome, error):
    try:
        outcome["orders"].append(_checkout_for(session_id))
    except (ValidationError, ObjectNotFoundError) as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the checkout succeeds")
def _(outcome, error):
    assert error["exc"] is None
    assert len(outcome["orders"]) == 1


@then(parsers.cfparse('the checkout fails with "{error_name}"'))
def _(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name


@then(parsers.cfparse('the stock of "{name}" is {stock:d}'))
def _(catalog, name, stock):
    assert _stock_of(catalog, name) == stock


@then("no order is recorded")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().total == 0


@then(parsers.cfparse("the order subtotal is {amount:f}"))
def _(outcome, amount):
    assert _placed_order(outcome).subtotal == pytest.approx(amount)


@then(parsers.cfparse("the order shipping is {amount:f}"))
def _(outcome, amount):
    assert _placed_order(outcome).shipping == pytest.approx(amount)


@then(parsers.cfparse("the order discount is {amount:f}"))
def _(outcome, amount):
    assert _placed_order(outcome).discount == pytest.approx(amount)


@then(parsers.cfparse("the order total is {amount:f}"))
def _(outcome, amount):
    order = _placed_order(outcome)
    assert order.total == pytest.approx(amount)
    assert outcome["orders"][-1]["total"] == pytest.approx(amount)


@then("the cart has no discount")
def _(session_id):
    cart = current_domain.repository_for(ShoppingCart).for_session(session_id)
    assert cart is None or not cart.discount
