"""Application tests for catalog commands and repository queries."""

import pytest
from protean import current_domain
from storefront.catalog.creation import AddProduct
from storefront.catalog.product import Product
from storefront.catalog.repository import ProductFilter, ProductSort
from storefront.errors import InsufficientStock, InvalidInput, ProductNotFound


def _repo():
    return current_domain.repository_for(Product)


@pytest.fixture()
def catalog(add_product):
    return {
        "headphones": add_product("Wireless Headphones", price=199.99, stock=50, featured=True),
        "watch": add_product("Smart Watch", price=299.99, stock=30, featured=True),
        "speaker": add_product("Bluetooth Speaker", price=79.99, stock=45),
        "lamp": add_product("Desk Lamp", price=39.99, stock=60, category="Home"),
        "backpack": add_product("Backpack", price=59.99, stock=100, category="Clothing"),
    }


class TestAddProduct:
    def test_add_product_persists(self):
        product_id = current_domain.process(
            AddProduct(
                name="Yoga Mat",
                description="Non-slip mat",
                price=24.5,
                category="Sports",
                stock=12,
            ),
            asynchronous=False,
        )
        product = _repo().get(product_id)
        assert product.name == "Yoga Mat"
        assert product.stock == 12

    def test_get_missing_product(self):
        with pytest.raises(ProductNotFound):
            _repo().get_product("missing")


class TestListing:
    def test_list_by_category_is_case_insensitive(self, catalog):
        names = {p.name for p in _repo().list_by_category("electronics")}
        assert names == {"Wireless Headphones", "Smart Watch", "Bluetooth Speaker"}

    def test_list_unknown_category(self, catalog):
        assert _repo().list_by_category("Gadgets") == []

    def test_search_by_text(self, catalog):
        results = _repo().search(ProductFilter(search="speaker"))
        assert [p.name for p in results] == ["Bluetooth Speaker"]

    def test_search_matches_description(self, add_product):
        add_product("Kettle", description="Boils water fast", category="Home")
        assert [p.name for p in _repo().search(ProductFilter(search="WATER"))] == ["Kettle"]

    def test_price_range(self, catalog):
        results = _repo().search(ProductFilter(min_price=50, max_price=200, sort=ProductSort.PRICE_LOW))
        assert [p.name for p in results] == ["Backpack", "Bluetooth Speaker", "Wireless Headphones"]

    def test_sort_price_high(self, catalog):
        results = _repo().search(ProductFilter(sort=ProductSort.PRICE_HIGH, limit=2))
        assert [p.name for p in results] == ["Smart Watch", "Wireless Headphones"]

    def test_sort_name(self, catalog):
        results = _repo().search(ProductFilter(category="Electronics", sort=ProductSort.NAME))
        assert [p.name for p in results] == ["Bluetooth Speaker", "Smart Watch", "Wireless Headphones"]

    def test_related_excludes_product(self, catalog):
        related = _repo().related(catalog["watch"])
        assert {p.name for p in related} == {"Wireless Headphones", "Bluetooth Speaker"}

    def test_related_capped_at_four(self, add_product):
        products = [add_product(f"Gadget {i}") for i in range(6)]
        assert len(_repo().related(products[0])) == 4

    def test_featured(self, catalog):
        assert {p.name for p in _repo().featured()} == {"Wireless Headphones", "Smart Watch"}


class TestLargeCatalog:
    """Queries see every product, not just the first page of the store."""

    @pytest.fixture()
    def shelf(self, add_product):
        for i in range(110):
            add_product(f"Novel {i:03d}", price=100.00 + i, stock=1, category="Books")
        return add_product("Cheapest", price=1.00, stock=1, category="Books")

    def test_list_by_category_returns_all(self, shelf):
        assert len(_repo().list_by_category("Books")) == 111

    def test_sort_covers_whole_catalog(self, shelf):
        found = _repo().search(ProductFilter.build(sort="price-low", limit=5))
        assert [p.name for p in found] == ["Cheapest", "Novel 000", "Novel 001", "Novel 002", "Novel 003"]

    def test_filter_covers_whole_catalog(self, shelf):
        found = _repo().search(ProductFilter.build(max_price=1.00))
        assert [p.name for p in found] == ["Cheapest"]


class TestProductFilterBuild:
    def test_defaults(self):
        criteria = ProductFilter.build()
        assert criteria.sort is ProductSort.NEWEST
        assert criteria.limit == 50

    def test_unknown_sort_rejected(self):
        with pytest.raises(InvalidInput):
            ProductFilter.build(sort="random")

    def test_inverted_price_range_rejected(self):
        with pytest.raises(InvalidInput):
            ProductFilter.build(min_price=100, max_price=10)


class TestStockPrimitives:
    def test_conditional_decrement(self, add_product):
        product = add_product(stock=5)
        _repo().conditional_decrement_stock(product.id, 2)
        assert _repo().get(product.id).stock == 3

    def test_conditional_decrement_refuses_oversell(self, add_product):
        product = add_product(stock=1)
        with pytest.raises(InsufficientStock):
            _repo().conditional_decrement_stock(product.id, 2)
        assert _repo().get(product.id).stock == 1

    def test_conditional_decrement_missing_product(self):
        with pytest.raises(ProductNotFound):
            _repo().conditional_decrement_stock("missing", 1)

    def test_increment(self, add_product):
        product = add_product(stock=1)
        assert _repo().increment_stock(product.id, 3) is True
        assert _repo().get(product.id).stock == 4

    def test_increment_missing_product(self):
        assert _repo().increment_stock("missing", 3) is False

    def test_last_unit_goes_to_exactly_one_caller(self, add_product):
        product = add_product(stock=1)
        _repo().conditional_decrement_stock(product.id, 1)
        with pytest.raises(InsufficientStock):
            _repo().conditional_decrement_stock(product.id, 1)
        assert _repo().get(product.id).stock == 0
