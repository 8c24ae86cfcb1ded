import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Run each test in the storefront context and wipe its data afterwards."""
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture()
def add_product():
    """Factory: add a product to the catalog and return the loaded aggregate."""
    from protean import current_domain
    from storefront.catalog.creation import AddProduct
    from storefront.catalog.product import Product

    def _add(name="Wireless Headphones", price=20.00, stock=5, category="Electronics", **extra):
        product_id = current_domain.process(
            AddProduct(
                name=name,
                description=extra.pop("description", f"{name} for testing"),
                price=price,
                category=category,
                stock=stock,
                **extra,
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Product).get(product_id)

    return _add


@pytest.fixture()
def session_id():
    return "sess-test-0001"
