"""Repository and catalog queries for the Product aggregate."""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import ObjectNotFoundError

from storefront.catalog.locks import lock_for
from storefront.catalog.product import Product, ProductCategory
from storefront.domain import storefront
from storefront.errors import InvalidInput, ProductNotFound

logger = structlog.get_logger(__name__)

RELATED_LIMIT = 4
FEATURED_LIMIT = 3
DEFAULT_PAGE_SIZE = 50


class ProductSort(Enum):
    NEWEST = "newest"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    NAME = "name"


@dataclass
class ProductFilter:
    """Browse criteria for the catalog listing."""

    category: str | None = None
    search: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort: ProductSort = ProductSort.NEWEST
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def build(cls, category=None, search=None, min_price=None, max_price=None, sort=None, limit=None):
        """Build a filter from loosely typed query parameters."""
        try:
            ordering = ProductSort(sort) if sort else ProductSort.NEWEST
        except ValueError as exc:
            choices = ", ".join(s.value for s in ProductSort)
            raise InvalidInput({"sort": [f"Sort must be one of: {choices}."]}) from exc

        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidInput({"price": ["Minimum price cannot exceed maximum price."]})

        if limit is not None and limit < 1:
            raise InvalidInput({"limit": ["Limit must be at least 1."]})

        return cls(
            category=category or None,
            search=(search or "").strip() or None,
            min_price=min_price,
            max_price=max_price,
            sort=ordering,
            limit=limit or DEFAULT_PAGE_SIZE,
        )


def _sorted(products, sort):
    if sort is ProductSort.PRICE_LOW:
        return sorted(products, key=lambda p: p.price)
    if sort is ProductSort.PRICE_HIGH:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort is ProductSort.NAME:
        return sorted(products, key=lambda p: p.name.lower())
    return sorted(products, key=lambda p: (p.created_at is not None, p.created_at or 0), reverse=True)


@storefront.repository(part_of=Product)
class ProductRepository:
    def get_product(self, product_id) -> Product:
        """Load a product or raise ``ProductNotFound``."""
        try:
            return self.get(product_id)
        except ObjectNotFoundError as exc:
            raise ProductNotFound({"product_id": [f"Product {product_id} not found."]}) from exc

    def list_by_category(self, category) -> list[Product]:
        matched = ProductCategory.lookup(category)
        if matched is None:
            return []
        return _sorted(self._dao.query.filter(category=matched.value).limit(None).all().items, ProductSort.NEWEST)

    def search(self, criteria: ProductFilter) -> list[Product]:
        """Filter, sort and truncate the catalog according to ``criteria``."""
        if criteria.category:
            products = self.list_by_category(criteria.category)
        else:
            products = self._dao.query.limit(None).all().items

        if criteria.search:
            needle = criteria.search.lower()
            products = [p for p in products if needle in p.name.lower() or needle in (p.description or "").lower()]
        if criteria.min_price is not None:
            products = [p for p in products if p.price >= criteria.min_price]
        if criteria.max_price is not None:
            products = [p for p in products if p.price <= criteria.max_price]

        return _sorted(products, criteria.sort)[: criteria.limit]

    def related(self, product: Product, limit=RELATED_LIMIT) -> list[Product]:
        """Other products in the same category, newest first."""
        return [p for p in self.list_by_category(product.category) if p.id != product.id][:limit]

    def featured(self, limit=FEATURED_LIMIT) -> list[Product]:
        return _sorted(self._dao.query.filter(featured=True).limit(None).all().items, ProductSort.NEWEST)[:limit]

    # -------------------------------------------------------------------
    # Stock primitives
    # -------------------------------------------------------------------
    def conditional_decrement_stock(self, product_id, quantity) -> Product:
        """Decrement stock only if at least ``quantity`` units remain.

        The read, check and write happen under the product's stock lock, so
        concurrent callers can never drive stock below zero.
        """
        with lock_for(product_id):
            product = self.get_product(product_id)
            product.decrement_stock(quantity)
            self.add(product)
            return product

    def increment_stock(self, product_id, quantity) -> bool:
        """Return ``quantity`` units to stock. False if the product no longer exists."""
        with lock_for(product_id):
            try:
                product = self.get(product_id)
            except ObjectNotFoundError:
                logger.warning("Stock restore skipped, product missing", product_id=str(product_id), quantity=quantity)
                return False
            product.restore_stock(quantity)
            self.add(product)
            return True
