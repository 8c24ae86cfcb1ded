"""Product aggregate: the catalog record and the source of truth for stock.

Carts keep a display snapshot of a product's name and price, but every
stock decision (add to cart, quantity change, checkout) is made against the
live ``stock`` of this aggregate.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.catalog.events import ProductAdded, StockDecremented, StockRestored
from storefront.domain import storefront
from storefront.errors import InsufficientStock, InvalidQuantity
from storefront.shared.pricing import money

DEFAULT_IMAGE = "https://via.placeholder.com/300x200?text=No+Image"


class ProductCategory(Enum):
    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    BOOKS = "Books"
    HOME = "Home"
    SPORTS = "Sports"
    OTHER = "Other"

    @classmethod
    def lookup(cls, value):
        """Case-insensitive match against the category labels; None if unknown."""
        wanted = (value or "").strip().lower()
        return next((c for c in cls if c.value.lower() == wanted), None)


@storefront.aggregate
class Product:
    name = String(required=True, max_length=100)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    category = String(required=True, choices=ProductCategory)
    image = String(max_length=500, default=DEFAULT_IMAGE)
    stock = Integer(min_value=0, default=0)
    featured = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, description, price, category, stock=0, image=None, featured=False):
        now = datetime.now(UTC)
        matched = ProductCategory.lookup(category)
        product = cls(
            name=(name or "").strip(),
            description=(description or "").strip(),
            price=money(price) if price is not None else None,
            category=matched.value if matched else category,
            stock=stock,
            image=image or DEFAULT_IMAGE,
            featured=bool(featured),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                category=product.category,
                price=product.price,
                stock=product.stock,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def is_available(self, quantity=1):
        return self.stock >= quantity

    def decrement_stock(self, quantity):
        """Take ``quantity`` units out of stock; refuses rather than going negative."""
        if quantity is None or quantity < 1:
            raise InvalidQuantity({"quantity": ["Quantity must be at least 1."]})
        if self.stock < quantity:
            raise InsufficientStock(
                {"stock": [f'Insufficient stock for "{self.name}". Only {self.stock} available.']}
            )

        previous = self.stock
        self.stock = previous - quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                decremented_at=now,
            )
        )

    def restore_stock(self, quantity):
        if quantity is None or quantity < 1:
            raise InvalidQuantity({"quantity": ["Quantity must be at least 1."]})

        previous = self.stock
        self.stock = previous + quantity
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                restored_at=now,
            )
        )
