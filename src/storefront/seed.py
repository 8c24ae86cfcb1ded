"""Starter catalog for demos and load tests."""

from protean.utils.globals import current_domain

from storefront.catalog.creation import AddProduct

CATALOG = [
    {
        "name": "Wireless Headphones",
        "description": "Premium wireless headphones with noise cancellation",
        "price": 199.99,
        "category": "Electronics",
        "stock": 50,
        "featured": True,
    },
    {
        "name": "Smart Watch",
        "description": "Fitness tracker with heart rate monitor",
        "price": 299.99,
        "category": "Electronics",
        "stock": 30,
        "featured": True,
    },
    {
        "name": "Coffee Maker",
        "description": "Automatic coffee maker with timer",
        "price": 89.99,
        "category": "Home",
        "stock": 25,
        "featured": True,
    },
    {
        "name": "Backpack",
        "description": "Water-resistant backpack with laptop compartment",
        "price": 59.99,
        "category": "Clothing",
        "stock": 100,
    },
    {
        "name": "Bluetooth Speaker",
        "description": "Portable speaker with 12-hour battery",
        "price": 79.99,
        "category": "Electronics",
        "stock": 45,
    },
    {
        "name": "Desk Lamp",
        "description": "LED desk lamp with adjustable brightness",
        "price": 39.99,
        "category": "Home",
        "stock": 60,
    },
]


def seed_catalog(products=None) -> list[str]:
    """Add ``products`` (default: the starter catalog) and return their ids."""
    return [
        current_domain.process(AddProduct(**product), asynchronous=False) for product in (products or CATALOG)
    ]
