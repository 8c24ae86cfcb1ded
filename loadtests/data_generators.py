"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that match the field names expected by
the Storefront API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

CATEGORIES = ["Electronics", "Clothing", "Books", "Home", "Sports", "Other"]

SORTS = ["newest", "price-low", "price-high", "name"]

# Weighted towards valid codes; an invalid one exercises the rejection path
COUPON_CODES = ["SAVE10", "WELCOME15", "HOLIDAY25", "FREESHIP", "FOO123", None]

PAYMENT_METHODS = ["Credit Card", "PayPal", "Cash on Delivery", "Bank Transfer"]


def valid_email() -> str:
    """Mixed-case email, so the server-side normalization is exercised."""
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local.title()}.{uuid.uuid4().hex[:4]}@{domain.upper()}"


def catalog_query() -> dict:
    """Random filter set for ``GET /products``."""
    params = {"sort": random.choice(SORTS)}
    if random.random() < 0.5:
        params["category"] = random.choice(CATEGORIES)
    if random.random() < 0.3:
        params["search"] = random.choice(["wireless", "shoe", "coffee", "watch", "lamp"])
    if random.random() < 0.3:
        low = random.choice([0, 10, 25, 50])
        params["min_price"] = low
        params["max_price"] = low + random.choice([25, 100, 500])
    return params


def cart_quantity() -> int:
    return random.choices([1, 2, 3], weights=[6, 3, 1])[0]


def coupon_code() -> str | None:
    return random.choice(COUPON_CODES)


def checkout_data(email: str | None = None) -> dict:
    """Generate a CheckoutRequest payload."""
    return {
        "customer_email": email or valid_email(),
        "customer_name": fake.name()[:100],
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
        "country": "US",
        "payment_method": random.choice(PAYMENT_METHODS),
        "notes": fake.sentence()[:500] if random.random() < 0.2 else None,
    }
