"""Catalog browsing load scenario.

Read-only traffic: listing with filters, featured products and product
detail pages. No session token is needed.
"""

import random

from locust import HttpUser, between, task

from loadtests.data_generators import catalog_query


class BrowsingUser(HttpUser):
    """Window shopper. Lists, filters and opens product pages."""

    wait_time = between(0.5, 2)

    def on_start(self):
        self.product_ids = []
        self.list_products()

    @task(5)
    def list_products(self):
        with self.client.get(
            "/products",
            params=catalog_query(),
            catch_response=True,
            name="GET /products",
        ) as resp:
            if resp.status_code == 200:
                found = [p["product_id"] for p in resp.json()["products"]]
                if found:
                    self.product_ids = found
            else:
                resp.failure(f"List products failed: {resp.status_code}")

    @task(2)
    def featured(self):
        self.client.get("/products/featured", name="GET /products/featured")

    @task(4)
    def product_detail(self):
        if not self.product_ids:
            return
        with self.client.get(
            f"/products/{random.choice(self.product_ids)}",
            catch_response=True,
            name="GET /products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Product detail failed: {resp.status_code}")
