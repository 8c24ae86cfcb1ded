"""Shopper journey load scenario.

A SequentialTaskSet that walks one session from the catalog to a placed
order: browse, fill the cart, try a coupon, preview, check out and look
the order up by email. Steps execute in order and each depends on the
previous one succeeding.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_quantity, checkout_data, coupon_code, valid_email
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState


class ShopperJourney(SequentialTaskSet):
    """Browse -> Add to cart (x2) -> Coupon -> Preview -> Checkout -> Lookup."""

    def on_start(self):
        self.state = ShopperState(email=valid_email())

    @task
    def browse(self):
        with self.client.get(
            "/products",
            params={"sort": "newest"},
            catch_response=True,
            name="GET /products",
        ) as resp:
            products = resp.json().get("products", []) if resp.status_code == 200 else []
            in_stock = [p["product_id"] for p in products if p["in_stock"]]
            if not in_stock:
                resp.failure("No products in stock")
                self.interrupt()
                return
            self.state.product_ids = random.sample(in_stock, k=min(2, len(in_stock)))

    @task
    def fill_cart(self):
        for product_id in self.state.product_ids:
            with self.client.post(
                "/cart/items",
                json={"product_id": product_id, "quantity": cart_quantity()},
                headers=self.state.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                if resp.status_code == 200:
                    self.state.cart_item_count = resp.json()["item_count"]
                elif resp.status_code == 409:
                    # Somebody else bought the last units meanwhile
                    resp.success()
                else:
                    resp.failure(f"Add to cart failed: {extract_error_detail(resp)}")

        if self.state.cart_item_count == 0:
            self.interrupt()

    @task
    def apply_coupon(self):
        code = coupon_code()
        if code is None:
            return
        with self.client.post(
            "/cart/coupon",
            json={"coupon_code": code},
            headers=self.state.headers,
            catch_response=True,
            name="POST /cart/coupon",
        ) as resp:
            if resp.status_code == 200:
                self.state.coupon_code = resp.json()["coupon_code"]
            elif resp.status_code == 400:
                # Unknown codes are part of the traffic mix
                resp.success()
            else:
                resp.failure(f"Apply coupon failed: {resp.status_code}")

    @task
    def preview(self):
        with self.client.get(
            "/checkout/preview",
            headers=self.state.headers,
            catch_response=True,
            name="GET /checkout/preview",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Preview failed: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def place_order(self):
        with self.client.post(
            "/checkout",
            json=checkout_data(self.state.email),
            headers=self.state.headers,
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
                self.state.order_status = "Placed"
            elif resp.status_code == 409:
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Checkout failed: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def lookup_orders(self):
        with self.client.post(
            "/orders/lookup",
            json={"email": self.state.email.lower()},
            catch_response=True,
            name="POST /orders/lookup",
        ) as resp:
            order_ids = [o["order_id"] for o in resp.json().get("orders", [])] if resp.status_code == 200 else []
            if self.state.order_id not in order_ids:
                resp.failure("Placed order missing from lookup")

    @task
    def maybe_cancel(self):
        if random.random() < 0.2:
            with self.client.post(
                f"/orders/{self.state.order_id}/cancel",
                catch_response=True,
                name="POST /orders/{id}/cancel",
            ) as resp:
                if resp.status_code == 200:
                    self.state.order_status = resp.json()["status"]
                else:
                    resp.failure(f"Cancel failed: {resp.status_code}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    """Runs complete shopper journeys back to back."""

    tasks = [ShopperJourney]
    wait_time = between(1, 3)
