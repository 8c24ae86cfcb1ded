"""Flash sale load scenario.

Many sessions race to buy the same low-stock product. Each user puts one
unit in its cart and checks out immediately. The server must never sell
more units than it had: every checkout either returns 201 or 409, and the
sum of placed orders stays within the starting stock. A 409 is the
expected outcome for the losers and is not counted as a failure.

Point ``FLASH_SALE_PRODUCT_ID`` at the product under test; by default the
first product of the catalog's ``price-high`` listing is used.
"""

import os

from locust import HttpUser, constant_pacing, events, task

from loadtests.data_generators import checkout_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import FlashSaleTally, new_session_id

SOLD_OUT = 409

_placed_total = FlashSaleTally()


@events.test_stop.add_listener
def report_flash_sale(**_kwargs):
    print(f"[LOADTEST] Flash sale: {_placed_total.placed} placed, {_placed_total.sold_out} sold out")


class FlashSaleUser(HttpUser):
    """One buyer per iteration, all after the same product."""

    wait_time = constant_pacing(0.2)

    def on_start(self):
        self.tally = FlashSaleTally()
        self.product_id = os.environ.get("FLASH_SALE_PRODUCT_ID") or self._pick_product()

    def on_stop(self):
        _placed_total.placed += self.tally.placed
        _placed_total.sold_out += self.tally.sold_out

    def _pick_product(self):
        resp = self.client.get("/products", params={"sort": "price-high", "limit": 1}, name="GET /products")
        products = resp.json().get("products", []) if resp.status_code == 200 else []
        return products[0]["product_id"] if products else None

    @task
    def grab_one(self):
        if self.product_id is None:
            return

        headers = {"X-Session-Id": new_session_id()}
        with self.client.post(
            "/cart/items",
            json={"product_id": self.product_id, "quantity": 1},
            headers=headers,
            catch_response=True,
            context={"expected_status": SOLD_OUT},
            name="[FLASH] POST /cart/items",
        ) as resp:
            if resp.status_code == SOLD_OUT:
                self.tally.sold_out += 1
                resp.success()
                return
            if resp.status_code != 200:
                resp.failure(f"Add to cart failed: {extract_error_detail(resp)}")
                return

        with self.client.post(
            "/checkout",
            json=checkout_data(),
            headers=headers,
            catch_response=True,
            context={"expected_status": SOLD_OUT},
            name="[FLASH] POST /checkout",
        ) as resp:
            if resp.status_code == 201:
                self.tally.placed += 1
            elif resp.status_code == SOLD_OUT:
                self.tally.sold_out += 1
                resp.success()
            else:
                resp.failure(f"Checkout failed: {extract_error_detail(resp)}")
