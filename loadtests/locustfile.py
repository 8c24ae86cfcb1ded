"""Storefront Load Testing: Locust entry point.

Discovers all user classes from the scenarios package. The target server
is expected to hold a seeded catalog (``python src/manage.py seed``).

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Flash sale only:
    locust -f loadtests/locustfile.py FlashSaleUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ShopperUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.browsing import BrowsingUser  # noqa: F401
from loadtests.scenarios.flash_sale import FlashSaleUser  # noqa: F401
from loadtests.scenarios.shopping import ShopperUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, context=None, **_kw):
    """Log error details for every unexpected failed request.

    Sold-out responses from the flash sale are expected and tagged through
    the request context, so they are not logged.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        if (context or {}).get("expected_status") == response.status_code:
            return
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the request totals when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    stats = environment.stats.total
    print(f"[LOADTEST] Requests: {stats.num_requests}, failures: {stats.num_failures}")
    print()
