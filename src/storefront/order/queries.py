"""Read side of orders: lookup by id and by customer email."""

from protean.utils.globals import current_domain

from storefront.order.order import Order
from storefront.shared.email import normalize_email


def get_order(order_id) -> Order:
    return current_domain.repository_for(Order).get_order(order_id)


def find_orders_by_email(email) -> list[Order]:
    return current_domain.repository_for(Order).find_by_email(normalize_email(email))


def order_summary(email) -> dict:
    """Order count, amount spent, and pending/delivered counts for a customer."""
    return current_domain.repository_for(Order).summary_for(normalize_email(email))
