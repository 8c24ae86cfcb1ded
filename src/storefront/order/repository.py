"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import OrderNotFound
from storefront.order.order import Order, OrderStatus


@storefront.repository(part_of=Order)
class OrderRepository:
    def get_order(self, order_id) -> Order:
        try:
            return self.get(order_id)
        except ObjectNotFoundError as exc:
            raise OrderNotFound({"order_id": [f"Order {order_id} not found."]}) from exc

    def exists(self, order_id) -> bool:
        return bool(self._dao.query.filter(order_id=order_id).limit(None).all().items)

    def find_by_email(self, email) -> list[Order]:
        """Orders placed with ``email`` (already normalised), newest first."""
        orders = self._dao.query.filter(customer_email=email).limit(None).all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def summary_for(self, email) -> dict:
        orders = self.find_by_email(email)
        return {
            "total_orders": len(orders),
            "total_spent": round(sum(order.total for order in orders), 2),
            "pending_orders": sum(1 for order in orders if order.is_pending()),
            "delivered_orders": sum(1 for order in orders if order.status == OrderStatus.DELIVERED.value),
        }
