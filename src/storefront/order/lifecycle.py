"""Order lifecycle: status changes and cancellation.

Cancelling a placed order returns every line's quantity to the catalog.
A line whose product has since been deleted is skipped with a warning;
the rest of the cancellation goes ahead.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.domain import storefront
from storefront.errors import InvalidInput
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class AdvanceOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(AdvanceOrderStatus)
    def advance_order_status(self, command):
        try:
            target = OrderStatus(command.status)
        except ValueError as exc:
            choices = ", ".join(s.value for s in OrderStatus)
            raise InvalidInput({"status": [f"Status must be one of: {choices}."]}) from exc

        if target is OrderStatus.CANCELLED:
            return self._cancel(command.order_id)

        repo = current_domain.repository_for(Order)
        order = repo.get_order(command.order_id)
        order.advance_to(target)
        repo.add(order)

        logger.info("Order status changed", order_id=order.order_id, status=order.status)
        return order.status

    @handle(CancelOrder)
    def cancel_order(self, command):
        return self._cancel(command.order_id)

    def _cancel(self, order_id):
        repo = current_domain.repository_for(Order)
        order = repo.get_order(order_id)
        order.cancel()

        products = current_domain.repository_for(Product)
        skipped = [
            str(line.product_id) for line in order.items if not products.increment_stock(line.product_id, line.quantity)
        ]
        repo.add(order)

        logger.info(
            "Order cancelled",
            order_id=order.order_id,
            lines_restored=len(order.items) - len(skipped),
            lines_skipped=len(skipped),
        )
        return order.status
