"""Back-office status changes: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order to another status on behalf of staff.

    ``status`` is matched case-insensitively. A note, when given, is kept on
    the history entry and appended to the order's notes.
    """

    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = Text()


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        target = OrderStatus.parse(command.status)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status

        order.set_status(target, description=f"Status changed to {target.value}", notes=command.note)
        if command.note:
            order.append_note(f"Status changed to {target.value}: {command.note}")
        repo.add(order)

        logger.info(
            "Order status updated",
            order_number=order.order_number,
            previous_status=previous,
            new_status=target.value,
        )
