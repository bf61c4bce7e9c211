"""Shipping details: command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateShippingInfo:
    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    shipping_method = String(max_length=50)
    mark_as_shipped = Boolean(default=False)


@storefront.command_handler(part_of=Order)
class UpdateShippingInfoHandler:
    @handle(UpdateShippingInfo)
    def update_shipping_info(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        order.update_shipping_info(
            tracking_number=command.tracking_number,
            shipping_method=command.shipping_method,
        )
        if command.mark_as_shipped:
            description = "Order shipped"
            if order.tracking_number:
                description = f"Order shipped with tracking number {order.tracking_number}"
            order.set_status(OrderStatus.SHIPPED, description=description)

        repo.add(order)
