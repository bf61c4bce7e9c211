"""Order charge adjustments: command and handler."""

from protean import handle
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class AdjustOrderCharges:
    """Override shipping, tax or discount on an order. Omitted amounts are kept."""

    order_id = Identifier(required=True)
    shipping_cost = Float()
    tax_amount = Float()
    discount_amount = Float()


@storefront.command_handler(part_of=Order)
class AdjustOrderChargesHandler:
    @handle(AdjustOrderCharges)
    def adjust_order_charges(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if command.shipping_cost is not None:
            order.set_shipping_cost(command.shipping_cost)
        if command.tax_amount is not None:
            order.set_tax_amount(command.tax_amount)
        if command.discount_amount is not None:
            order.set_discount_amount(command.discount_amount)

        repo.add(order)
        return order.total
