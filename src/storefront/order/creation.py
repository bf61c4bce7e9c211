"""Checkout: turn a cart into a Pending order.

The order snapshots every cart line with the catalog's current product name,
variant name and SKU, keeps the price the customer saw in the cart, charges
shipping for the chosen method and tax on the subtotal, then empties the cart.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront import settings
from storefront.cart.cart import Cart
from storefront.catalog import get_catalog
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    customer_email = String(required=True, max_length=255)
    customer_phone = String(max_length=50)
    shipping_address = Text(required=True)  # JSON: address snapshot fields
    billing_address = Text()  # JSON: defaults to the shipping address
    shipping_method = String(max_length=50, default="standard")
    notes = Text()


def _load(value):
    if value is None:
        return None
    return json.loads(value) if isinstance(value, str) else value


def _describe_lines(cart):
    catalog = get_catalog()
    lines = []
    for item in cart.items:
        snapshot = catalog.describe(str(item.product_id), str(item.variant_id))
        if snapshot is None:
            raise ValidationError({"items": [f"Variant {item.variant_id} is no longer available"]})
        lines.append((item, snapshot))
    return lines


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        order_repo = current_domain.repository_for(Order)

        cart = cart_repo.get(command.cart_id)
        if not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        lines = _describe_lines(cart)
        shipping_address = _load(command.shipping_address)

        order = Order.create(
            order_number=order_repo.next_order_number(),
            customer_email=command.customer_email,
            user_id=cart.user_id,
            currency=settings.order_currency(),
        )
        order.set_customer_phone(command.customer_phone)
        order.set_shipping_address(shipping_address)
        order.set_billing_address(_load(command.billing_address) or shipping_address)
        order.set_shipping_method(command.shipping_method)
        order.set_notes(command.notes)

        for item, snapshot in lines:
            order.add_item(
                product_id=item.product_id,
                variant_id=item.variant_id,
                product_name=snapshot.product_name,
                variant_name=snapshot.variant_name,
                sku=snapshot.sku,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )

        order.set_shipping_cost(settings.shipping_rate_for(command.shipping_method))
        order.set_tax_amount(round(order.subtotal * settings.tax_rate(), 2))
        order.add_event(OrderStatus.PENDING, description="Order placed")
        order_repo.add(order)

        cart.clear()
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(order.items),
            total=order.total,
            currency=order.currency,
        )
        return str(order.id)
