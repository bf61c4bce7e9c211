"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderCreated:
    """A new order was opened in the Pending state."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    user_id = Identifier()
    customer_email = String(required=True, max_length=255)
    currency = String(max_length=3)
    created_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderItemAdded:
    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    sku = String(required=True, max_length=100)
    quantity = Integer(required=True)
    unit_price = Float(required=True)
    new_subtotal = Float(required=True)
    new_total = Float(required=True)


@storefront.event(part_of="Order")
class OrderTotalsRecalculated:
    """Shipping, tax or discount changed and the order total was recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    subtotal = Float(required=True)
    shipping_cost = Float(required=True)
    tax_amount = Float(required=True)
    discount_amount = Float(required=True)
    total = Float(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along the status state machine."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    description = String(max_length=500)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentInfoRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)
    payment_method = String(max_length=50)


@storefront.event(part_of="Order")
class ShippingInfoUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    shipping_method = String(max_length=50)
