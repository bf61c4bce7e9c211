"""Order aggregate: a placed purchase and its lifecycle.

An order is opened in the Pending state from a cart at checkout. It keeps a
snapshot of what was bought (names, SKU and prices at the time of purchase),
the money breakdown, the addresses it ships and bills to, payment and
shipping references, and an append-only history of status changes.

State Machine (8 states):
    PENDING → PAID → PROCESSING → SHIPPED → DELIVERED
    PENDING/PAID/PROCESSING → CANCELLED (terminal)
    PAID/PROCESSING → REFUNDED (terminal)
    SHIPPED/DELIVERED → RETURNED → REFUNDED
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.order.events import (
    OrderCreated,
    OrderItemAdded,
    OrderStatusChanged,
    OrderTotalsRecalculated,
    PaymentInfoRecorded,
    ShippingInfoUpdated,
)
from storefront.shared.validation import (
    require_non_negative_amount,
    require_positive_quantity,
    require_text,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"
    RETURNED = "Returned"

    @classmethod
    def parse(cls, value):
        """Resolve an enum member from a member or a case-insensitive name/value."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for status in cls:
            if text in (status.value.lower(), status.name.lower()):
                return status
        raise ValidationError({"status": [f"Unknown order status: {value}"]})


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.REFUNDED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.REFUNDED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.RETURNED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.RETURNED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

# Timestamp stamped when the order enters the status
_MILESTONES = {
    OrderStatus.PAID: "paid_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}

_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PAID}

_REFUNDABLE_STATES = {
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
}


def allowed_transitions(status) -> set:
    return set(_VALID_TRANSITIONS[OrderStatus.parse(status)])


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class AddressSnapshot:
    """A shipping or billing address captured at checkout.

    The snapshot is never updated from the customer's address book; it records
    where this particular order goes.
    """

    first_name = String(max_length=100)
    last_name = String(max_length=100)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=50)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased variant with its name, SKU and price frozen at order time."""

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    variant_name = String(required=True, max_length=255)
    sku = String(required=True, max_length=100)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price

    def set_quantity(self, quantity):
        self.quantity = require_positive_quantity(quantity)

    def set_unit_price(self, unit_price):
        self.unit_price = require_non_negative_amount(unit_price, "unit_price")

    def set_product_name(self, product_name):
        self.product_name = require_text(product_name, "product_name")

    def set_variant_name(self, variant_name):
        self.variant_name = require_text(variant_name, "variant_name")

    def set_sku(self, sku):
        self.sku = require_text(sku, "sku")


@storefront.entity(part_of="Order")
class OrderEvent:
    """One entry of the order's append-only status history."""

    status = String(required=True, choices=OrderStatus, max_length=20)
    description = String(max_length=500)
    notes = Text()
    sequence = Integer(required=True, min_value=1)
    occurred_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    user_id = Identifier()
    customer_email = String(required=True, max_length=255)
    customer_phone = String(max_length=50)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
        max_length=20,
    )

    subtotal = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    shipping_address = ValueObject(AddressSnapshot)
    billing_address = ValueObject(AddressSnapshot)
    shipping_method = String(max_length=50)
    tracking_number = String(max_length=255)
    payment_intent_id = String(max_length=255)
    payment_method = String(max_length=50)

    paid_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    notes = Text()

    items = HasMany(OrderItem)
    history = HasMany(OrderEvent)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_its_components(self):
        expected = (self.subtotal or 0.0) + (self.shipping_cost or 0.0) + (self.tax_amount or 0.0)
        expected -= self.discount_amount or 0.0
        if abs((self.total or 0.0) - expected) > 1e-6:
            raise ValidationError({"total": ["Total must equal subtotal + shipping + tax - discount"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, order_number, customer_email, user_id=None, currency="USD"):
        now = datetime.now(UTC)
        order = cls(
            order_number=require_text(order_number, "order_number"),
            customer_email=_normalize_email(customer_email),
            user_id=user_id,
            currency=_normalize_currency(currency),
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(user_id) if user_id else None,
                customer_email=order.customer_email,
                currency=order.currency,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------
    @property
    def can_be_cancelled(self) -> bool:
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    @property
    def can_be_refunded(self) -> bool:
        return OrderStatus(self.status) in _REFUNDABLE_STATES

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    @property
    def timeline(self) -> list:
        """History entries in the order they were recorded."""
        return sorted(self.history, key=lambda entry: entry.sequence)

    # -------------------------------------------------------------------
    # Status state machine
    # -------------------------------------------------------------------
    def can_transition_to(self, new_status) -> bool:
        return OrderStatus.parse(new_status) in _VALID_TRANSITIONS[OrderStatus(self.status)]

    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _append_history(self, status, description, notes, occurred_at):
        self.add_history(
            OrderEvent(
                status=status.value,
                description=description,
                notes=notes,
                sequence=len(self.history) + 1,
                occurred_at=occurred_at,
            )
        )

    def set_status(self, new_status, description=None, notes=None):
        """Move the order to ``new_status``.

        The move is checked against the transition map before anything changes.
        Entering Paid, Shipped, Delivered or Cancelled stamps the matching
        milestone timestamp, and every move is appended to the history.
        """
        target = OrderStatus.parse(new_status)
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            milestone = _MILESTONES.get(target)
            if milestone:
                setattr(self, milestone, now)
            self.status = target.value
            self._append_history(target, description, notes, now)
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                description=description,
                changed_at=now,
            )
        )

    def add_event(self, status, description=None, notes=None):
        """Record a history entry without moving the order."""
        now = datetime.now(UTC)
        self._append_history(OrderStatus.parse(status), description, notes, now)
        self.updated_at = now

    # -------------------------------------------------------------------
    # Items and totals
    # -------------------------------------------------------------------
    def add_item(self, product_id, variant_id, product_name, variant_name, sku, quantity, unit_price):
        """Add a line to the order. Only allowed while the order is Pending."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise ValidationError({"status": ["Items can only be added to a pending order"]})

        item = OrderItem(
            product_id=product_id,
            variant_id=variant_id,
            product_name=require_text(product_name, "product_name"),
            variant_name=require_text(variant_name, "variant_name"),
            sku=require_text(sku, "sku"),
            quantity=require_positive_quantity(quantity),
            unit_price=require_non_negative_amount(unit_price, "unit_price"),
        )
        with atomic_change(self):
            self.add_items(item)
            self._recalculate()
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderItemAdded(
                order_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
                sku=item.sku,
                quantity=item.quantity,
                unit_price=item.unit_price,
                new_subtotal=self.subtotal,
                new_total=self.total,
            )
        )
        return item

    def _recalculate(self):
        self.subtotal = sum(item.line_total for item in self.items)
        self.total = self.subtotal + self.shipping_cost + self.tax_amount - self.discount_amount

    def calculate_totals(self):
        with atomic_change(self):
            self._recalculate()

    def _set_charge(self, field_name, amount):
        amount = require_non_negative_amount(amount, field_name)
        with atomic_change(self):
            setattr(self, field_name, amount)
            self._recalculate()
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderTotalsRecalculated(
                order_id=str(self.id),
                subtotal=self.subtotal,
                shipping_cost=self.shipping_cost,
                tax_amount=self.tax_amount,
                discount_amount=self.discount_amount,
                total=self.total,
            )
        )

    def set_shipping_cost(self, amount):
        self._set_charge("shipping_cost", amount)

    def set_tax_amount(self, amount):
        self._set_charge("tax_amount", amount)

    def set_discount_amount(self, amount):
        self._set_charge("discount_amount", amount)

    # -------------------------------------------------------------------
    # Header details
    # -------------------------------------------------------------------
    def set_order_number(self, order_number):
        self.order_number = require_text(order_number, "order_number")

    def set_user(self, user_id):
        self.user_id = user_id

    def set_customer_email(self, customer_email):
        self.customer_email = _normalize_email(customer_email)

    def set_customer_phone(self, customer_phone):
        self.customer_phone = customer_phone.strip() if customer_phone else None

    def set_currency(self, currency):
        self.currency = _normalize_currency(currency)

    def set_shipping_address(self, address):
        if address is None:
            raise ValidationError({"shipping_address": ["Shipping address is required"]})
        self.shipping_address = _as_address(address)

    def set_billing_address(self, address):
        self.billing_address = _as_address(address) if address is not None else None

    def set_shipping_method(self, shipping_method):
        self.shipping_method = shipping_method

    def set_tracking_number(self, tracking_number):
        self.tracking_number = tracking_number

    def update_shipping_info(self, tracking_number=None, shipping_method=None):
        """Record carrier details. Blank values leave the current ones in place."""
        if tracking_number and tracking_number.strip():
            self.tracking_number = tracking_number.strip()
        if shipping_method and shipping_method.strip():
            self.shipping_method = shipping_method.strip()
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ShippingInfoUpdated(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                shipping_method=self.shipping_method,
            )
        )

    def set_payment_info(self, payment_intent_id, payment_method=None):
        self.payment_intent_id = require_text(payment_intent_id, "payment_intent_id")
        self.payment_method = payment_method
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentInfoRecorded(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                payment_method=payment_method,
            )
        )

    def set_cancellation_reason(self, reason):
        self.cancellation_reason = reason

    def set_notes(self, notes):
        self.notes = notes

    def append_note(self, note):
        """Append a timestamped line to the order's free-text notes."""
        stamped = f"[{datetime.now(UTC):%Y-%m-%d %H:%M}] {note}"
        self.notes = f"{self.notes}\n{stamped}" if self.notes else stamped


def _normalize_email(email):
    return require_text(email, "customer_email").lower()


def _normalize_currency(currency):
    return require_text(currency, "currency").upper()


def _as_address(address):
    if isinstance(address, AddressSnapshot):
        return address
    return AddressSnapshot(**address)
