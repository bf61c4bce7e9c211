"""Cart aggregate: the lines a customer or guest intends to buy.

A cart is owned either by a signed-in user or by an anonymous session,
never both. Lines are keyed by product variant, so adding a variant that is
already present tops up the existing line instead of creating a new one.
Carts expire after a configurable number of days unless extended.
"""

from datetime import UTC, datetime, timedelta

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartClaimed,
    CartCleared,
    CartExpirationExtended,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    CartsMerged,
)
from storefront.domain import storefront
from storefront.shared.validation import (
    as_utc,
    require_non_negative_amount,
    require_positive_quantity,
    require_text,
)

DEFAULT_TTL_DAYS = 7


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price

    def set_quantity(self, quantity):
        self.quantity = require_positive_quantity(quantity)

    def set_unit_price(self, unit_price):
        self.unit_price = require_non_negative_amount(unit_price, "unit_price")


@storefront.aggregate
class Cart:
    user_id = Identifier()
    session_id = String(max_length=255)
    expires_at = DateTime(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_belong_to_exactly_one_owner(self):
        if bool(self.user_id) == bool(self.session_id):
            raise ValidationError({"cart": ["A cart must belong to either a user or a guest session"]})

    @invariant.post
    def variants_must_be_unique(self):
        variant_ids = [str(item.variant_id) for item in self.items]
        if len(variant_ids) != len(set(variant_ids)):
            raise ValidationError({"items": ["A variant can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None, ttl_days=DEFAULT_TTL_DAYS):
        """Open a cart for a user or, failing that, for a guest session."""
        session_id = session_id.strip() if session_id else None
        if not user_id and not session_id:
            raise ValidationError({"cart": ["Either user_id or session_id must be provided"]})
        if user_id and session_id:
            raise ValidationError({"cart": ["A cart cannot belong to both a user and a guest session"]})

        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            session_id=session_id,
            expires_at=now + timedelta(days=ttl_days),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def is_expired(self) -> bool:
        return datetime.now(UTC) > as_utc(self.expires_at)

    @property
    def is_guest_cart(self) -> bool:
        return not self.user_id

    def get_item(self, variant_id):
        return next((i for i in self.items if str(i.variant_id) == str(variant_id)), None)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def _touch(self):
        self.updated_at = datetime.now(UTC)

    def _merge_line(self, product_id, variant_id, quantity, unit_price):
        quantity = require_positive_quantity(quantity)
        unit_price = require_non_negative_amount(unit_price, "unit_price")

        existing = self.get_item(variant_id)
        if existing:
            existing.quantity += quantity
            return existing

        item = CartItem(
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            unit_price=unit_price,
            added_at=datetime.now(UTC),
        )
        self.add_items(item)
        return item

    def add_item(self, product_id, variant_id, quantity, unit_price):
        """Add a variant to the cart, or increase its quantity if already present.

        The unit price of an existing line is left untouched.
        """
        item = self._merge_line(product_id, variant_id, quantity, unit_price)
        self._touch()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
                quantity_added=int(quantity),
                line_quantity=item.quantity,
            )
        )
        return item

    def remove_item(self, variant_id):
        """Remove the line for ``variant_id``. Absent variants are ignored."""
        item = self.get_item(variant_id)
        if item is None:
            return

        self.remove_items(item)
        self._touch()

        self.raise_(CartItemRemoved(cart_id=str(self.id), variant_id=str(variant_id)))

    def update_item_quantity(self, variant_id, quantity):
        """Overwrite a line's quantity. Zero or less removes the line."""
        item = self.get_item(variant_id)
        if item is None:
            return

        if quantity is None or quantity <= 0:
            self.remove_item(variant_id)
            return

        previous_quantity = item.quantity
        item.set_quantity(quantity)
        self._touch()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                variant_id=str(variant_id),
                previous_quantity=previous_quantity,
                new_quantity=item.quantity,
            )
        )

    def clear(self):
        items_removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self._touch()

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=items_removed))

    def merge(self, lines, source_cart_id=None):
        """Fold another cart's lines into this one with ``add_item`` semantics."""
        merged = 0
        for line in lines:
            self._merge_line(line.product_id, line.variant_id, line.quantity, line.unit_price)
            merged += 1
        self._touch()

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_cart_id=str(source_cart_id) if source_cart_id else None,
                items_merged_count=merged,
            )
        )

    # -------------------------------------------------------------------
    # Ownership and lifetime
    # -------------------------------------------------------------------
    def set_user(self, user_id):
        """Attach the cart to a signed-in user, dropping the guest session."""
        user_id = require_text(user_id, "user_id")
        previous_session_id = self.session_id

        with atomic_change(self):
            self.user_id = user_id
            self.session_id = None
            self._touch()

        self.raise_(
            CartClaimed(
                cart_id=str(self.id),
                user_id=user_id,
                previous_session_id=previous_session_id,
            )
        )

    def extend_expiration(self, days=DEFAULT_TTL_DAYS):
        if days is None or days <= 0:
            raise ValidationError({"days": ["Expiration can only be extended by a positive number of days"]})

        now = datetime.now(UTC)
        self.expires_at = now + timedelta(days=days)
        self.updated_at = now

        self.raise_(CartExpirationExtended(cart_id=str(self.id), expires_at=self.expires_at))
