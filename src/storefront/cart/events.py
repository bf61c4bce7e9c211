"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A variant was added to the cart, or its existing line was topped up."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity_added = Integer(required=True)
    line_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    variant_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    """Every line was removed from the cart (checkout or explicit clear)."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@storefront.event(part_of="Cart")
class CartClaimed:
    """A guest cart was taken over by a signed-in user."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_session_id = String(max_length=255)


@storefront.event(part_of="Cart")
class CartsMerged:
    """Lines from another cart were folded into this one."""

    __version__ = 1

    cart_id = Identifier(required=True)
    source_cart_id = Identifier()
    items_merged_count = Integer(required=True)


@storefront.event(part_of="Cart")
class CartExpirationExtended:
    __version__ = 1

    cart_id = Identifier(required=True)
    expires_at = DateTime(required=True)
