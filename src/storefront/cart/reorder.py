"""Reorder: put the lines of a past order back into a cart."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront import settings
from storefront.cart.cart import Cart
from storefront.catalog import get_catalog
from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class Reorder:
    """Copy an order's lines into the user's (or guest session's) cart.

    Lines are priced at the catalog's current price. Variants that are no
    longer sold are skipped.
    """

    order_id = Identifier(required=True)
    user_id = Identifier()
    session_id = String(max_length=255)


@storefront.command_handler(part_of=Cart)
class ReorderHandler:
    @handle(Reorder)
    def reorder(self, command):
        if not command.user_id and not command.session_id:
            raise ValidationError({"cart": ["Either user_id or session_id must be provided"]})

        order = current_domain.repository_for(Order).get(command.order_id)
        cart_repo = current_domain.repository_for(Cart)

        if command.user_id:
            cart = cart_repo.for_user(command.user_id)
        else:
            cart = cart_repo.for_session(command.session_id)
        if cart is None:
            cart = Cart.create(
                user_id=command.user_id,
                session_id=None if command.user_id else command.session_id,
                ttl_days=settings.cart_ttl_days(),
            )

        catalog = get_catalog()
        added, skipped = 0, []
        for item in order.items:
            snapshot = catalog.describe(str(item.product_id), str(item.variant_id))
            if snapshot is None:
                skipped.append(item.sku)
                continue
            cart.add_item(
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                unit_price=snapshot.unit_price,
            )
            added += 1

        cart_repo.add(cart)

        logger.info(
            "Order lines copied to cart",
            order_number=order.order_number,
            cart_id=str(cart.id),
            items_added=added,
            items_skipped=len(skipped),
        )
        return {"cart_id": str(cart.id), "items_added": added, "skipped_skus": skipped}
