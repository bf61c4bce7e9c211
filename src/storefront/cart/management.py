"""Cart management: creation, guest cart merging and expiry extension."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront import settings
from storefront.cart.cart import Cart
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class CreateCart:
    """Open a cart for a signed-in user or for a guest session."""

    user_id = Identifier()
    session_id = String(max_length=255)


@storefront.command(part_of="Cart")
class MergeGuestCart:
    """Move a guest session's cart into the signed-in user's cart."""

    user_id = Identifier(required=True)
    guest_session_id = String(required=True, max_length=255)


@storefront.command(part_of="Cart")
class ExtendCartExpiration:
    cart_id = Identifier(required=True)
    days = Integer(min_value=1)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        repo = current_domain.repository_for(Cart)

        existing = repo.for_user(command.user_id) if command.user_id else None
        if existing is not None:
            raise ValidationError({"user_id": ["User already has a cart"]})

        cart = Cart.create(
            user_id=command.user_id,
            session_id=command.session_id,
            ttl_days=settings.cart_ttl_days(),
        )
        repo.add(cart)
        return str(cart.id)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        """Returns the id of the user's cart after the merge, or None if there is none."""
        repo = current_domain.repository_for(Cart)
        guest_cart = repo.for_session(command.guest_session_id)
        user_cart = repo.for_user(command.user_id)

        if guest_cart is None or not guest_cart.items:
            return str(user_cart.id) if user_cart else None

        if user_cart is None:
            guest_cart.set_user(command.user_id)
            guest_cart.extend_expiration(settings.cart_ttl_days())
            repo.add(guest_cart)
            logger.info("Guest cart claimed", cart_id=str(guest_cart.id), user_id=str(command.user_id))
            return str(guest_cart.id)

        user_cart.merge(guest_cart.items, source_cart_id=guest_cart.id)
        repo.add(user_cart)
        repo._dao.delete(guest_cart)

        logger.info(
            "Guest cart merged",
            cart_id=str(user_cart.id),
            guest_cart_id=str(guest_cart.id),
            items_merged=len(guest_cart.items),
        )
        return str(user_cart.id)

    @handle(ExtendCartExpiration)
    def extend_cart_expiration(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.extend_expiration(command.days or settings.cart_ttl_days())
        repo.add(cart)
