"""Repository for the Cart aggregate."""

from datetime import UTC, datetime

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.shared.validation import as_utc


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id) -> Cart | None:
        """Return the cart owned by a signed-in user, if any."""
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def for_session(self, session_id) -> Cart | None:
        """Return the guest cart tied to an anonymous session, if any."""
        return self._dao.query.filter(session_id=session_id).all().first

    def expired(self, as_of: datetime | None = None) -> list[Cart]:
        # No limit: the default page would hide carts beyond the first 100
        as_of = as_utc(as_of) or datetime.now(UTC)
        return self._dao.query.filter(expires_at__lte=as_of).limit(None).all().items
