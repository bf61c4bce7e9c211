"""Expired cart purge: command and handler.

Triggered by an external scheduler (cron, K8s CronJob) through the
maintenance API endpoint. Every cart whose expiry has passed is removed.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class PurgeExpiredCarts:
    as_of = DateTime()  # Optional: defaults to now


@storefront.command_handler(part_of=Cart)
class PurgeExpiredCartsHandler:
    @handle(PurgeExpiredCarts)
    def purge_expired_carts(self, command):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(Cart)

        expired = repo.expired(as_of)
        if not expired:
            logger.info("No expired carts found", as_of=as_of.isoformat())
            return 0

        for cart in expired:
            repo._dao.delete(cart)
            logger.info(
                "Removed expired cart",
                cart_id=str(cart.id),
                user_id=str(cart.user_id) if cart.user_id else None,
                expires_at=str(cart.expires_at),
            )

        logger.info("Expired cart purge complete", removed_count=len(expired))
        return len(expired)
