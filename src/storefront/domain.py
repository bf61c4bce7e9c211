"""Storefront bounded context: Shopping Cart and Order Management.

Carts collect product variants for a signed-in customer or a guest session.
Checkout snapshots a cart into an Order, which then moves through the order
status state machine while keeping its totals and an append-only history of status events.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
