"""Repository for the Order aggregate."""

from datetime import UTC, datetime

from storefront.domain import storefront
from storefront.order.order import Order

ORDER_NUMBER_PREFIX = "ORD"


def format_order_number(year: int, sequence: int) -> str:
    """Render an order number such as ``ORD-2026-000042``."""
    return f"{ORDER_NUMBER_PREFIX}-{year}-{sequence:06d}"


@storefront.repository(part_of=Order)
class OrderRepository:
    def by_number(self, order_number) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def by_payment_intent(self, payment_intent_id) -> Order | None:
        return self._dao.query.filter(payment_intent_id=payment_intent_id).all().first

    def for_user(self, user_id) -> list[Order]:
        orders = self._dao.query.filter(user_id=str(user_id)).limit(None).all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def next_order_number(self, now: datetime | None = None) -> str:
        """Next number in this year's sequence. The sequence restarts every January."""
        now = now or datetime.now(UTC)
        year_start = datetime(now.year, 1, 1, tzinfo=UTC)
        next_year_start = datetime(now.year + 1, 1, 1, tzinfo=UTC)
        placed = (
            self._dao.query.filter(created_at__gte=year_start, created_at__lt=next_year_start)
            .limit(None)
            .all()
            .total
        )
        return format_order_number(now.year, placed + 1)
