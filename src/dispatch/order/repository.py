"""Order Store — read access to orders, hiding soft-deleted records."""

from collections import Counter

from protean.exceptions import ObjectNotFoundError

from dispatch.domain import dispatch
from dispatch.exceptions import NotFound
from dispatch.order.lifecycle import ACTIVE_STATUSES
from dispatch.order.order import Order
from dispatch.utils.query import scan


@dispatch.repository(part_of=Order)
class OrderRepository:
    """Repository for the Order aggregate."""

    def find_live(self, order_id: str) -> Order:
        """Load an order that exists and has not been soft-deleted."""
        try:
            order = self.get(order_id)
        except ObjectNotFoundError:
            raise NotFound("Order not found", order_id=str(order_id)) from None
        if order.is_deleted:
            raise NotFound("Order not found", order_id=str(order_id))
        return order

    def live_orders(self) -> list[Order]:
        return [o for o in scan(self._dao.query) if not o.is_deleted]

    def active_order_counts(self) -> Counter:
        """Number of active orders per driver id, computed at read time."""
        counts = Counter()
        for status in ACTIVE_STATUSES:
            for order in scan(self._dao.query.filter(status=status.value)):
                if order.driver_id and not order.is_deleted:
                    counts[str(order.driver_id)] += 1
        return counts
