"""Table occupancy and the gates derived from the kitchen queue."""

from __future__ import annotations

import logging

from waiter_app.errors import InvalidTable
from waiter_app.kitchen import KitchenQueue
from waiter_app.models import Occupancy, OrderStatus

logger = logging.getLogger(__name__)


class TableRegistry:
    """Occupancy markers for tables 1..table_count.

    Markers are never restored from storage: every boot starts with all
    tables unmarked so a stale ``vacated`` flag cannot lock a table out.
    """

    def __init__(self, table_count: int, queue: KitchenQueue) -> None:
        self.table_count = table_count
        self.queue = queue
        self.occupancy: dict[int, Occupancy] = {}

    def table_numbers(self) -> list[int]:
        return list(range(1, self.table_count + 1))

    def validate(self, table: int) -> int:
        if not (1 <= table <= self.table_count):
            raise InvalidTable(f"Table must be between 1 and {self.table_count}")
        return table

    def status(self, table: int) -> Occupancy | None:
        return self.occupancy.get(table)

    def is_vacated(self, table: int) -> bool:
        return self.occupancy.get(table) is Occupancy.VACATED

    def mark_active(self, table: int) -> None:
        self.occupancy[table] = Occupancy.ACTIVE

    def revive(self, table: int) -> bool:
        """Reset a vacated table to active; return whether it changed."""
        if not self.is_vacated(table):
            return False
        self.mark_active(table)
        logger.info("table_revived table=%s", table)
        return True

    def clear_all(self) -> None:
        self.occupancy.clear()

    def active_order_count(self, table: int) -> int:
        return sum(1 for order in self.queue.orders if order.table == table and order.status is not OrderStatus.SERVED)

    def can_mark_served(self, table: int | None) -> bool:
        if table is None:
            return False
        return any(order.table == table and order.status is OrderStatus.READY for order in self.queue.orders)

    def can_vacate(self, table: int | None) -> bool:
        if table is None:
            return False
        return any(order.table == table for order in self.queue.orders)
