"""Settlement previews and the archived bill ledger."""

from __future__ import annotations

import logging
from typing import Iterable

from waiter_app.errors import BillNotFound, NoOrdersForTable, NoTableSelected
from waiter_app.models import Bill, KitchenOrder, PendingSettlement, group_items, newest_first_key

logger = logging.getLogger(__name__)


def build_settlement(table: int | None, orders: Iterable[KitchenOrder]) -> PendingSettlement:
    """Group every item across a table's orders into a bill preview.

    The grand total is the sum of raw line prices; grouping only changes
    presentation, so it equals the sum of price x quantity over the lines.
    """
    if table is None:
        raise NoTableSelected()
    snapshots = tuple(order.archive() for order in orders if order.table == table)
    if not snapshots:
        raise NoOrdersForTable(f"No orders to bill for Table {table}")

    all_items = [item for order in snapshots for item in order.items]
    grand_total = 0
    for item in all_items:
        grand_total += item.price

    return PendingSettlement(
        table=table,
        orders=snapshots,
        items=tuple(group_items(all_items)),
        grand_total=grand_total,
    )


class Ledger:
    """Archived bills, the owner-facing revenue record."""

    def __init__(self, bills: Iterable[Bill] = ()) -> None:
        self.bills: list[Bill] = list(bills)

    def archive(self, bill_id: int, settlement: PendingSettlement, timestamp: int) -> Bill:
        bill = Bill(
            bill_id=bill_id,
            table=settlement.table,
            timestamp=timestamp,
            source_orders=settlement.orders,
            items=settlement.items,
            grand_total=settlement.grand_total,
        )
        self.bills.append(bill)
        logger.info("bill_archived id=%s table=%s total=%s", bill_id, bill.table, bill.grand_total)
        return bill

    def get(self, bill_id: int) -> Bill:
        for bill in self.bills:
            if bill.bill_id == bill_id:
                return bill
        raise BillNotFound(f"Bill {bill_id} not found")

    def delete(self, bill_id: int) -> Bill:
        bill = self.get(bill_id)
        self.bills.remove(bill)
        logger.info("bill_deleted id=%s table=%s total=%s", bill_id, bill.table, bill.grand_total)
        return bill

    def purge(self) -> int:
        count = len(self.bills)
        self.bills.clear()
        logger.warning("bills_purged count=%s", count)
        return count

    def total_revenue(self) -> int:
        return sum(bill.grand_total for bill in self.bills)

    def bill_count(self) -> int:
        return len(self.bills)

    def newest_first(self) -> list[Bill]:
        return sorted(self.bills, key=lambda bill: newest_first_key(bill.timestamp, bill.bill_id))

    def max_id(self) -> int:
        return max((bill.bill_id for bill in self.bills), default=0)
