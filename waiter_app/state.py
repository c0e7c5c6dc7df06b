"""The order book: single owner of all mutable restaurant state."""

from __future__ import annotations

import itertools
import logging
import time
from datetime import date
from typing import Callable

from waiter_app.auth import Authorization
from waiter_app.billing import Ledger, build_settlement
from waiter_app.cart import CartManager
from waiter_app.config import TABLE_COUNT
from waiter_app.errors import (
    AuthorizationDenied,
    EditModeRequired,
    NoPendingSettlement,
    NoTableSelected,
    PersistenceFailure,
)
from waiter_app.kitchen import ALL_STATUSES, KitchenQueue
from waiter_app.models import (
    Bill,
    BillLine,
    KitchenOrder,
    MenuItem,
    Occupancy,
    OrderStatus,
    PendingSettlement,
    StateSnapshot,
)
from waiter_app.persistence import MemoryStore, StateStore
from waiter_app.reports import DailyReport, build_daily_report
from waiter_app.tables import TableRegistry

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def epoch_millis() -> int:
    return int(time.time() * 1000)


def _log_notification(message: str, kind: str) -> None:
    logger.info("notify kind=%s message=%s", kind, message)


class OrderBook:
    """Cart, kitchen queue, table registry and ledger behind one mutation API.

    Every mutating call changes memory first and then saves a full snapshot.
    A failed save is logged and reported once through ``notify``; the run then
    continues in memory only and the mutation is kept.
    """

    def __init__(
        self,
        store: StateStore | None = None,
        *,
        table_count: int = TABLE_COUNT,
        clock: Callable[[], int] = epoch_millis,
        notify: Notifier | None = None,
    ) -> None:
        self.store = store if store is not None else MemoryStore()
        self.clock = clock
        self.notify = notify or _log_notification
        self.persistence_enabled = True

        snapshot = self.store.load() or StateSnapshot()
        self.cart = CartManager(snapshot.draft_orders)
        self.queue = KitchenQueue(snapshot.kitchen_orders)
        # Stored occupancy markers are discarded on purpose.
        self.tables = TableRegistry(table_count, self.queue)
        self.ledger = Ledger(snapshot.bills)
        self.pending_settlement: PendingSettlement | None = None
        self.edit_mode = False

        archived_order_ids = (order.order_id for bill in self.ledger.bills for order in bill.source_orders)
        last_id = max(self.queue.max_id(), self.ledger.max_id(), max(archived_order_ids, default=0))
        self._ids = itertools.count(last_id + 1)
        logger.info(
            "order_book_loaded drafts=%s orders=%s bills=%s next_id=%s",
            len(self.cart.drafts),
            len(self.queue.orders),
            len(self.ledger.bills),
            last_id + 1,
        )

    # -- persistence -------------------------------------------------------

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            draft_orders={table: list(items) for table, items in self.cart.drafts.items()},
            kitchen_orders=[order.snapshot() for order in self.queue.orders],
            table_occupancy=dict(self.tables.occupancy),
            bills=list(self.ledger.bills),
        )

    def _persist(self) -> None:
        if not self.persistence_enabled:
            return
        try:
            self.store.save(self.snapshot())
        except PersistenceFailure as exc:
            logger.error("state_save_failed error=%s", exc)
            self.persistence_enabled = False
            self.notify(exc.message, "error")

    def _next_id(self) -> int:
        return next(self._ids)

    def _resolve_table(self, table: int | None) -> int:
        if table is None:
            table = self.cart.current_table
        if table is None:
            raise NoTableSelected()
        return self.tables.validate(table)

    # -- cart --------------------------------------------------------------

    def select_table(self, table: int) -> int:
        self.tables.validate(table)
        self.tables.revive(table)
        self.cart.select(table)
        logger.info("table_selected table=%s", table)
        self._persist()
        return table

    def add_item(self, item: MenuItem, table: int | None = None) -> MenuItem:
        self.cart.add_item(self._resolve_table(table), item)
        self._persist()
        return item

    def clear_draft(self, table: int | None = None) -> list[MenuItem]:
        removed = self.cart.clear(self._resolve_table(table))
        self._persist()
        return removed

    def submit(self, table: int | None = None) -> KitchenOrder:
        table = self._resolve_table(table)
        items = self.cart.take(table)
        order = self.queue.enqueue(self._next_id(), table, items, self.clock())
        self._persist()
        return order

    # -- kitchen -----------------------------------------------------------

    def advance_status(self, order_id: int, target: OrderStatus | str) -> KitchenOrder:
        order = self.queue.advance_status(order_id, target)
        self._persist()
        return order

    def mark_all_ready_as_served(self, table: int | None = None) -> list[KitchenOrder]:
        served = self.queue.mark_all_ready_as_served(self._resolve_table(table))
        self._persist()
        return served

    # -- settlement --------------------------------------------------------

    def vacate(self, table: int | None = None) -> PendingSettlement:
        if table is None:
            table = self.cart.current_table
        settlement = build_settlement(table, self.queue.orders)
        self.pending_settlement = settlement
        logger.info(
            "vacate_preview table=%s orders=%s total=%s",
            settlement.table,
            len(settlement.orders),
            settlement.grand_total,
        )
        return settlement

    def confirm_vacate(self) -> Bill:
        settlement = self.pending_settlement
        if settlement is None:
            raise NoPendingSettlement()
        table = settlement.table

        bill = self.ledger.archive(self._next_id(), settlement, self.clock())
        self.tables.mark_active(table)
        self.cart.drafts[table] = []
        self.queue.remove_orders(order.order_id for order in settlement.orders)
        self.pending_settlement = None
        if self.cart.current_table == table:
            self.cart.deselect()

        self._persist()
        return bill

    def cancel_vacate(self) -> None:
        if self.pending_settlement is not None:
            logger.info("vacate_cancelled table=%s", self.pending_settlement.table)
        self.pending_settlement = None

    # -- ledger administration ---------------------------------------------

    def _authorize(self, authorization: Authorization) -> None:
        if not authorization.check_admin_password():
            logger.warning("admin_check_failed")
            raise AuthorizationDenied()

    def enter_edit_mode(self, authorization: Authorization) -> None:
        self._authorize(authorization)
        self.edit_mode = True
        logger.info("edit_mode entered")

    def exit_edit_mode(self) -> None:
        self.edit_mode = False
        logger.info("edit_mode exited")

    def delete_bill(self, bill_id: int, authorization: Authorization) -> Bill:
        self._authorize(authorization)
        bill = self.ledger.delete(bill_id)
        self._persist()
        return bill

    def purge_all_bills(self, authorization: Authorization, confirmed: bool) -> int:
        """Remove every bill; irreversible. Leaves edit mode afterwards."""
        if not self.edit_mode:
            raise EditModeRequired()
        self._authorize(authorization)
        if not confirmed:
            return 0
        count = self.ledger.purge()
        self.edit_mode = False
        self._persist()
        return count

    def clear_table_statuses(self) -> None:
        self.tables.clear_all()
        self._persist()

    # -- read-only views ---------------------------------------------------

    def current_table_selection(self) -> int | None:
        return self.cart.current_table

    def draft_order(self, table: int | None = None) -> tuple[MenuItem, ...]:
        return self.cart.items(self.cart.current_table if table is None else table)

    def draft_lines(self, table: int | None = None) -> list[BillLine]:
        return self.cart.lines(self.cart.current_table if table is None else table)

    def draft_total(self, table: int | None = None) -> int:
        return self.cart.total(self.cart.current_table if table is None else table)

    def kitchen_orders(self, status: OrderStatus | str = ALL_STATUSES) -> list[KitchenOrder]:
        return self.queue.filter_by_status(status)

    def orders_for_table(self, table: int) -> list[KitchenOrder]:
        return self.queue.orders_for_table(table)

    def table_occupancy(self, table: int) -> Occupancy | None:
        return self.tables.status(table)

    def active_order_count(self, table: int) -> int:
        return self.tables.active_order_count(table)

    def can_mark_served(self, table: int | None = None) -> bool:
        return self.tables.can_mark_served(self.cart.current_table if table is None else table)

    def can_vacate(self, table: int | None = None) -> bool:
        return self.tables.can_vacate(self.cart.current_table if table is None else table)

    def ledger_bills(self) -> list[Bill]:
        return self.ledger.newest_first()

    def total_revenue(self) -> int:
        return self.ledger.total_revenue()

    def bill_count(self) -> int:
        return self.ledger.bill_count()

    def daily_report(self, day: date) -> DailyReport:
        return build_daily_report(self.ledger.bills, day)
