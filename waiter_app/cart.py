"""Per-table draft orders and the current table selection."""

from __future__ import annotations

import logging

from waiter_app.errors import EmptyDraft, NoTableSelected
from waiter_app.models import BillLine, MenuItem, group_items

logger = logging.getLogger(__name__)


class CartManager:
    """Owns unsent draft items for every table."""

    def __init__(self, drafts: dict[int, list[MenuItem]] | None = None) -> None:
        self.drafts: dict[int, list[MenuItem]] = {table: list(items) for table, items in (drafts or {}).items()}
        self.current_table: int | None = None

    def select(self, table: int) -> None:
        self.current_table = table
        self.drafts.setdefault(table, [])

    def deselect(self) -> None:
        self.current_table = None

    def require_table(self, table: int | None) -> int:
        if table is None:
            raise NoTableSelected()
        return table

    def add_item(self, table: int | None, item: MenuItem) -> None:
        table = self.require_table(table)
        self.drafts.setdefault(table, []).append(item)
        logger.debug("draft_add table=%s item=%s", table, item.item_id)

    def clear(self, table: int | None) -> list[MenuItem]:
        table = self.require_table(table)
        removed = self.drafts.get(table, [])
        self.drafts[table] = []
        logger.debug("draft_clear table=%s items=%s", table, len(removed))
        return removed

    def take(self, table: int | None) -> tuple[MenuItem, ...]:
        """Remove and return the table's draft items for submission."""
        table = self.require_table(table)
        items = tuple(self.drafts.get(table, []))
        if not items:
            raise EmptyDraft()
        self.drafts[table] = []
        return items

    def items(self, table: int | None) -> tuple[MenuItem, ...]:
        if table is None:
            return ()
        return tuple(self.drafts.get(table, []))

    def lines(self, table: int | None) -> list[BillLine]:
        return group_items(self.items(table))

    def total(self, table: int | None) -> int:
        return sum(item.price for item in self.items(table))
