"""SQLite persistence for the order book state buckets."""

from __future__ import annotations

import copy
import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Protocol

from waiter_app.config import DB_PATH
from waiter_app.errors import PersistenceFailure
from waiter_app.models import (
    ArchivedOrder,
    Bill,
    BillLine,
    KitchenOrder,
    MenuItem,
    Occupancy,
    OrderStatus,
    StateSnapshot,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS draft_tables (
    table_number INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS draft_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    table_number INTEGER NOT NULL,
    line_index INTEGER NOT NULL,
    item_id INTEGER NOT NULL,
    item_name TEXT NOT NULL,
    price INTEGER NOT NULL,
    category TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS kitchen_orders (
    id INTEGER PRIMARY KEY,
    table_number INTEGER NOT NULL,
    created_at INTEGER NOT NULL,
    status TEXT
);

CREATE TABLE IF NOT EXISTS kitchen_order_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id INTEGER NOT NULL,
    line_index INTEGER NOT NULL,
    item_id INTEGER NOT NULL,
    item_name TEXT NOT NULL,
    price INTEGER NOT NULL,
    category TEXT NOT NULL,
    FOREIGN KEY(order_id) REFERENCES kitchen_orders(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS table_status (
    table_number INTEGER PRIMARY KEY,
    occupancy TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS bills (
    id INTEGER PRIMARY KEY,
    table_number INTEGER NOT NULL,
    created_at INTEGER NOT NULL,
    grand_total INTEGER NOT NULL,
    payment_status TEXT NOT NULL DEFAULT 'pending',
    source_orders TEXT NOT NULL,
    items TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_draft_items_table_line
    ON draft_items(table_number, line_index);

CREATE INDEX IF NOT EXISTS idx_kitchen_order_items_order_line
    ON kitchen_order_items(order_id, line_index);
"""


class StateStore(Protocol):
    def load(self) -> StateSnapshot | None: ...

    def save(self, snapshot: StateSnapshot) -> None: ...


def _item_to_dict(item: MenuItem) -> dict[str, Any]:
    return {"id": item.item_id, "name": item.name, "price": item.price, "category": item.category}


def _item_from_dict(raw: dict[str, Any]) -> MenuItem:
    return MenuItem(item_id=int(raw["id"]), name=str(raw["name"]), price=int(raw["price"]), category=str(raw["category"]))


def _status_from_raw(raw: str | None) -> OrderStatus:
    # Rows written before statuses existed are treated as pending.
    if not raw:
        return OrderStatus.PENDING
    return OrderStatus(raw)


def _order_to_dict(order: ArchivedOrder) -> dict[str, Any]:
    return {
        "id": order.order_id,
        "table": order.table,
        "timestamp": order.timestamp,
        "status": order.status.value,
        "items": [_item_to_dict(item) for item in order.items],
    }


def _order_from_dict(raw: dict[str, Any]) -> ArchivedOrder:
    return ArchivedOrder(
        order_id=int(raw["id"]),
        table=int(raw["table"]),
        items=tuple(_item_from_dict(item) for item in raw["items"]),
        timestamp=int(raw["timestamp"]),
        status=_status_from_raw(raw.get("status")),
    )


def _line_to_dict(line: BillLine) -> dict[str, Any]:
    return {
        "id": line.item_id,
        "name": line.name,
        "price": line.price,
        "category": line.category,
        "quantity": line.quantity,
    }


def _line_from_dict(raw: dict[str, Any]) -> BillLine:
    return BillLine(
        item_id=int(raw["id"]),
        name=str(raw["name"]),
        price=int(raw["price"]),
        category=str(raw["category"]),
        quantity=int(raw["quantity"]),
    )


class SqliteStore:
    """Persist the full state snapshot into a local SQLite file."""

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        try:
            with closing(self._connect()) as conn:
                conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Could not prepare database: {exc}") from exc

    def load(self) -> StateSnapshot | None:
        """Return the stored snapshot, or None when absent or unreadable."""
        if not self.db_path.is_file():
            return None
        try:
            with closing(self._connect()) as conn:
                conn.executescript(_SCHEMA)
                return self._read(conn)
        except (sqlite3.Error, ValueError, KeyError, TypeError) as exc:
            logger.warning("state_load_failed path=%s error=%r", self.db_path, exc)
            return None

    def _read(self, conn: sqlite3.Connection) -> StateSnapshot:
        snapshot = StateSnapshot()

        for (table_number,) in conn.execute("SELECT table_number FROM draft_tables ORDER BY table_number"):
            snapshot.draft_orders.setdefault(int(table_number), [])

        for table_number, item_id, name, price, category in conn.execute(
            "SELECT table_number, item_id, item_name, price, category FROM draft_items ORDER BY table_number, line_index"
        ):
            item = MenuItem(item_id=int(item_id), name=str(name), price=int(price), category=str(category))
            snapshot.draft_orders.setdefault(int(table_number), []).append(item)

        items_by_order: dict[int, list[MenuItem]] = {}
        for order_id, item_id, name, price, category in conn.execute(
            "SELECT order_id, item_id, item_name, price, category FROM kitchen_order_items ORDER BY order_id, line_index"
        ):
            item = MenuItem(item_id=int(item_id), name=str(name), price=int(price), category=str(category))
            items_by_order.setdefault(int(order_id), []).append(item)

        for order_id, table_number, created_at, status in conn.execute(
            "SELECT id, table_number, created_at, status FROM kitchen_orders ORDER BY created_at, id"
        ):
            snapshot.kitchen_orders.append(
                KitchenOrder(
                    order_id=int(order_id),
                    table=int(table_number),
                    items=tuple(items_by_order.get(int(order_id), [])),
                    timestamp=int(created_at),
                    status=_status_from_raw(status),
                )
            )

        for table_number, occupancy in conn.execute("SELECT table_number, occupancy FROM table_status"):
            snapshot.table_occupancy[int(table_number)] = Occupancy(occupancy)

        for bill_id, table_number, created_at, grand_total, payment_status, source_orders, items in conn.execute(
            "SELECT id, table_number, created_at, grand_total, payment_status, source_orders, items FROM bills ORDER BY created_at, id"
        ):
            snapshot.bills.append(
                Bill(
                    bill_id=int(bill_id),
                    table=int(table_number),
                    timestamp=int(created_at),
                    source_orders=tuple(_order_from_dict(raw) for raw in json.loads(source_orders)),
                    items=tuple(_line_from_dict(raw) for raw in json.loads(items)),
                    grand_total=int(grand_total),
                    payment_status=str(payment_status),
                )
            )

        return snapshot

    def save(self, snapshot: StateSnapshot) -> None:
        """Replace the stored state with a full snapshot in one transaction."""
        try:
            with closing(self._connect()) as conn:
                conn.executescript(_SCHEMA)
                with conn:
                    self._write(conn, snapshot)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceFailure(f"Could not save state: {exc}") from exc

    def _write(self, conn: sqlite3.Connection, snapshot: StateSnapshot) -> None:
        for table in ("draft_tables", "draft_items", "kitchen_order_items", "kitchen_orders", "table_status", "bills"):
            conn.execute(f"DELETE FROM {table}")

        for table_number, items in snapshot.draft_orders.items():
            conn.execute("INSERT INTO draft_tables (table_number) VALUES (?)", (table_number,))
            for idx, item in enumerate(items):
                conn.execute(
                    """
                    INSERT INTO draft_items (table_number, line_index, item_id, item_name, price, category)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (table_number, idx, item.item_id, item.name, item.price, item.category),
                )

        for order in snapshot.kitchen_orders:
            conn.execute(
                "INSERT INTO kitchen_orders (id, table_number, created_at, status) VALUES (?, ?, ?, ?)",
                (order.order_id, order.table, order.timestamp, order.status.value),
            )
            for idx, item in enumerate(order.items):
                conn.execute(
                    """
                    INSERT INTO kitchen_order_items (order_id, line_index, item_id, item_name, price, category)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (order.order_id, idx, item.item_id, item.name, item.price, item.category),
                )

        for table_number, occupancy in snapshot.table_occupancy.items():
            conn.execute(
                "INSERT INTO table_status (table_number, occupancy) VALUES (?, ?)",
                (table_number, occupancy.value),
            )

        for bill in snapshot.bills:
            conn.execute(
                """
                INSERT INTO bills (id, table_number, created_at, grand_total, payment_status, source_orders, items)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    bill.bill_id,
                    bill.table,
                    bill.timestamp,
                    bill.grand_total,
                    bill.payment_status,
                    json.dumps([_order_to_dict(order) for order in bill.source_orders]),
                    json.dumps([_line_to_dict(line) for line in bill.items]),
                ),
            )


class MemoryStore:
    """Keep the snapshot in process memory only."""

    def __init__(self, snapshot: StateSnapshot | None = None) -> None:
        self.snapshot = copy.deepcopy(snapshot)
        self.save_count = 0

    def load(self) -> StateSnapshot | None:
        return copy.deepcopy(self.snapshot)

    def save(self, snapshot: StateSnapshot) -> None:
        self.snapshot = copy.deepcopy(snapshot)
        self.save_count += 1
