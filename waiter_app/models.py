"""Domain models for waiter-menu."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable


class OrderStatus(str, Enum):
    """Kitchen preparation stage, in lifecycle order."""

    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"

    def next_status(self) -> OrderStatus | None:
        stages = list(OrderStatus)
        idx = stages.index(self)
        if idx + 1 >= len(stages):
            return None
        return stages[idx + 1]


class Occupancy(str, Enum):
    ACTIVE = "active"
    VACATED = "vacated"


@dataclass(frozen=True)
class MenuItem:
    """A priced menu item."""

    item_id: int
    name: str
    price: int
    category: str


@dataclass(frozen=True)
class BillLine:
    """A menu item snapshot with a grouped quantity."""

    item_id: int
    name: str
    price: int
    category: str
    quantity: int

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


@dataclass
class KitchenOrder:
    """A submitted order tracked by the kitchen."""

    order_id: int
    table: int
    items: tuple[MenuItem, ...]
    timestamp: int
    status: OrderStatus = OrderStatus.PENDING

    @property
    def total(self) -> int:
        return sum(item.price for item in self.items)

    def snapshot(self) -> KitchenOrder:
        return replace(self)

    def archive(self) -> ArchivedOrder:
        return ArchivedOrder(
            order_id=self.order_id,
            table=self.table,
            items=self.items,
            timestamp=self.timestamp,
            status=self.status,
        )


@dataclass(frozen=True)
class ArchivedOrder:
    """Read-only copy of a kitchen order as it stood when settled."""

    order_id: int
    table: int
    items: tuple[MenuItem, ...]
    timestamp: int
    status: OrderStatus

    @property
    def total(self) -> int:
        return sum(item.price for item in self.items)


@dataclass(frozen=True)
class Bill:
    """An archived settlement for one table."""

    bill_id: int
    table: int
    timestamp: int
    source_orders: tuple[ArchivedOrder, ...]
    items: tuple[BillLine, ...]
    grand_total: int
    payment_status: str = "pending"


@dataclass(frozen=True)
class PendingSettlement:
    """A vacation preview awaiting confirmation."""

    table: int
    orders: tuple[ArchivedOrder, ...]
    items: tuple[BillLine, ...]
    grand_total: int


@dataclass
class StateSnapshot:
    """The four persisted state buckets."""

    draft_orders: dict[int, list[MenuItem]] = field(default_factory=dict)
    kitchen_orders: list[KitchenOrder] = field(default_factory=list)
    table_occupancy: dict[int, Occupancy] = field(default_factory=dict)
    bills: list[Bill] = field(default_factory=list)


def group_items(items: Iterable[MenuItem]) -> list[BillLine]:
    """Group repeated items by id, keeping first-seen order."""
    counts: dict[int, int] = {}
    first: dict[int, MenuItem] = {}
    for item in items:
        if item.item_id not in first:
            first[item.item_id] = item
        counts[item.item_id] = counts.get(item.item_id, 0) + 1

    return [
        BillLine(
            item_id=item.item_id,
            name=item.name,
            price=item.price,
            category=item.category,
            quantity=counts[item_id],
        )
        for item_id, item in first.items()
    ]


def newest_first_key(timestamp: int, record_id: int) -> tuple[int, int]:
    """Sort key for newest-first display with a deterministic id tie-break."""
    return (-timestamp, -record_id)
