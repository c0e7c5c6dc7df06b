"""Kitchen queue and the order status state machine."""

from __future__ import annotations

import logging
from typing import Iterable

from waiter_app.errors import InvalidStatusTransition, NoReadyOrders, OrderNotFound
from waiter_app.models import KitchenOrder, MenuItem, OrderStatus, newest_first_key

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


def sort_newest_first(orders: Iterable[KitchenOrder]) -> list[KitchenOrder]:
    return sorted(orders, key=lambda order: newest_first_key(order.timestamp, order.order_id))


def parse_status(value: OrderStatus | str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise InvalidStatusTransition(f"Unknown order status: {value}") from exc


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Allow only a single step forward through the lifecycle."""
    if current.next_status() is not target:
        raise InvalidStatusTransition(
            f"Cannot move order from {current.value} to {target.value}"
        )


class KitchenQueue:
    """Submitted orders awaiting preparation, serving and settlement."""

    def __init__(self, orders: Iterable[KitchenOrder] = ()) -> None:
        self.orders: list[KitchenOrder] = list(orders)

    def enqueue(self, order_id: int, table: int, items: tuple[MenuItem, ...], timestamp: int) -> KitchenOrder:
        order = KitchenOrder(
            order_id=order_id,
            table=table,
            items=tuple(items),
            timestamp=timestamp,
            status=OrderStatus.PENDING,
        )
        self.orders.append(order)
        logger.info("order_enqueued id=%s table=%s items=%s", order_id, table, len(order.items))
        return order

    def get(self, order_id: int) -> KitchenOrder:
        for order in self.orders:
            if order.order_id == order_id:
                return order
        raise OrderNotFound(f"Order {order_id} not found")

    def advance_status(self, order_id: int, target: OrderStatus | str) -> KitchenOrder:
        order = self.get(order_id)
        target = parse_status(target)
        check_transition(order.status, target)
        previous = order.status
        order.status = target
        logger.info("order_status id=%s %s->%s", order_id, previous.value, target.value)
        return order

    def mark_all_ready_as_served(self, table: int) -> list[KitchenOrder]:
        ready = [order for order in self.orders if order.table == table and order.status is OrderStatus.READY]
        if not ready:
            raise NoReadyOrders()
        for order in ready:
            order.status = OrderStatus.SERVED
        logger.info("orders_served table=%s count=%s", table, len(ready))
        return ready

    def orders_for_table(self, table: int) -> list[KitchenOrder]:
        return sort_newest_first(order for order in self.orders if order.table == table)

    def filter_by_status(self, status: OrderStatus | str = ALL_STATUSES) -> list[KitchenOrder]:
        if status == ALL_STATUSES:
            return sort_newest_first(self.orders)
        status = parse_status(status)
        return sort_newest_first(order for order in self.orders if order.status is status)

    def remove_orders(self, order_ids: Iterable[int]) -> list[KitchenOrder]:
        """Drop the given orders; ids no longer queued are ignored."""
        ids = set(order_ids)
        removed = [order for order in self.orders if order.order_id in ids]
        self.orders = [order for order in self.orders if order.order_id not in ids]
        return removed

    def max_id(self) -> int:
        return max((order.order_id for order in self.orders), default=0)
