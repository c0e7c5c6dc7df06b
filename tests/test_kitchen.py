import pytest

from helpers import submit_order
from waiter_app.data import menu_item
from waiter_app.errors import InvalidStatusTransition, NoReadyOrders, OrderNotFound
from waiter_app.models import OrderStatus

WINGS = menu_item(1)
COKE = menu_item(9)


def test_table_three_scenario(book):
    order = submit_order(book, 3, WINGS, WINGS, COKE)
    assert book.active_order_count(3) == 1

    book.advance_status(order.order_id, "preparing")
    book.advance_status(order.order_id, OrderStatus.READY)
    assert book.can_mark_served(3)

    served = book.mark_all_ready_as_served(3)

    assert [o.order_id for o in served] == [order.order_id]
    assert book.kitchen_orders()[0].status is OrderStatus.SERVED
    assert book.active_order_count(3) == 0
    assert book.can_vacate(3)


@pytest.mark.parametrize(
    "path, target",
    [
        ([], OrderStatus.READY),
        ([], OrderStatus.SERVED),
        ([], OrderStatus.PENDING),
        ([OrderStatus.PREPARING], OrderStatus.PENDING),
        ([OrderStatus.PREPARING, OrderStatus.READY], OrderStatus.PENDING),
        ([OrderStatus.PREPARING, OrderStatus.READY], OrderStatus.PREPARING),
        ([OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.SERVED], OrderStatus.SERVED),
    ],
)
def test_invalid_transitions_are_rejected(book, path, target):
    order = submit_order(book, 1, COKE)
    for status in path:
        book.advance_status(order.order_id, status)
    before = book.kitchen_orders()[0].status

    with pytest.raises(InvalidStatusTransition):
        book.advance_status(order.order_id, target)

    assert book.kitchen_orders()[0].status is before


def test_unknown_status_value_is_rejected(book):
    order = submit_order(book, 1, COKE)
    with pytest.raises(InvalidStatusTransition):
        book.advance_status(order.order_id, "cooking")


def test_advance_unknown_order(book):
    with pytest.raises(OrderNotFound):
        book.advance_status(424242, OrderStatus.PREPARING)


def test_status_history_is_forward_only(book):
    order = submit_order(book, 2, COKE)
    seen = [book.kitchen_orders()[0].status]
    for target in OrderStatus:
        try:
            book.advance_status(order.order_id, target)
        except InvalidStatusTransition:
            pass
        seen.append(book.kitchen_orders()[0].status)

    stages = list(OrderStatus)
    indexes = [stages.index(status) for status in seen]
    assert indexes == sorted(indexes)
    assert seen[-1] is OrderStatus.SERVED


def test_mark_served_without_ready_orders(book):
    order = submit_order(book, 5, COKE)
    book.advance_status(order.order_id, OrderStatus.PREPARING)
    assert not book.can_mark_served(5)

    with pytest.raises(NoReadyOrders):
        book.mark_all_ready_as_served(5)
    assert book.kitchen_orders()[0].status is OrderStatus.PREPARING


def test_mark_served_only_touches_ready_orders_of_table(book):
    first = submit_order(book, 4, COKE)
    second = submit_order(book, 4, WINGS)
    other = submit_order(book, 7, WINGS)
    for order in (first, other):
        book.advance_status(order.order_id, OrderStatus.PREPARING)
        book.advance_status(order.order_id, OrderStatus.READY)

    book.mark_all_ready_as_served(4)

    statuses = {order.order_id: order.status for order in book.kitchen_orders()}
    assert statuses[first.order_id] is OrderStatus.SERVED
    assert statuses[second.order_id] is OrderStatus.PENDING
    assert statuses[other.order_id] is OrderStatus.READY
    assert book.active_order_count(4) == 1


def test_filter_and_newest_first_ordering(book):
    older = submit_order(book, 1, COKE)
    newer = submit_order(book, 2, WINGS)
    newest = submit_order(book, 1, WINGS)
    book.advance_status(newer.order_id, OrderStatus.PREPARING)

    assert [o.order_id for o in book.kitchen_orders("all")] == [newest.order_id, newer.order_id, older.order_id]
    assert [o.order_id for o in book.kitchen_orders("pending")] == [newest.order_id, older.order_id]
    assert [o.order_id for o in book.kitchen_orders(OrderStatus.PREPARING)] == [newer.order_id]
    assert [o.order_id for o in book.orders_for_table(1)] == [newest.order_id, older.order_id]


def test_equal_timestamps_sort_by_id(book):
    book.clock = lambda: 5_000_000
    first = submit_order(book, 1, COKE)
    second = submit_order(book, 1, WINGS)

    assert [o.order_id for o in book.kitchen_orders()] == [second.order_id, first.order_id]


def test_order_items_are_snapshots(book):
    order = submit_order(book, 8, WINGS)
    book.select_table(8)
    book.add_item(COKE)
    assert [item.item_id for item in book.kitchen_orders()[0].items] == [WINGS.item_id]
    assert order.total == 180
