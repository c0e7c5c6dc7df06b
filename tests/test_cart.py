from collections import Counter

import pytest

from waiter_app.data import menu_item
from waiter_app.errors import EmptyDraft, InvalidTable, NoTableSelected
from waiter_app.models import Occupancy, OrderStatus

WINGS = menu_item(1)
COKE = menu_item(9)
BIRYANI = menu_item(7)


def test_add_item_requires_selected_table(book):
    with pytest.raises(NoTableSelected):
        book.add_item(WINGS)
    with pytest.raises(NoTableSelected):
        book.clear_draft()
    with pytest.raises(NoTableSelected):
        book.submit()


def test_select_table_creates_empty_draft(book):
    book.select_table(4)
    assert book.current_table_selection() == 4
    assert book.draft_order() == ()
    assert book.draft_lines() == []


def test_select_table_rejects_unknown_table(book):
    with pytest.raises(InvalidTable):
        book.select_table(9)
    assert book.current_table_selection() is None


def test_select_table_revives_vacated_table(book):
    book.tables.occupancy[2] = Occupancy.VACATED
    book.select_table(2)
    assert book.table_occupancy(2) is Occupancy.ACTIVE


def test_duplicates_are_grouped_on_read(book):
    book.select_table(3)
    book.add_item(WINGS)
    book.add_item(COKE)
    book.add_item(WINGS)

    assert len(book.draft_order()) == 3
    lines = {line.name: line for line in book.draft_lines()}
    assert lines["Chicken Wings"].quantity == 2
    assert lines["Chicken Wings"].line_total == 360
    assert lines["Coke"].quantity == 1
    assert book.draft_total() == 420


def test_submit_moves_draft_multiset_into_pending_order(book):
    book.select_table(6)
    added = [WINGS, BIRYANI, COKE, BIRYANI, BIRYANI]
    for item in added:
        book.add_item(item)

    order = book.submit()

    assert order.status is OrderStatus.PENDING
    assert order.table == 6
    assert Counter(item.item_id for item in order.items) == Counter(item.item_id for item in added)
    assert book.draft_order() == ()
    assert book.kitchen_orders() == [order]


def test_submit_empty_draft_leaves_queue_unchanged(book):
    book.select_table(1)
    book.add_item(COKE)
    book.submit()
    before = [order.order_id for order in book.kitchen_orders()]

    with pytest.raises(EmptyDraft):
        book.submit()

    assert [order.order_id for order in book.kitchen_orders()] == before


def test_submit_does_not_touch_other_tables(book):
    book.select_table(1)
    book.add_item(WINGS)
    book.select_table(2)
    book.add_item(COKE)
    book.submit()

    assert book.draft_order(1) == (WINGS,)
    assert [order.table for order in book.kitchen_orders()] == [2]


def test_order_ids_are_unique(book):
    book.select_table(1)
    ids = set()
    for _ in range(5):
        book.add_item(COKE)
        ids.add(book.submit().order_id)
    assert len(ids) == 5


def test_clear_draft_empties_only_current_table(book):
    book.select_table(1)
    book.add_item(WINGS)
    book.select_table(2)
    book.add_item(COKE)
    book.clear_draft()

    assert book.draft_order(2) == ()
    assert book.draft_order(1) == (WINGS,)


def test_clear_table_statuses_resets_markers(book, store):
    book.tables.occupancy[4] = Occupancy.VACATED
    book.select_table(2)
    book.add_item(COKE)
    book.submit()
    book.vacate(2)
    book.confirm_vacate()

    book.clear_table_statuses()

    assert book.table_occupancy(2) is None
    assert book.table_occupancy(4) is None
    assert store.snapshot.table_occupancy == {}
