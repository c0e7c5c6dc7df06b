import dataclasses

import pytest

from helpers import Allow, Deny, submit_order
from waiter_app.billing import build_settlement
from waiter_app.data import menu_item
from waiter_app.errors import (
    AuthorizationDenied,
    BillNotFound,
    EditModeRequired,
    NoOrdersForTable,
    NoPendingSettlement,
    NoTableSelected,
)
from waiter_app.models import Occupancy, OrderStatus

WINGS = menu_item(1)  # 180
SPRING_ROLLS = menu_item(3)  # 120
BREAD = menu_item(4)  # 100
COKE = menu_item(9)  # 60
COFFEE = menu_item(12)  # 70
ICE_CREAM = menu_item(13)  # 90


def test_table_five_scenario(book):
    submit_order(book, 5, WINGS, SPRING_ROLLS)  # 300
    submit_order(book, 5, COKE, ICE_CREAM)  # 150
    submit_order(book, 2, COFFEE)

    preview = book.vacate(5)
    assert preview.grand_total == 450
    assert len(preview.orders) == 2
    assert book.bill_count() == 0

    bill = book.confirm_vacate()

    assert bill.table == 5
    assert bill.grand_total == 450
    assert bill.payment_status == "pending"
    assert len(bill.source_orders) == 2
    assert book.orders_for_table(5) == []
    assert [order.table for order in book.kitchen_orders()] == [2]
    assert book.table_occupancy(5) is Occupancy.ACTIVE
    assert book.ledger_bills() == [bill]


def test_grand_total_matches_grouped_lines(book):
    submit_order(book, 1, WINGS, WINGS, COKE)
    submit_order(book, 1, COKE, BREAD, WINGS)

    preview = book.vacate(1)

    quantities = {line.item_id: line.quantity for line in preview.items}
    assert quantities == {WINGS.item_id: 3, COKE.item_id: 2, BREAD.item_id: 1}
    assert preview.grand_total == sum(line.price * line.quantity for line in preview.items) == 760


def test_vacate_consumes_orders_of_any_status(book):
    served = submit_order(book, 3, COKE)
    book.advance_status(served.order_id, OrderStatus.PREPARING)
    book.advance_status(served.order_id, OrderStatus.READY)
    book.mark_all_ready_as_served(3)
    submit_order(book, 3, WINGS)

    book.vacate(3)
    bill = book.confirm_vacate()

    assert {order.status for order in bill.source_orders} == {OrderStatus.SERVED, OrderStatus.PENDING}
    assert book.orders_for_table(3) == []


def test_vacate_requires_table_and_orders(book):
    with pytest.raises(NoTableSelected):
        book.vacate()
    book.select_table(4)
    with pytest.raises(NoOrdersForTable):
        book.vacate()
    assert book.pending_settlement is None


def test_build_settlement_is_pure(book):
    submit_order(book, 6, COKE)
    before = [(order.order_id, order.status) for order in book.kitchen_orders()]

    build_settlement(6, book.queue.orders)

    assert [(order.order_id, order.status) for order in book.kitchen_orders()] == before


def test_confirm_deselects_and_clears_draft(book):
    submit_order(book, 7, COKE)
    book.add_item(WINGS)
    book.vacate()

    book.confirm_vacate()

    assert book.current_table_selection() is None
    assert book.draft_order(7) == ()


def test_confirm_keeps_other_selection(book):
    submit_order(book, 2, COKE)
    book.select_table(3)
    book.vacate(2)
    book.confirm_vacate()
    assert book.current_table_selection() == 3


def test_confirm_without_preview(book):
    with pytest.raises(NoPendingSettlement):
        book.confirm_vacate()


def test_cancel_vacate_has_no_side_effects(book):
    submit_order(book, 8, COKE)
    book.vacate(8)
    book.cancel_vacate()

    assert book.pending_settlement is None
    assert len(book.orders_for_table(8)) == 1
    with pytest.raises(NoPendingSettlement):
        book.confirm_vacate()


def test_archived_bill_is_detached_from_later_changes(book):
    order = submit_order(book, 1, COKE)
    book.vacate(1)
    book.advance_status(order.order_id, OrderStatus.PREPARING)
    bill = book.confirm_vacate()
    # The preview snapshot was taken before the status change.
    assert bill.source_orders[0].status is OrderStatus.PENDING


def _settle(book, table, *items):
    submit_order(book, table, *items)
    book.vacate(table)
    return book.confirm_vacate()


def test_total_revenue_is_running_sum(book):
    totals = []
    for table, items in [(1, (WINGS,)), (2, (COKE, COKE)), (1, (BREAD, ICE_CREAM))]:
        bill = _settle(book, table, *items)
        totals.append(bill.grand_total)
        assert book.total_revenue() == sum(totals)
    assert book.bill_count() == 3


def test_delete_bill_updates_count_and_revenue(book):
    keep = _settle(book, 1, WINGS)
    drop = _settle(book, 2, COKE, COFFEE)
    revenue = book.total_revenue()

    book.delete_bill(drop.bill_id, Allow())

    assert book.bill_count() == 1
    assert book.total_revenue() == revenue - drop.grand_total
    assert book.ledger_bills() == [keep]


def test_delete_unknown_bill_leaves_ledger(book):
    _settle(book, 1, WINGS)
    with pytest.raises(BillNotFound):
        book.delete_bill(999_999, Allow())
    assert book.bill_count() == 1


def test_delete_bill_requires_authorization(book):
    bill = _settle(book, 1, WINGS)
    with pytest.raises(AuthorizationDenied):
        book.delete_bill(bill.bill_id, Deny())
    assert book.bill_count() == 1


def test_purge_requires_edit_mode_auth_and_confirmation(book):
    _settle(book, 1, WINGS)
    _settle(book, 2, COKE)

    with pytest.raises(EditModeRequired):
        book.purge_all_bills(Allow(), confirmed=True)
    with pytest.raises(AuthorizationDenied):
        book.enter_edit_mode(Deny())

    book.enter_edit_mode(Allow())
    with pytest.raises(AuthorizationDenied):
        book.purge_all_bills(Deny(), confirmed=True)
    assert book.purge_all_bills(Allow(), confirmed=False) == 0
    assert book.bill_count() == 2

    assert book.purge_all_bills(Allow(), confirmed=True) == 2
    assert book.bill_count() == 0
    assert book.total_revenue() == 0
    assert book.edit_mode is False


def test_ledger_newest_first(book):
    first = _settle(book, 1, WINGS)
    second = _settle(book, 2, COKE)
    assert book.ledger_bills() == [second, first]


def test_bill_ids_do_not_collide_with_order_ids(book):
    order = submit_order(book, 1, WINGS)
    book.vacate(1)
    bill = book.confirm_vacate()
    assert bill.bill_id != order.order_id


def test_order_submitted_after_preview_stays_queued(book):
    first = submit_order(book, 5, WINGS)
    book.vacate(5)
    late = submit_order(book, 5, COKE)

    bill = book.confirm_vacate()

    assert [order.order_id for order in bill.source_orders] == [first.order_id]
    assert bill.grand_total == 180
    assert [order.order_id for order in book.orders_for_table(5)] == [late.order_id]
    assert book.can_vacate(5)


def test_archived_orders_are_read_only(book):
    submit_order(book, 2, COKE)
    book.vacate(2)
    bill = book.confirm_vacate()

    with pytest.raises(dataclasses.FrozenInstanceError):
        bill.source_orders[0].status = OrderStatus.SERVED
    assert book.ledger_bills()[0].source_orders[0].status is OrderStatus.PENDING
