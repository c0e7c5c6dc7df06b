import asyncio
from datetime import datetime

from helpers import FakeClock
from waiter_app.confirm_modal import ConfirmModal
from waiter_app.data import MENU_ITEMS
from waiter_app.date_modal import TableNumberModal
from waiter_app.models import OrderStatus
from waiter_app.persistence import MemoryStore
from waiter_app.state import OrderBook
from waiter_app.waiter_tui import WaiterApp


def _app(tmp_path, table_count=8):
    book = OrderBook(MemoryStore(), table_count=table_count, clock=FakeClock(datetime(2026, 10, 19, 19, 0)))
    return WaiterApp(book, report_dir=tmp_path, printer_enabled=False)


def test_order_to_bill_flow(tmp_path):
    app = _app(tmp_path)

    async def run():
        async with app.run_test() as pilot:
            await pilot.press("3")
            await pilot.press("enter", "j", "enter")
            assert [item.item_id for item in app.book.draft_order()] == [MENU_ITEMS[0].item_id, MENU_ITEMS[1].item_id]

            await pilot.press("ctrl+s")
            assert app.book.draft_order() == ()
            assert app.book.active_order_count(3) == 1

            await pilot.press("f2", "p", "r")
            assert app.book.kitchen_orders()[0].status is OrderStatus.READY

            await pilot.press("f1", "m")
            assert app.book.kitchen_orders()[0].status is OrderStatus.SERVED

            await pilot.press("v")
            await pilot.pause()
            assert isinstance(app.screen, ConfirmModal)
            await pilot.press("y")
            await pilot.pause()

            assert app.book.bill_count() == 1
            assert app.book.total_revenue() == MENU_ITEMS[0].price + MENU_ITEMS[1].price
            assert app.book.current_table_selection() is None

    asyncio.run(run())


def test_vacate_cancel_keeps_orders(tmp_path):
    app = _app(tmp_path)

    async def run():
        async with app.run_test() as pilot:
            await pilot.press("5", "enter", "ctrl+s", "v")
            await pilot.pause()
            await pilot.press("n")
            await pilot.pause()

            assert app.book.bill_count() == 0
            assert app.book.pending_settlement is None
            assert len(app.book.orders_for_table(5)) == 1

    asyncio.run(run())


def test_keys_without_table_show_errors(tmp_path):
    app = _app(tmp_path)

    async def run():
        async with app.run_test() as pilot:
            await pilot.press("enter", "ctrl+s", "f3", "x")
            assert app.book.kitchen_orders() == []
            assert app.active_view == "billing"
            assert not app.book.edit_mode

    asyncio.run(run())


def test_table_number_prompt_reaches_two_digit_tables(tmp_path):
    app = _app(tmp_path, table_count=12)

    async def run():
        async with app.run_test() as pilot:
            await pilot.press("t", "1", "3", "enter")
            await pilot.pause()
            assert isinstance(app.screen, TableNumberModal)
            assert app.screen.error == "Table must be between 1 and 12"

            await pilot.press("backspace", "2", "enter")
            await pilot.pause()
            assert not isinstance(app.screen, TableNumberModal)
            assert app.book.current_table_selection() == 12

            await pilot.press("enter", "ctrl+s")
            assert [order.table for order in app.book.kitchen_orders()] == [12]

    asyncio.run(run())


def test_rejected_order_actions_leave_state_alone(tmp_path):
    app = _app(tmp_path)

    async def run():
        async with app.run_test() as pilot:
            await pilot.press("c", "9", "enter")
            assert app.book.current_table_selection() is None
            assert app.book.draft_order() == ()

            await pilot.press("2", "enter", "c")
            assert app.book.current_table_selection() == 2
            assert app.book.draft_order() == ()

    asyncio.run(run())
