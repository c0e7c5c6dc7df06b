"""Main Textual app class."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, TypeVar

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from waiter_app.auth import PasswordAuthorization
from waiter_app.config import DB_PATH, REPORT_DIR
from waiter_app.confirm_modal import ConfirmModal
from waiter_app.constant import STATUS_FILTERS
from waiter_app.data import MENU_ITEMS, category_title
from waiter_app.date_modal import ReportDateModal, TableNumberModal
from waiter_app.errors import EditModeRequired, OrderBookError
from waiter_app.models import Bill, KitchenOrder, OrderStatus
from waiter_app.password_modal import PasswordModal
from waiter_app.persistence import SqliteStore
from waiter_app.printer import check_printer_dependencies, print_bill
from waiter_app.rendering import (
    format_bill_card,
    format_bill_details,
    format_lines,
    format_order_card,
    format_settlement,
    format_table_label,
    money,
)
from waiter_app.reports import render_daily_report_pdf
from waiter_app.state import OrderBook

logger = logging.getLogger(__name__)

T = TypeVar("T")

VIEWS = ("order", "kitchen", "billing")
_CARD_ROWS = 4


class WaiterApp(App):
    """A Textual app for taking table orders, tracking the kitchen and billing."""

    TITLE = "Waiter Menu"
    SUB_TITLE = "Orders / Kitchen / Billing"

    CSS = """
    Screen {
        layout: vertical;
    }

    #view-tabs {
        height: 1;
        padding: 0 1;
    }

    #order-view, #kitchen-view, #billing-view {
        height: 1fr;
    }

    #tables-pane {
        width: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    #menu-pane {
        width: 2fr;
        border: round $secondary;
        padding: 0 1;
    }

    #draft-pane {
        width: 2fr;
        border: round $primary;
        padding: 0 1;
    }

    #draft-list, #table-status-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #kitchen-list, #bills-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #kitchen-filter, #billing-summary {
        border: heavy $secondary;
        padding: 0 1;
        height: 3;
    }

    #status-bar {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        ("f1", "show_view('order')", "Order"),
        ("f2", "show_view('kitchen')", "Kitchen"),
        ("f3", "show_view('billing')", "Billing"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "activate", "Add / Details"),
        Binding("ctrl+s", "send_to_kitchen", "Send to Kitchen", priority=True),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        book: OrderBook | None = None,
        report_dir: str | Path = REPORT_DIR,
        printer_enabled: bool = True,
    ) -> None:
        super().__init__()
        self.book = book if book is not None else OrderBook(SqliteStore(DB_PATH))
        self.book.notify = self.toast
        self.report_dir = Path(report_dir)
        self.printer_enabled = printer_enabled
        self.active_view = "order"
        self.menu_index = 0
        self.kitchen_index = 0
        self.bill_index = 0
        self.kitchen_filter = "all"
        self.system_status = ""
        logger.debug("app_init tables=%s", self.book.tables.table_count)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="view-tabs")
        with Horizontal(id="order-view"):
            with Vertical(id="tables-pane"):
                yield Static("Tables", classes="pane-title")
                yield Static(id="tables-list")
            with Vertical(id="menu-pane"):
                yield Static("Menu", classes="pane-title")
                yield Static(id="menu-list")
            with Vertical(id="draft-pane"):
                yield Static(id="draft-title", classes="pane-title")
                yield Static(id="draft-list")
                yield Static(id="table-status-title", classes="pane-title")
                yield Static(id="table-status-list")
        with Vertical(id="kitchen-view"):
            yield Static(id="kitchen-filter")
            yield Static(id="kitchen-list")
        with Vertical(id="billing-view"):
            yield Static(id="billing-summary")
            yield Static(id="bills-list")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        if self.printer_enabled:
            _, msg = check_printer_dependencies()
        else:
            msg = "Printer disabled"
        self.system_status = msg
        logger.info("on_mount printer_status=%r", msg)
        self._refresh_all()

    # -- notifications -------------------------------------------------------

    def toast(self, message: str, kind: str = "success") -> None:
        """Notification sink: success or error toast."""
        logger.debug("toast kind=%s message=%s", kind, message)
        self.notify(message, severity="error" if kind == "error" else "information", timeout=2.5)

    def _attempt(self, action: Callable[[], T]) -> T | None:
        """Run a core action, turning order book failures into error toasts."""
        try:
            return action()
        except OrderBookError as exc:
            logger.info("action_rejected error=%s message=%s", type(exc).__name__, exc.message)
            self.toast(exc.message, "error")
            return None

    # -- keyboard ----------------------------------------------------------

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        char = event.character
        logger.debug("on_key key=%r char=%r view=%r", event.key, char, self.active_view)
        handler = {
            "order": self._handle_order_key,
            "kitchen": self._handle_kitchen_key,
            "billing": self._handle_billing_key,
        }[self.active_view]
        if handler(char):
            event.stop()

    def _handle_order_key(self, char: str) -> bool:
        if char.isdigit() and char != "0":
            self.action_select_table(int(char))
            return True
        if char == "j":
            self.action_move_cursor(1)
            return True
        if char == "k":
            self.action_move_cursor(-1)
            return True
        if char == "c":
            self.action_clear_draft()
            return True
        if char == "t":
            self.action_enter_table_number()
            return True
        if char == "m":
            self.action_mark_served()
            return True
        if char == "v":
            self.action_vacate()
            return True
        return False

    def _handle_kitchen_key(self, char: str) -> bool:
        if char == "j":
            self.action_move_cursor(1)
            return True
        if char == "k":
            self.action_move_cursor(-1)
            return True
        if char == "f":
            self.action_cycle_filter()
            return True
        if char == "p":
            self.action_advance_selected(OrderStatus.PREPARING.value)
            return True
        if char == "r":
            self.action_advance_selected(OrderStatus.READY.value)
            return True
        return False

    def _handle_billing_key(self, char: str) -> bool:
        if char == "j":
            self.action_move_cursor(1)
            return True
        if char == "k":
            self.action_move_cursor(-1)
            return True
        if char == "e":
            self.action_toggle_edit_mode()
            return True
        if char == "x":
            self.action_delete_selected_bill()
            return True
        if char == "X":
            self.action_purge_bills()
            return True
        if char == "d":
            self.action_daily_report()
            return True
        if char == "P":
            self.action_print_selected_bill()
            return True
        return False

    # -- navigation --------------------------------------------------------

    def action_show_view(self, view: str) -> None:
        if isinstance(self.screen, ModalScreen) or view not in VIEWS:
            return
        self.active_view = view
        logger.debug("view_switched view=%s", view)
        self._refresh_all()

    def action_move_cursor(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.active_view == "order":
            self.menu_index = (self.menu_index + delta) % len(MENU_ITEMS)
            self._refresh_menu()
        elif self.active_view == "kitchen":
            total = len(self._visible_orders())
            if total:
                self.kitchen_index = (self.kitchen_index + delta) % total
            self._refresh_kitchen()
        else:
            total = self.book.bill_count()
            if total:
                self.bill_index = (self.bill_index + delta) % total
            self._refresh_billing()

    def action_activate(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.active_view == "order":
            self.action_add_selected_item()
        elif self.active_view == "billing":
            self.action_show_bill_details()

    # -- order view actions ------------------------------------------------

    def action_select_table(self, table: int | None) -> None:
        if table is None:
            return
        if self._attempt(lambda: self.book.select_table(table)) is None:
            return
        self.toast(f"Table {table} selected")
        self._refresh_all()

    def action_enter_table_number(self) -> None:
        self.push_screen(TableNumberModal(self.book.tables.table_count), callback=self.action_select_table)

    def action_add_selected_item(self) -> None:
        item = self._attempt(lambda: self.book.add_item(MENU_ITEMS[self.menu_index]))
        if item is None:
            return
        self.toast(f"{item.name} added")
        self._refresh_order_view()

    def action_clear_draft(self) -> None:
        if self._attempt(self.book.clear_draft) is None:
            return
        self.toast("Order cleared")
        self._refresh_order_view()

    def action_send_to_kitchen(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        order = self._attempt(self.book.submit)
        if order is None:
            return
        self.toast(f"Order sent to kitchen for Table {order.table}")
        self._refresh_all()

    def action_mark_served(self) -> None:
        table = self.book.current_table_selection()
        served = self._attempt(self.book.mark_all_ready_as_served)
        if served is None:
            return
        self.toast(f"Marked {len(served)} order(s) as served for Table {table}")
        self._refresh_all()

    def action_vacate(self) -> None:
        settlement = self._attempt(self.book.vacate)
        if settlement is None:
            return
        body = format_settlement(settlement, self.book.clock())
        self.push_screen(
            ConfirmModal(f"Table {settlement.table} Bill", body, "Confirm & Vacate"),
            callback=self._on_vacate_decision,
        )

    def _on_vacate_decision(self, confirmed: bool | None) -> None:
        if not confirmed:
            self.book.cancel_vacate()
            return
        bill = self._attempt(self.book.confirm_vacate)
        if bill is None:
            return
        self.toast(f"Table {bill.table} vacated. Bill generated successfully!")
        self._refresh_all()

    # -- kitchen view actions ----------------------------------------------

    def _visible_orders(self) -> list[KitchenOrder]:
        return self.book.kitchen_orders(self.kitchen_filter)

    def action_cycle_filter(self) -> None:
        idx = STATUS_FILTERS.index(self.kitchen_filter)
        self.kitchen_filter = STATUS_FILTERS[(idx + 1) % len(STATUS_FILTERS)]
        self.kitchen_index = 0
        self._refresh_kitchen()

    def action_advance_selected(self, status: str) -> None:
        orders = self._visible_orders()
        if not orders:
            self.toast("No orders to display", "error")
            return
        order = orders[min(self.kitchen_index, len(orders) - 1)]
        updated = self._attempt(lambda: self.book.advance_status(order.order_id, status))
        if updated is None:
            return
        self.toast(f"Order status updated to {updated.status.value}")
        self._refresh_all()

    # -- billing view actions ----------------------------------------------

    def _selected_bill(self) -> Bill | None:
        bills = self.book.ledger_bills()
        if not bills:
            return None
        self.bill_index = min(self.bill_index, len(bills) - 1)
        return bills[self.bill_index]

    def action_show_bill_details(self) -> None:
        bill = self._selected_bill()
        if bill is None:
            return
        self.push_screen(ConfirmModal(f"Table {bill.table} Bill", format_bill_details(bill), confirm_label=None))

    def action_print_selected_bill(self) -> None:
        bill = self._selected_bill()
        if bill is None:
            self.toast("No bills generated yet", "error")
            return
        if not self.printer_enabled:
            self.toast("Printer disabled", "error")
            return
        try:
            print_bill(bill)
        except Exception as exc:
            logger.error("bill_print_failed id=%s error=%r", bill.bill_id, exc)
            self.toast(f"Print failed: {exc}", "error")
            return
        self.toast(f"Printed Table {bill.table} bill")

    def action_toggle_edit_mode(self) -> None:
        if self.book.edit_mode:
            self.book.exit_edit_mode()
            self.toast("Edit Mode deactivated")
            self._refresh_billing()
            return
        self.push_screen(PasswordModal(), callback=self._on_edit_mode_password)

    def _on_edit_mode_password(self, password: str | None) -> None:
        if password is None:
            return
        try:
            self.book.enter_edit_mode(PasswordAuthorization(password))
        except OrderBookError:
            self.toast("Incorrect password - Edit Mode not activated", "error")
            return
        self.toast("Edit Mode activated")
        self._refresh_billing()

    def action_delete_selected_bill(self) -> None:
        if not self.book.edit_mode:
            self.toast(EditModeRequired().message, "error")
            return
        bill = self._selected_bill()
        if bill is None:
            self.toast("Bill not found", "error")
            return
        self.push_screen(PasswordModal(), callback=lambda password: self._on_delete_password(bill, password))

    def _on_delete_password(self, bill: Bill, password: str | None) -> None:
        if password is None:
            return
        authorization = PasswordAuthorization(password)
        if not authorization.check_admin_password():
            self.toast("Incorrect password", "error")
            return
        body = Text(
            f"Are you sure you want to delete Table {bill.table} bill?\n\n"
            f"Total: {money(bill.grand_total)}\n\nThis action cannot be undone."
        )
        self.push_screen(
            ConfirmModal("Delete Bill", body, "Delete"),
            callback=lambda confirmed: self._on_delete_decision(bill, authorization, confirmed),
        )

    def _on_delete_decision(self, bill: Bill, authorization: PasswordAuthorization, confirmed: bool | None) -> None:
        if not confirmed:
            return
        if self._attempt(lambda: self.book.delete_bill(bill.bill_id, authorization)) is None:
            return
        self.toast("Bill deleted successfully")
        self._refresh_billing()

    def action_purge_bills(self) -> None:
        if not self.book.edit_mode:
            self.toast(EditModeRequired().message, "error")
            return
        self.push_screen(PasswordModal(), callback=self._on_purge_password)

    def _on_purge_password(self, password: str | None) -> None:
        if password is None:
            return
        authorization = PasswordAuthorization(password)
        if not authorization.check_admin_password():
            self.toast("Incorrect password", "error")
            return
        body = Text(
            "WARNING: This will permanently delete ALL billing records!\n\n"
            "This action cannot be undone.\n\nAre you absolutely sure?"
        )
        self.push_screen(
            ConfirmModal("Clear All Billing Data", body, "Delete Everything"),
            callback=lambda confirmed: self._on_purge_decision(authorization, bool(confirmed)),
        )

    def _on_purge_decision(self, authorization: PasswordAuthorization, confirmed: bool) -> None:
        removed = self._attempt(lambda: self.book.purge_all_bills(authorization, confirmed))
        if not confirmed or removed is None:
            return
        self.bill_index = 0
        self.toast("All billing data cleared successfully")
        self._refresh_billing()

    def action_daily_report(self) -> None:
        self.push_screen(ReportDateModal(), callback=self._on_report_date)

    def _on_report_date(self, day: date | None) -> None:
        if day is None:
            self.toast("Report generation cancelled", "error")
            return
        report = self._attempt(lambda: self.book.daily_report(day))
        if report is None:
            return
        try:
            path = render_daily_report_pdf(report, self.report_dir)
        except OSError as exc:
            logger.error("daily_report_failed day=%s error=%r", day, exc)
            self.toast("Error generating PDF report", "error")
            return
        self.toast(f"Report for {day.isoformat()} saved to {path}")

    # -- rendering ---------------------------------------------------------

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_all(self) -> None:
        try:
            self.query_one("#view-tabs", Static)
        except NoMatches:
            return
        self._refresh_tabs()
        self._refresh_order_view()
        self._refresh_kitchen()
        self._refresh_billing()
        self._refresh_status_bar()

    def _refresh_tabs(self) -> None:
        text = Text()
        for idx, view in enumerate(VIEWS):
            if idx > 0:
                text.append("  ")
            label = f" F{idx + 1} {view.title()} "
            text.append(label, style="bold reverse" if view == self.active_view else "dim")
        self.query_one("#view-tabs", Static).update(text)
        self.query_one("#order-view").display = self.active_view == "order"
        self.query_one("#kitchen-view").display = self.active_view == "kitchen"
        self.query_one("#billing-view").display = self.active_view == "billing"

    def _refresh_status_bar(self) -> None:
        parts = [self.system_status or "Ready"]
        if self.book.edit_mode:
            parts.append("EDIT MODE")
        if not self.book.persistence_enabled:
            parts.append("in-memory only")
        self.query_one("#status-bar", Static).update(" | ".join(parts))

    def _refresh_order_view(self) -> None:
        self._refresh_tables()
        self._refresh_menu()
        self._refresh_draft()
        self._refresh_table_status()

    def _refresh_tables(self) -> None:
        current = self.book.current_table_selection()
        lines = Text()
        for idx, table in enumerate(self.book.tables.table_numbers()):
            if idx > 0:
                lines.append("\n")
            lines.append_text(
                format_table_label(
                    table,
                    selected=table == current,
                    vacated=self.book.tables.is_vacated(table),
                    active_count=self.book.active_order_count(table),
                )
            )
        lines.append("\n\nT enter table number", style="dim")
        self.query_one("#tables-list", Static).update(lines)

    def _refresh_menu(self) -> None:
        lines = Text()
        category = None
        for idx, item in enumerate(MENU_ITEMS):
            if item.category != category:
                category = item.category
                if idx > 0:
                    lines.append("\n")
                lines.append(category_title(category), style="bold underline")
            pointer = "➤ " if idx == self.menu_index else "  "
            lines.append(f"\n{pointer}{item.name}")
            lines.append(f"  {money(item.price)}", style="dim")
        self.query_one("#menu-list", Static).update(lines)

    def _refresh_draft(self) -> None:
        title = self.query_one("#draft-title", Static)
        draft = self.query_one("#draft-list", Static)
        table = self.book.current_table_selection()
        if table is None:
            title.update("No Table Selected")
            draft.update("Select a table first")
            return

        title.update(f"Table {table} - Current Order")
        lines = self.book.draft_lines()
        if not lines:
            draft.update("No items added yet")
            return

        text = format_lines(lines)
        text.append(f"\n\nTotal: {money(self.book.draft_total())}", style="bold")
        text.append("\nCtrl+S send to kitchen, C clear", style="dim")
        draft.update(text)

    def _refresh_table_status(self) -> None:
        title = self.query_one("#table-status-title", Static)
        body = self.query_one("#table-status-list", Static)
        table = self.book.current_table_selection()
        if table is None:
            title.update("Table Status")
            body.update("Select a table to view status")
            return

        title.update(f"Table {table} - Status")
        orders = self.book.orders_for_table(table)
        if not orders:
            body.update("No orders for this table yet")
            return

        text = Text()
        for idx, order in enumerate(orders):
            if idx > 0:
                text.append("\n")
            text.append_text(format_order_card(order, show_table=False))
        hints = []
        if self.book.can_mark_served():
            hints.append("M mark ready as served")
        if self.book.can_vacate():
            hints.append("V vacate table")
        if hints:
            text.append("\n\n" + ", ".join(hints), style="dim")
        body.update(text)

    def _refresh_kitchen(self) -> None:
        filter_bar = self.query_one("#kitchen-filter", Static)
        listing = self.query_one("#kitchen-list", Static)

        bar = Text()
        for idx, name in enumerate(STATUS_FILTERS):
            if idx > 0:
                bar.append(" ")
            bar.append(f" {name.title()} ", style="bold reverse" if name == self.kitchen_filter else "dim")
        bar.append("\nF filter, J/K move, P preparing, R ready", style="dim")
        filter_bar.update(bar)

        orders = self._visible_orders()
        if not orders:
            self.kitchen_index = 0
            listing.update("No orders to display")
            return
        self.kitchen_index = min(self.kitchen_index, len(orders) - 1)

        visible = max(1, self._visible_rows(listing) // _CARD_ROWS)
        start, end = self._window_bounds(len(orders), visible, self.kitchen_index)
        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            text.append("➤ " if idx == self.kitchen_index else "  ")
            text.append_text(format_order_card(orders[idx]))
        if end < len(orders):
            text.append("\n⋮", style="dim")
        listing.update(text)

    def _refresh_billing(self) -> None:
        summary = self.query_one("#billing-summary", Static)
        listing = self.query_one("#bills-list", Static)

        head = Text()
        head.append(f"Bills: {self.book.bill_count()}", style="bold")
        head.append(f"   Revenue: {money(self.book.total_revenue())}", style="bold")
        if self.book.edit_mode:
            head.append("   EDIT MODE", style="bold #ffffff on #b23a48")
        keys = "Enter details, D daily report, P print, E edit mode"
        if self.book.edit_mode:
            keys += ", X delete, Shift+X clear all"
        head.append(f"\n{keys}", style="dim")
        summary.update(head)

        bills = self.book.ledger_bills()
        if not bills:
            self.bill_index = 0
            listing.update("No bills generated yet")
            return
        self.bill_index = min(self.bill_index, len(bills) - 1)

        visible = max(1, self._visible_rows(listing) // _CARD_ROWS)
        start, end = self._window_bounds(len(bills), visible, self.bill_index)
        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            text.append("➤ " if idx == self.bill_index else "  ")
            text.append_text(format_bill_card(bills[idx]))
        if end < len(bills):
            text.append("\n⋮", style="dim")
        listing.update(text)
