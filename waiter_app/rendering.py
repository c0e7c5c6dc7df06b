"""Rendering helpers for tables, orders and bills."""

from __future__ import annotations

from datetime import datetime

from rich.text import Text

from waiter_app.config import CURRENCY_SYMBOL
from waiter_app.models import Bill, BillLine, KitchenOrder, OrderStatus, PendingSettlement, group_items

_STATUS_STYLES: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "bold #1f1f1f on #f2c14e",
    OrderStatus.PREPARING: "bold #ffffff on #2f6db5",
    OrderStatus.READY: "bold #0b1f0f on #5fbf72",
    OrderStatus.SERVED: "bold #ffffff on #6b6b6b",
}


def money(amount: int) -> str:
    return f"{CURRENCY_SYMBOL}{amount}"


def clock_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%H:%M")


def full_datetime(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d %b %Y, %H:%M")


def status_badge(status: OrderStatus) -> Text:
    """Return a consistent badge for an order status."""
    return Text(f" {status.value.upper()} ", style=_STATUS_STYLES[status])


def format_table_label(table: int, selected: bool, vacated: bool, active_count: int) -> Text:
    text = Text()
    pointer = "➤ " if selected else "  "
    text.append(pointer)
    text.append(f"Table {table}", style="bold" if selected else "")
    if vacated:
        text.append(" (vacated)", style="dim")
    if active_count > 0:
        text.append(" ")
        text.append(f" {active_count} ", style="bold #ffffff on #b23a48")
    return text


def format_lines(lines: list[BillLine], show_unit_price: bool = False) -> Text:
    text = Text()
    for idx, line in enumerate(lines):
        if idx > 0:
            text.append("\n")
        text.append(line.name)
        if show_unit_price:
            text.append(f"  {money(line.price)}", style="dim")
        text.append(f"  ×{line.quantity}", style="bold")
        text.append(f"  {money(line.line_total)}")
    return text


def format_order_card(order: KitchenOrder, show_table: bool = True) -> Text:
    """Render one kitchen order with status, items and total."""
    text = Text()
    if show_table:
        text.append(f"Table {order.table}", style="bold")
        text.append("  ")
    text.append(f"⏰ {clock_time(order.timestamp)} ")
    text.append_text(status_badge(order.status))
    for line in group_items(order.items):
        text.append(f"\n    {line.name} × {line.quantity}  {money(line.line_total)}")
    text.append(f"\n    Total: {money(order.total)}", style="bold")
    return text


def bill_items_summary(bill: Bill) -> str:
    """First three grouped items, then a count of the rest."""
    shown = ", ".join(f"{line.name} x{line.quantity}" for line in bill.items[:3])
    if len(bill.items) > 3:
        return f"{shown}, +{len(bill.items) - 3} more"
    return shown


def format_bill_card(bill: Bill) -> Text:
    text = Text()
    text.append(f"Table {bill.table} Bill", style="bold")
    text.append(f"  ⏰ {full_datetime(bill.timestamp)}")
    text.append(f"\n    {bill_items_summary(bill)}")
    text.append(f"\n    {money(bill.grand_total)}", style="bold")
    text.append(f"  {len(bill.items)} items", style="dim")
    return text


def format_bill_details(bill: Bill) -> Text:
    text = Text()
    text.append(f"Table {bill.table}", style="bold")
    text.append(f"  {full_datetime(bill.timestamp)}\n\n")
    text.append_text(format_lines(list(bill.items)))
    text.append(f"\n\nGrand Total  {money(bill.grand_total)}", style="bold")
    return text


def format_settlement(settlement: PendingSettlement, now_ms: int) -> Text:
    text = Text()
    text.append(f"Table {settlement.table}", style="bold")
    text.append(f"  {full_datetime(now_ms)}\n\n")
    text.append_text(format_lines(list(settlement.items), show_unit_price=True))
    text.append(f"\n\nGrand Total  {money(settlement.grand_total)}", style="bold")
    return text
