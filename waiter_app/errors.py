"""Recoverable failures raised by the order book."""

from __future__ import annotations


class OrderBookError(Exception):
    """Base class for user-facing order book failures."""

    default_message = "Action failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class NoTableSelected(OrderBookError):
    default_message = "Please select a table first"


class InvalidTable(OrderBookError):
    default_message = "Unknown table"


class EmptyDraft(OrderBookError):
    default_message = "No items to send"


class OrderNotFound(OrderBookError):
    default_message = "Order not found"


class InvalidStatusTransition(OrderBookError):
    default_message = "Invalid status change"


class NoReadyOrders(OrderBookError):
    default_message = "No ready items to mark as served"


class NoOrdersForTable(OrderBookError):
    default_message = "No orders to bill for this table"


class NoPendingSettlement(OrderBookError):
    default_message = "No pending vacation"


class BillNotFound(OrderBookError):
    default_message = "Bill not found"


class AuthorizationDenied(OrderBookError):
    default_message = "Incorrect password"


class EditModeRequired(OrderBookError):
    default_message = "Edit Mode must be active"


class NoBillsForDate(OrderBookError):
    default_message = "No bills found for that date"


class PersistenceFailure(OrderBookError):
    default_message = "Could not save state; continuing in memory"
