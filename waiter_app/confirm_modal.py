"""Confirmation modal for settlements and destructive ledger actions."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static


class ConfirmModal(ModalScreen[bool]):
    """Show a body and dismiss with True on confirm, False on cancel.

    With ``confirm_label=None`` the modal is read-only and any close key
    dismisses it with False.
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("n", "cancel", "Cancel"),
        ("q", "cancel", "Cancel"),
        ("ctrl+c", "cancel", "Cancel"),
        ("y", "confirm", "Confirm"),
        ("enter", "confirm", "Confirm"),
    ]

    CSS = """
    ConfirmModal {
        align: center middle;
        background: $background 60%;
    }

    #confirm-dialog {
        width: 64;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #confirm-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #confirm-body {
        margin-bottom: 1;
        color: white;
    }

    #confirm-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, title: str, body: Text | str, confirm_label: str | None = "Confirm") -> None:
        super().__init__()
        self.title_text = title
        self.body = body
        self.confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Container(id="confirm-dialog"):
            yield Static(self.title_text, id="confirm-title")
            yield Static(self.body, id="confirm-body")
            yield Static(self._help_text(), id="confirm-help")

    def _help_text(self) -> str:
        if self.confirm_label is None:
            return "Esc/q/Enter close"
        return f"Y/Enter {self.confirm_label}, N/Esc cancel"

    def action_confirm(self) -> None:
        self.dismiss(self.confirm_label is not None)

    def action_cancel(self) -> None:
        self.dismiss(False)
