"""Report date and table number entry modals."""

from __future__ import annotations

from datetime import date

from waiter_app.entry_modal import EntryModal

_NUMBER_HELP = "Enter confirm. Backspace delete. Esc/q/Ctrl+C cancel."


class ReportDateModal(EntryModal[date | None]):
    """Prompt for a YYYY-MM-DD report date, prefilled with today."""

    title_text = "Daily Report"
    prompt_text = "Enter date for report (YYYY-MM-DD)"
    help_text = _NUMBER_HELP
    cancel_keys = frozenset({"escape", "q", "ctrl+c"})
    max_length = 10

    def __init__(self, today: date | None = None) -> None:
        super().__init__((today or date.today()).isoformat())

    def accepts(self, char: str) -> bool:
        return char.isdigit() or char == "-"

    def parse(self, value: str) -> date:
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise ValueError("Invalid date format. Please use YYYY-MM-DD") from None


class TableNumberModal(EntryModal[int | None]):
    """Prompt for a table number when tables go past the single digit keys."""

    title_text = "Select Table"
    help_text = _NUMBER_HELP
    cancel_keys = frozenset({"escape", "q", "ctrl+c"})

    def __init__(self, table_count: int) -> None:
        super().__init__()
        self.table_count = table_count
        self.prompt_text = f"Enter a table number from 1 to {table_count}"
        self.max_length = len(str(table_count))

    def accepts(self, char: str) -> bool:
        return char.isdigit()

    def parse(self, value: str) -> int:
        if not value or not 1 <= int(value) <= self.table_count:
            raise ValueError(f"Table must be between 1 and {self.table_count}")
        return int(value)
