"""Admin password entry modal screen."""

from __future__ import annotations

from waiter_app.entry_modal import EntryModal


class PasswordModal(EntryModal[str | None]):
    """Prompt for the admin password; dismisses with the typed text or None."""

    title_text = "Enter admin password to continue"

    def display_value(self) -> str:
        return "•" * len(self.value)
