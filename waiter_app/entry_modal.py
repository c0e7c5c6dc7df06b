"""Single-line text entry modal shared by the password, date and table prompts."""

from __future__ import annotations

from typing import TypeVar

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

ResultT = TypeVar("ResultT")


class EntryModal(ModalScreen[ResultT]):
    """Collect a line of text, then dismiss with the parsed result or None.

    Subclasses set the labels and override ``accepts``, ``display_value`` and
    ``parse``. ``parse`` raises ValueError with the message to show inline.
    """

    DEFAULT_CSS = """
    EntryModal {
        align: center middle;
        background: $background 60%;
    }

    #entry-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #entry-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #entry-prompt {
        color: white;
        margin-bottom: 1;
    }

    #entry-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #entry-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #entry-help {
        color: #dddddd;
    }
    """

    title_text = ""
    prompt_text = ""
    help_text = "Enter confirm. Backspace delete. Esc/Ctrl+C cancel."
    cancel_keys = frozenset({"escape", "ctrl+c"})
    max_length = 64

    def __init__(self, value: str = "") -> None:
        super().__init__()
        self.value = value
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="entry-dialog"):
            yield Static(self.title_text, id="entry-title")
            yield Static(self.prompt_text, id="entry-prompt")
            yield Static(id="entry-value")
            yield Static(id="entry-error")
            yield Static(self.help_text, id="entry-help")

    def on_mount(self) -> None:
        self.query_one("#entry-prompt", Static).display = bool(self.prompt_text)
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        event.stop()
        if event.key in self.cancel_keys:
            self.dismiss(None)
            return

        if event.key == "enter":
            self._confirm()
            return

        if event.key == "backspace":
            self.value = self.value[:-1]
            self.error = ""
            self._refresh_content()
            return

        if event.is_printable and event.character and self.accepts(event.character):
            if len(self.value) < self.max_length:
                self.value += event.character
            self.error = ""
            self._refresh_content()

    def accepts(self, char: str) -> bool:
        return True

    def display_value(self) -> str:
        return self.value

    def parse(self, value: str) -> ResultT:
        return value  # type: ignore[return-value]

    def _confirm(self) -> None:
        try:
            result = self.parse(self.value)
        except ValueError as exc:
            self.error = str(exc)
            self._refresh_content()
            return
        self.dismiss(result)

    def _refresh_content(self) -> None:
        self.query_one("#entry-value", Static).update(self.display_value())
        self.query_one("#entry-error", Static).update(self.error)
