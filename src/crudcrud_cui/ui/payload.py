from __future__ import annotations

from collections.abc import Callable
from typing import Final

from ..protocol.payload import (
    AttributeEntry,
    is_valid_attribute_name,
    is_valid_attribute_value,
    serialize_payload,
)
from .menu import MenuNavigator
from .terminal import Terminal

ADD_MORE_TITLE: Final[str] = "Add more attributes?"
ADD_MORE_YES: Final[str] = "Yes"
ADD_MORE_NO: Final[str] = "No"

_NAME_PROMPT: Final[str] = "Enter attribute name: "
_VALUE_PROMPT: Final[str] = "Enter attribute value: "
_NAME_ERROR: Final[tuple[str, str]] = ("Invalid name:", "May only contain letters")
_VALUE_ERROR: Final[tuple[str, str]] = (
    "Invalid value:",
    "May only contain letters, digits or spaces",
)


class PayloadBuilder:
    """Interactively collect attribute/value pairs and serialize them to JSON text."""

    def __init__(self, terminal: Terminal, navigator: MenuNavigator | None = None) -> None:
        self._terminal = terminal
        self._navigator = navigator or MenuNavigator(terminal)

    def collect(self) -> list[AttributeEntry]:
        entries: list[AttributeEntry] = []
        while True:
            self._terminal.clear()
            name = self._prompt(0, _NAME_PROMPT, is_valid_attribute_name, _NAME_ERROR)
            value = self._prompt(1, _VALUE_PROMPT, is_valid_attribute_value, _VALUE_ERROR)
            entries.append(
                AttributeEntry(name=name.strip(), value=None if value == "" else value.strip())
            )

            choices = [ADD_MORE_YES, ADD_MORE_NO]
            if self._navigator.select(ADD_MORE_TITLE, choices) == ADD_MORE_NO:
                self._terminal.clear()
                return entries

    def build(self) -> str:
        return serialize_payload(self.collect())

    def _prompt(
        self,
        row: int,
        label: str,
        is_valid: Callable[[str], bool],
        error_lines: tuple[str, ...],
    ) -> str:
        term = self._terminal
        while True:
            term.show_cursor(True)
            term.write(label)
            text = term.read_line()
            term.show_cursor(False)

            if is_valid(text):
                return text

            term.write("\n" + "\n".join(error_lines) + "\n")
            term.read_key()
            self._clear_feedback(row, len(error_lines) + 1)

    def _clear_feedback(self, prompt_row: int, feedback_height: int) -> None:
        """Blank the prompt row and the feedback rows below it, bottom-up."""

        term = self._terminal
        blank = " " * max(0, term.width - 1)
        for row in range(prompt_row + feedback_height, prompt_row - 1, -1):
            term.move_to(0, row)
            term.write(blank)
        term.move_to(0, prompt_row)
