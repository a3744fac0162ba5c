from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .terminal import KEY_DOWN, KEY_ENTER, KEY_UP, SELECTION_STYLE, TITLE_STYLE, Terminal

_DOWN_KEYS: Final[frozenset[str]] = frozenset({KEY_DOWN, "s", "S"})
_UP_KEYS: Final[frozenset[str]] = frozenset({KEY_UP, "w", "W"})


def text_height(text: str) -> int:
    """Number of line-break delimited segments in `text`."""

    return text.count("\n") + 1


@dataclass(slots=True)
class CursorState:
    """Selected item and the screen row it starts at.

    `row` is cached so a move only needs the height of one neighbouring item.
    """

    index: int
    row: int


class MenuNavigator:
    """Cursor-driven selector over a list of (possibly multi-line) text items.

    `render()` draws the whole menu once; `navigate()` then redraws only the
    previously and newly selected items on every move.
    """

    def __init__(
        self,
        terminal: Terminal,
        *,
        title_style: str = TITLE_STYLE,
        selection_style: str = SELECTION_STYLE,
    ) -> None:
        self._terminal = terminal
        self._title_style = title_style
        self._selection_style = selection_style

    def render(self, title: str, items: Sequence[str]) -> None:
        if not items:
            return

        term = self._terminal
        term.clear()
        term.set_color(self._title_style)
        term.write(f"{title}\n")
        term.reset_color()

        term.set_color(self._selection_style)
        term.write(f"{items[0]}\n")
        term.reset_color()

        for item in items[1:]:
            term.write(f"{item}\n")

    def navigate_index(self, title: str, items: Sequence[str]) -> int | None:
        """Run the key loop until ENTER and return the selected index.

        Returns None (without reading any key) when `items` is empty.
        """

        if not items:
            return None

        heights = [text_height(item) for item in items]
        last = len(items) - 1
        state = CursorState(index=0, row=text_height(title))

        with self._terminal.key_mode():
            while True:
                key = self._terminal.read_key()

                if key in _DOWN_KEYS and state.index < last:
                    self._draw_item(state.row, items[state.index], selected=False)
                    state.row += heights[state.index]
                    state.index += 1
                    self._draw_item(state.row, items[state.index], selected=True)
                elif key in _UP_KEYS and state.index > 0:
                    self._draw_item(state.row, items[state.index], selected=False)
                    state.index -= 1
                    state.row -= heights[state.index]
                    self._draw_item(state.row, items[state.index], selected=True)
                elif key == KEY_ENTER:
                    return state.index

    def navigate(self, title: str, items: Sequence[str]) -> str | None:
        index = self.navigate_index(title, items)
        return None if index is None else items[index]

    def select_index(self, title: str, items: Sequence[str]) -> int | None:
        self.render(title, items)
        return self.navigate_index(title, items)

    def select(self, title: str, items: Sequence[str]) -> str | None:
        self.render(title, items)
        return self.navigate(title, items)

    def _draw_item(self, row: int, item: str, *, selected: bool) -> None:
        term = self._terminal
        # Pad every line so shorter new text fully covers what was drawn before.
        pad_to = max(0, term.width - 1)
        term.move_to(0, row)
        if selected:
            term.set_color(self._selection_style)
        for line in item.split("\n"):
            term.write(f"{line.ljust(pad_to)}\n")
        if selected:
            term.reset_color()
