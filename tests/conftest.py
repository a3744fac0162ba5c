from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

import pytest


class ScriptedTerminal:
    """In-memory `Terminal` that replays scripted input and emulates a screen.

    `rows` holds the text of every screen row, `styles` the style of the last
    visible write on each row, `ops` every call in order.
    """

    def __init__(
        self,
        keys: Iterable[str] = (),
        lines: Iterable[str] = (),
        *,
        width: int = 40,
    ) -> None:
        self.keys = list(keys)
        self.lines = list(lines)
        self.width = width
        self.rows: dict[int, str] = {}
        self.styles: dict[int, str | None] = {}
        self.ops: list[tuple[object, ...]] = []
        self.move_log: list[tuple[int, int]] = []
        self.cursor_visible = True
        self.key_mode_depth = 0
        # One entry per read_key(): whether key mode was held at the time.
        self.key_reads_in_key_mode: list[bool] = []
        self.x = 0
        self.y = 0
        self._style: str | None = None
        self._lock = threading.Lock()

    def write(self, text: str) -> None:
        with self._lock:
            self.ops.append(("write", text, self._style))
            for ch in text:
                if ch == "\n":
                    self.y += 1
                    self.x = 0
                    continue
                if ch == "\r":
                    self.x = 0
                    continue
                row = self.rows.get(self.y, "").ljust(self.x)
                self.rows[self.y] = row[: self.x] + ch + row[self.x + 1 :]
                self.styles[self.y] = self._style
                self.x += 1

    def move_to(self, x: int, y: int) -> None:
        self.ops.append(("move", x, y))
        self.move_log.append((x, y))
        self.x = x
        self.y = y

    def clear(self) -> None:
        self.ops.append(("clear",))
        self.rows = {}
        self.styles = {}
        self.x = 0
        self.y = 0

    def set_color(self, style: str) -> None:
        self._style = style

    def reset_color(self) -> None:
        self._style = None

    def show_cursor(self, visible: bool) -> None:
        self.cursor_visible = visible

    @contextmanager
    def key_mode(self) -> Iterator[None]:
        self.key_mode_depth += 1
        try:
            yield None
        finally:
            self.key_mode_depth -= 1

    def read_key(self) -> str:
        self.key_reads_in_key_mode.append(self.key_mode_depth > 0)
        if not self.keys:
            raise AssertionError("read_key() called with no scripted keys left")
        return self.keys.pop(0)

    def read_line(self) -> str:
        if not self.lines:
            raise AssertionError("read_line() called with no scripted lines left")
        line = self.lines.pop(0)
        # Echo, like a real terminal.
        self.write(f"{line}\n")
        return line

    def row(self, y: int) -> str:
        return self.rows.get(y, "").rstrip()

    def written(self) -> str:
        return "".join(str(op[1]) for op in self.ops if op[0] == "write")


@pytest.fixture
def make_terminal() -> type[ScriptedTerminal]:
    return ScriptedTerminal
