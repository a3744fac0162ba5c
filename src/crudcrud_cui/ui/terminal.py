from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Final, Protocol

from rich.console import Console
from rich.control import Control

TITLE_STYLE: Final[str] = "dark_orange3"
SELECTION_STYLE: Final[str] = "green"
ERROR_STYLE: Final[str] = "red"

KEY_UP: Final[str] = "UP"
KEY_DOWN: Final[str] = "DOWN"
KEY_ENTER: Final[str] = "ENTER"
KEY_ESC: Final[str] = "ESC"


class Terminal(Protocol):
    """Character-cell terminal used by the menus and prompts.

    All operations are synchronous. `read_key()` does not echo; `read_line()` does.
    """

    @property
    def width(self) -> int:
        """Current window width in columns."""

    def write(self, text: str) -> None:
        """Write text at the cursor using the current color."""

    def move_to(self, x: int, y: int) -> None:
        """Move the cursor to column `x`, row `y` (0-based)."""

    def clear(self) -> None:
        """Clear the screen and home the cursor."""

    def set_color(self, style: str) -> None:
        """Use `style` for subsequent writes."""

    def reset_color(self) -> None:
        """Go back to the default style."""

    def show_cursor(self, visible: bool) -> None:
        """Show or hide the cursor."""

    def key_mode(self) -> AbstractContextManager[None]:
        """Keep unechoed single-key input on for the duration of the block.

        Nested entries are no-ops; `read_line()` inside the block still echoes.
        """

    def read_key(self) -> str:
        """Block for one keypress and return its name (`UP`, `ENTER`, `a`, ...)."""

    def read_line(self) -> str:
        """Block for one echoed line of input (without the line break)."""


def _read_key(fd: int) -> str:
    # Raw mode; stdin provides bytes.
    ch = os.read(fd, 1)
    if not ch:
        return ""
    if ch == b"\x03":  # Ctrl+C
        raise KeyboardInterrupt
    if ch == b"\x1b":
        seq = os.read(fd, 2)
        if seq == b"[A":
            return KEY_UP
        if seq == b"[B":
            return KEY_DOWN
        return KEY_ESC
    if ch in {b"\r", b"\n"}:
        return KEY_ENTER
    try:
        return ch.decode("utf-8")
    except UnicodeDecodeError:
        return ""


@contextmanager
def _raw_terminal(fd: int) -> Iterator[list[Any] | None]:
    """Cbreak mode for `fd`; yields the saved (cooked) attributes."""

    if sys.platform == "win32":
        yield None
        return

    import termios  # noqa: PLC0415
    import tty  # noqa: PLC0415

    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield old
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


class RichTerminal:
    """`Terminal` backed by a Rich console and the process's stdin."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(highlight=False)
        self._style: str | None = None
        self._key_mode = False
        self._cooked: list[Any] | None = None

    @property
    def width(self) -> int:
        return self._console.size.width

    def write(self, text: str) -> None:
        # Console.out drops "\r"; send it as a cursor control instead.
        for i, chunk in enumerate(text.split("\r")):
            if i:
                self._console.control(Control.move_to_column(0))
            if chunk:
                self._console.out(chunk, style=self._style, highlight=False, end="")
        self._console.file.flush()

    def move_to(self, x: int, y: int) -> None:
        self._console.control(Control.move_to(x, y))

    def clear(self) -> None:
        self._console.clear(home=True)

    def set_color(self, style: str) -> None:
        self._style = style

    def reset_color(self) -> None:
        self._style = None

    def show_cursor(self, visible: bool) -> None:
        self._console.show_cursor(visible)

    @contextmanager
    def key_mode(self) -> Iterator[None]:
        if self._key_mode:
            yield None
            return
        with _raw_terminal(sys.stdin.fileno()) as cooked:
            self._key_mode = True
            self._cooked = cooked
            try:
                yield None
            finally:
                self._key_mode = False
                self._cooked = None

    def read_key(self) -> str:
        with self.key_mode():
            return _read_key(sys.stdin.fileno())

    def read_line(self) -> str:
        if self._cooked is None:
            return self._console.input()

        import termios  # noqa: PLC0415
        import tty  # noqa: PLC0415

        fd = sys.stdin.fileno()
        termios.tcsetattr(fd, termios.TCSADRAIN, self._cooked)
        try:
            return self._console.input()
        finally:
            tty.setcbreak(fd, termios.TCSADRAIN)


def can_run_interactive(console: Console) -> bool:
    return (
        console.is_terminal
        and sys.stdin.isatty()
        and sys.stdout.isatty()
        and sys.platform != "win32"
    )
