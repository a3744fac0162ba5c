from __future__ import annotations

import os
import sys
import time
from collections.abc import Iterator
from io import StringIO

import pytest
from rich.console import Console

from crudcrud_cui.ui.loading import LoadingIndicator
from crudcrud_cui.ui.terminal import KEY_DOWN, KEY_ENTER, RichTerminal

_COLUMN_0 = "\x1b[1G"

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs termios and a pty")


def _console(buf: StringIO | None = None) -> Console:
    return Console(file=buf or StringIO(), force_terminal=True, width=40, highlight=False)


def test_write_turns_carriage_return_into_column_move() -> None:
    buf = StringIO()
    term = RichTerminal(_console(buf))
    term.write("\rFetching data   ")
    term.write("\rFetching data.  ")

    assert buf.getvalue() == f"{_COLUMN_0}Fetching data   {_COLUMN_0}Fetching data.  "


def test_move_to_emits_cursor_position() -> None:
    buf = StringIO()
    RichTerminal(_console(buf)).move_to(0, 3)
    assert buf.getvalue() == "\x1b[4;1H"


def test_loading_indicator_redraws_in_place_on_rich_console() -> None:
    buf = StringIO()
    indicator = LoadingIndicator(RichTerminal(_console(buf)), "Fetching data", tick_s=0.01)
    indicator.start()
    deadline = time.monotonic() + 2.0
    while indicator.ticks < 3 and time.monotonic() < deadline:
        time.sleep(0.005)
    indicator.stop()

    out = buf.getvalue()
    assert indicator.ticks >= 3
    assert out.count(_COLUMN_0) == indicator.ticks
    assert out.startswith(f"{_COLUMN_0}Fetching data   {_COLUMN_0}Fetching data.  ")


@pytest.fixture
def tty_stdin(monkeypatch: pytest.MonkeyPatch) -> Iterator[tuple[int, int]]:
    import pty  # noqa: PLC0415

    master, slave = pty.openpty()

    class _Stdin:
        def fileno(self) -> int:
            return slave

    monkeypatch.setattr(sys, "stdin", _Stdin())
    try:
        yield master, slave
    finally:
        os.close(master)
        os.close(slave)


def _canonical(fd: int) -> bool:
    import termios  # noqa: PLC0415

    return bool(termios.tcgetattr(fd)[3] & termios.ICANON)


@posix_only
def test_key_mode_stays_on_between_reads(tty_stdin: tuple[int, int]) -> None:
    master, slave = tty_stdin
    term = RichTerminal(_console())

    assert _canonical(slave)
    with term.key_mode():
        assert not _canonical(slave)
        os.write(master, b"\x1b[Bs\r")
        assert term.read_key() == KEY_DOWN
        assert not _canonical(slave)
        assert term.read_key() == "s"
        assert term.read_key() == KEY_ENTER
        assert not _canonical(slave)
    assert _canonical(slave)


@posix_only
def test_key_mode_nested_entry_keeps_outer_mode(tty_stdin: tuple[int, int]) -> None:
    _master, slave = tty_stdin
    term = RichTerminal(_console())

    with term.key_mode():
        with term.key_mode():
            assert not _canonical(slave)
        assert not _canonical(slave)
    assert _canonical(slave)


@posix_only
def test_read_line_inside_key_mode_uses_cooked_input(
    tty_stdin: tuple[int, int], monkeypatch: pytest.MonkeyPatch
) -> None:
    _master, slave = tty_stdin
    console = _console()
    seen: list[bool] = []

    def _input(*_args: object, **_kwargs: object) -> str:
        seen.append(_canonical(slave))
        return "Ada"

    monkeypatch.setattr(console, "input", _input)
    term = RichTerminal(console)

    with term.key_mode():
        assert term.read_line() == "Ada"
        assert not _canonical(slave)

    assert seen == [True]
    assert _canonical(slave)
