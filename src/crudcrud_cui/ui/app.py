from __future__ import annotations

import logging
from typing import Final

from .. import __version__
from ..protocol.records import RecordParseError, pretty_print_json
from ..transport.base import RemoteStore, TransportError
from .chooser import choose_object
from .loading import DEFAULT_MIN_DURATION_S, DEFAULT_TICK_S, loading
from .menu import MenuNavigator
from .payload import PayloadBuilder
from .terminal import SELECTION_STYLE, Terminal

logger = logging.getLogger(__name__)

START = "----> Start <----"
QUIT_APP = "----> Quit <----"
START_MENU: Final[tuple[str, ...]] = (START, QUIT_APP)

FETCH = "Fetch"
ADD = "Add"
EDIT = "Edit"
DELETE = "Delete"
QUIT = "Quit"
OPERATIONS: Final[tuple[str, ...]] = (FETCH, ADD, EDIT, DELETE, QUIT)
OPERATIONS_TITLE: Final[str] = "--- Choose an operation (↑,↓) ---"

LOADING_TITLE: Final[str] = "Fetching data"
NO_RECORDS: Final[str] = "No records have been created yet"
PRESS_ANY_KEY: Final[str] = "\nPress any key to continue..."

_VERBS: Final[dict[str, str]] = {
    FETCH: "Fetching",
    ADD: "Adding",
    EDIT: "Editing",
    DELETE: "Deleting",
}


def start_title() -> str:
    app_line = f"crudcrud-cui v{__version__}"
    return f"{app_line}\n{'-' * len(app_line)}\n"


class CrudApp:
    """Start menu, operations menu and the Fetch/Add/Edit/Delete flows.

    Any transport or parse error ends the session: the message is shown and
    `run()` returns a non-zero exit code instead of going back to the menu.
    """

    def __init__(
        self,
        terminal: Terminal,
        store: RemoteStore,
        *,
        loading_delay_s: float = DEFAULT_MIN_DURATION_S,
        loading_tick_s: float = DEFAULT_TICK_S,
    ) -> None:
        self._terminal = terminal
        self._store = store
        self._navigator = MenuNavigator(terminal)
        self._payloads = PayloadBuilder(terminal, self._navigator)
        self._loading_delay_s = loading_delay_s
        self._loading_tick_s = loading_tick_s

    def run(self) -> int:
        self._terminal.show_cursor(False)
        try:
            with self._terminal.key_mode():
                return self._session()
        finally:
            self._terminal.show_cursor(True)

    def _session(self) -> int:
        if self._navigator.select(start_title(), START_MENU) != START:
            return 0
        while True:
            operation = self._navigator.select(OPERATIONS_TITLE, OPERATIONS)
            if operation is None or operation == QUIT:
                return 0
            try:
                if not self._run_operation(operation):
                    continue
            except (TransportError, RecordParseError) as exc:
                self._report_failure(operation, exc)
                return 1
            try:
                self._show_records(operation)
            except (TransportError, RecordParseError) as exc:
                self._report_failure(FETCH, exc)
                return 1

    def _run_operation(self, operation: str) -> bool:
        """Run one operation; False means the user backed out."""

        term = self._terminal
        if operation == ADD:
            self._store.create(self._payloads.build())
        elif operation == EDIT:
            result = choose_object(self._store, self._navigator)
            if not result.success or result.object_id is None:
                return False
            self._store.update(result.object_id, self._payloads.build())
        elif operation == DELETE:
            result = choose_object(self._store, self._navigator)
            if not result.success or result.object_id is None:
                return False
            self._store.delete(result.object_id)

        term.clear()
        if operation != FETCH:
            term.write(f"{_VERBS[operation]} succeeded!\n")
            logger.info("%s succeeded", _VERBS[operation])
        return True

    def _show_records(self, operation: str) -> None:
        term = self._terminal
        if operation != FETCH:
            term.write("\n")

        with loading(
            term,
            LOADING_TITLE,
            min_duration_s=self._loading_delay_s,
            tick_s=self._loading_tick_s,
        ):
            try:
                response = self._store.fetch_all()
            except TransportError as exc:
                raise type(exc)(f"Fetching failed:\n{exc}") from exc

        records_text = pretty_print_json(response)
        term.clear()
        term.write(f"{NO_RECORDS}\n" if records_text == "[]" else f"{records_text}\n")

        term.set_color(SELECTION_STYLE)
        term.write(f"{PRESS_ANY_KEY}\n")
        term.read_key()
        term.reset_color()

    def _report_failure(self, operation: str, exc: Exception) -> None:
        verb = _VERBS.get(operation, operation)
        logger.warning("%s failed: %s", verb, exc)
        term = self._terminal
        term.clear()
        term.write(f"{verb} failed because\n{exc}\n")
