from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from typing import Final

from .terminal import Terminal

logger = logging.getLogger(__name__)

DEFAULT_TICK_S: Final[float] = 0.25
DEFAULT_MIN_DURATION_S: Final[float] = 3.0
_MAX_DOTS: Final[int] = 3


class LoadingCancelled(Exception):
    """Raised by the indicator worker when its cancellation token is set."""


def loading_frames(title: str) -> Iterator[str]:
    """Yield `title`, `title.`, `title..`, `title...`, then start over."""

    width = len(title) + _MAX_DOTS
    for dots in itertools.cycle(range(_MAX_DOTS + 1)):
        yield (title + "." * dots).ljust(width)


class LoadingIndicator:
    """Periodic "waiting" animation running on a worker thread.

    The worker checks the cancellation token once per tick and stops by raising
    `LoadingCancelled`; `stop()` sets the token and waits for that acknowledgement.
    """

    def __init__(self, terminal: Terminal, title: str, *, tick_s: float = DEFAULT_TICK_S) -> None:
        if tick_s <= 0:
            raise ValueError("tick_s must be > 0")
        self._terminal = terminal
        self._title = title
        self._tick_s = tick_s
        self._cancel = threading.Event()
        self._executor: ThreadPoolExecutor | None = None
        self._future: Future[None] | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._future is not None and not self._future.done()

    def start(self) -> None:
        if self._future is not None:
            raise RuntimeError("LoadingIndicator already started")
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="loading")
        self._future = self._executor.submit(self._run)

    def stop(self) -> None:
        future = self._future
        executor = self._executor
        if future is None or executor is None or self._cancel.is_set():
            return
        self._cancel.set()
        try:
            future.result()
        except LoadingCancelled:
            logger.debug("Loading indicator %r stopped after %d ticks", self._title, self.ticks)
        finally:
            executor.shutdown(wait=True)

    def _run(self) -> None:
        for frame in loading_frames(self._title):
            if self._cancel.is_set():
                raise LoadingCancelled
            self._terminal.write(f"\r{frame}")
            self.ticks += 1
            if self._cancel.wait(self._tick_s):
                raise LoadingCancelled


@contextmanager
def loading(
    terminal: Terminal,
    title: str,
    *,
    min_duration_s: float = DEFAULT_MIN_DURATION_S,
    tick_s: float = DEFAULT_TICK_S,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[LoadingIndicator]:
    """Show a loading indicator while the body runs.

    When the body finishes faster than `min_duration_s`, completion is delayed
    until that much time has passed. Errors from the body stop the indicator
    right away and propagate.
    """

    indicator = LoadingIndicator(terminal, title, tick_s=tick_s)
    started = clock()
    indicator.start()
    try:
        yield indicator
        elapsed = clock() - started
        if elapsed < min_duration_s:
            sleep(min_duration_s - elapsed)
    finally:
        indicator.stop()
