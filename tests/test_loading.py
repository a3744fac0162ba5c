from __future__ import annotations

import itertools
import time

import pytest

from crudcrud_cui.ui.loading import LoadingIndicator, loading, loading_frames


def _wait_for(predicate, timeout_s: float = 2.0) -> None:  # noqa: ANN001
    deadline = time.monotonic() + timeout_s
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        time.sleep(0.005)


def test_loading_frames_grow_then_reset() -> None:
    frames = list(itertools.islice(loading_frames("Wait"), 6))
    assert frames == [
        "Wait   ",
        "Wait.  ",
        "Wait.. ",
        "Wait...",
        "Wait   ",
        "Wait.  ",
    ]


def test_indicator_ticks_until_stopped(make_terminal) -> None:  # noqa: ANN001
    term = make_terminal()
    indicator = LoadingIndicator(term, "Fetching data", tick_s=0.01)
    indicator.start()
    _wait_for(lambda: indicator.ticks >= 4)
    indicator.stop()

    assert not indicator.running
    ticks = indicator.ticks
    time.sleep(0.05)
    assert indicator.ticks == ticks
    assert term.row(0).startswith("Fetching data")
    assert "\rFetching data..." in term.written()


def test_indicator_stop_is_idempotent(make_terminal) -> None:  # noqa: ANN001
    indicator = LoadingIndicator(make_terminal(), "x", tick_s=0.01)
    indicator.stop()
    indicator.start()
    indicator.stop()
    indicator.stop()
    assert not indicator.running


def test_indicator_cannot_start_twice(make_terminal) -> None:  # noqa: ANN001
    indicator = LoadingIndicator(make_terminal(), "x", tick_s=0.01)
    indicator.start()
    try:
        with pytest.raises(RuntimeError):
            indicator.start()
    finally:
        indicator.stop()


def test_indicator_rejects_non_positive_tick(make_terminal) -> None:  # noqa: ANN001
    with pytest.raises(ValueError):
        LoadingIndicator(make_terminal(), "x", tick_s=0)


def test_loading_waits_out_minimum_duration(make_terminal) -> None:  # noqa: ANN001
    clock = iter([10.0, 10.5]).__next__
    sleeps: list[float] = []

    with loading(
        make_terminal(),
        "Fetching data",
        min_duration_s=3.0,
        tick_s=5.0,
        clock=clock,
        sleep=sleeps.append,
    ) as indicator:
        assert indicator.running

    assert sleeps == [pytest.approx(2.5)]
    assert not indicator.running


def test_loading_does_not_wait_when_body_was_slow(make_terminal) -> None:  # noqa: ANN001
    clock = iter([0.0, 4.0]).__next__
    sleeps: list[float] = []

    with loading(make_terminal(), "x", min_duration_s=3.0, clock=clock, sleep=sleeps.append):
        pass

    assert sleeps == []


def test_loading_stops_indicator_and_propagates_errors(make_terminal) -> None:  # noqa: ANN001
    sleeps: list[float] = []
    captured: list[LoadingIndicator] = []

    with pytest.raises(ConnectionError, match="down"):
        with loading(make_terminal(), "x", min_duration_s=3.0, sleep=sleeps.append) as indicator:
            captured.append(indicator)
            raise ConnectionError("down")

    assert sleeps == []
    assert not captured[0].running
