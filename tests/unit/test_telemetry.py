"""Unit tests for structured meter logging."""

from __future__ import annotations

import io

from loguru import logger
import pytest

from tests.fakes import FakeClock

from turnstile.meter import RateControlledMeter
from turnstile.telemetry import configure_logging, format_context


def test_format_context_is_sorted_and_shell_safe() -> None:
    """Context tokens should be key-sorted with unsafe characters replaced."""

    assert format_context(b=2, a="x y", c="") == " a=x_y b=2 c=none"
    assert format_context() == ""


def test_logging_is_silent_until_enabled(clock: FakeClock) -> None:
    """Meter events should only reach sinks after logging is configured."""

    sink = io.StringIO()
    handler_id = logger.add(sink, format="{message}", level="TRACE")
    try:
        meter = RateControlledMeter("100/s", clock=clock, waiter=lambda _seconds: False)
        meter.start()
        meter.delay(100)
    finally:
        logger.remove(handler_id)

    assert sink.getvalue() == ""


def test_configure_logging_emits_meter_events(clock: FakeClock) -> None:
    """Configured logging should emit deterministic meter event lines."""

    sink = io.StringIO()
    handler_id = configure_logging(sink, level="TRACE")
    try:
        meter = RateControlledMeter("100/s", clock=clock, waiter=lambda _seconds: False)
        meter.start()
        clock.advance(250)
        meter.delay(100)
        meter.pause()
    finally:
        logger.remove(handler_id)
        logger.disable("turnstile")

    lines = sink.getvalue().splitlines()
    assert "[meter] event=start previous_ms=0" in lines
    assert "[meter] event=delay delay_ms=750 event_count=100" in lines
    assert "[meter] event=pause previous_ms=250" in lines


def test_disabled_logging_skips_context_formatting(
    clock: FakeClock, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Delays should not format log context while the package logger is disabled."""

    calls: list[dict[str, object]] = []

    def _recording_format_context(**context: object) -> str:
        """Record formatting requests."""

        calls.append(context)
        return ""

    monkeypatch.setattr("turnstile.telemetry.format_context", _recording_format_context)
    meter = RateControlledMeter("100/s", clock=clock, waiter=lambda _seconds: False)
    meter.start()
    meter.delay(100)
    meter.pause()

    assert calls == []
