"""Deterministic test doubles shared across the Turnstile test suite."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FakeClock:
    """Manually advanced millisecond clock."""

    now: int = 0

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis
