"""Time-unit tokens accepted by the flow-rate grammar."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum

from .errors import InvalidFlowRateError


class TimeUnit(Enum):
    """Canonical time granularity with its rendering token."""

    MILLISECOND = ("ms", timedelta(milliseconds=1))
    SECOND = ("s", timedelta(seconds=1))
    MINUTE = ("m", timedelta(minutes=1))
    HOUR = ("h", timedelta(hours=1))
    DAY = ("d", timedelta(days=1))

    def __init__(self, token: str, span: timedelta) -> None:
        self.token = token
        self.span = span

    @classmethod
    def parse(cls, token: str) -> TimeUnit:
        """Resolve a unit token such as ``s``, ``ms`` or ``hour``.

        Raises:
            InvalidFlowRateError: If the token does not name a known unit.
        """

        unit = _UNITS_BY_TOKEN.get(token)
        if unit is None:
            supported = ", ".join(sorted(_UNITS_BY_TOKEN))
            raise InvalidFlowRateError(
                f"Could not parse time unit `{token}`; supported: {supported}."
            )
        return unit

    def of(self, count: int) -> timedelta:
        """Return the span covering ``count`` of this unit."""

        return self.span * count

    @classmethod
    def render(cls, duration: timedelta) -> tuple[int, TimeUnit]:
        """Split a duration into the largest unit that divides it exactly.

        Raises:
            InvalidFlowRateError: If the duration is not a whole number of milliseconds.
        """

        for unit in sorted(cls, key=lambda item: item.span, reverse=True):
            count, remainder = divmod(duration, unit.span)
            if not remainder and count > 0:
                return count, unit
        raise InvalidFlowRateError(
            f"Duration {duration!r} is not a whole number of milliseconds."
        )


_UNITS_BY_TOKEN: dict[str, TimeUnit] = {unit.token: unit for unit in TimeUnit}
_UNITS_BY_TOKEN.update(
    {
        "sec": TimeUnit.SECOND,
        "min": TimeUnit.MINUTE,
        "hr": TimeUnit.HOUR,
        "hour": TimeUnit.HOUR,
        "day": TimeUnit.DAY,
    }
)
