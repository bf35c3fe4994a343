"""Flow-rate value type.

Responsibilities:
- Represent "volume of events per duration" as an immutable value.
- Parse the compact textual shorthand used in configuration (``100/s``, ``4.5K/10m``).
- Order rates by their normalized events-per-second figure.

Equality and ordering deliberately disagree: two rates are equal only when their
volume and duration are both equal, while ordering compares the normalized
per-second volume. ``FlowRate(1, 1s)`` and ``FlowRate(60, 1m)`` are therefore
neither less nor greater than each other, yet not equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
import math
import re

from .errors import FlowRateParseError, InvalidFlowRateError
from .scale import ScaleFactor
from .units import TimeUnit


_FLOW_RATE_PATTERN = re.compile(
    r"(?P<number>\d+(?:\.\d+)?)(?P<scale>[A-Za-z]*)/(?P<count>\d*)(?P<unit>[a-z]+)",
    re.ASCII,
)
_ONE_MILLISECOND = timedelta(milliseconds=1)
_MAX_MILLIS = timedelta.max / _ONE_MILLISECOND


@dataclass(frozen=True, slots=True)
class FlowRate:
    """A declared maximum frequency of discrete events.

    The volume may be fractional (``0.5/s`` is one event every two seconds) while
    the duration is always a whole number of milliseconds.

    Attributes:
        volume: Number of events allowed per ``duration``.
        duration: Window over which ``volume`` events may pass.
        volume_per_second: Normalized comparison key, derived on construction.
    """

    volume: float
    duration: timedelta
    volume_per_second: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate the rate and cache its normalized per-second volume."""

        if isinstance(self.volume, bool) or not isinstance(self.volume, (int, float)):
            raise InvalidFlowRateError("Rate volume must be a number.")
        volume = float(self.volume)
        if not math.isfinite(volume) or volume <= 0:
            raise InvalidFlowRateError("Rate volume must be positive.")
        if not isinstance(self.duration, timedelta):
            raise InvalidFlowRateError("Rate duration must be a `datetime.timedelta`.")
        if self.duration <= timedelta(0):
            raise InvalidFlowRateError("Rate duration must be positive.")
        if self.duration % _ONE_MILLISECOND:
            raise InvalidFlowRateError("Rate duration must be a whole number of milliseconds.")
        if (self.duration / _ONE_MILLISECOND) / volume > _MAX_MILLIS:
            raise InvalidFlowRateError(
                "Rate is too slow; one event would outlast the longest duration."
            )

        object.__setattr__(self, "volume", volume)
        object.__setattr__(
            self,
            "volume_per_second",
            (volume * 1000) / (self.duration / _ONE_MILLISECOND),
        )

    @classmethod
    def parse(cls, text: str) -> FlowRate:
        """Parse a flow rate from ``<number>[<scale>]/[<count>]<unit>`` text.

        Args:
            text: Rate shorthand such as ``100/s``, ``4.5K/10m`` or ``1/ms``.

        Raises:
            FlowRateParseError: If the text does not match the grammar.
            InvalidFlowRateError: If a token is unknown or a value is not positive.
        """

        match = _FLOW_RATE_PATTERN.fullmatch(str(text).strip())
        if match is None:
            raise FlowRateParseError(text=str(text))

        factor = ScaleFactor.parse(match.group("scale"))
        volume = factor.apply(float(match.group("number")))
        count_text = match.group("count")
        try:
            unit_count = int(count_text) if count_text else 1
        except ValueError as exc:
            raise InvalidFlowRateError("Rate time units are too large.") from exc
        unit = TimeUnit.parse(match.group("unit"))

        if unit_count <= 0:
            raise InvalidFlowRateError("Rate time units must be positive.")
        if volume <= 0:
            raise InvalidFlowRateError("Rate volume must be positive.")
        if not math.isfinite(volume):
            raise InvalidFlowRateError("Rate volume is too large.")

        try:
            duration = unit.of(unit_count)
        except OverflowError as exc:
            raise InvalidFlowRateError("Rate duration is too large.") from exc
        return cls(volume, duration)

    @classmethod
    def coerce(cls, value: FlowRate | str) -> FlowRate:
        """Return ``value`` unchanged if it is a rate, otherwise parse it."""

        if isinstance(value, FlowRate):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        raise InvalidFlowRateError(
            f"Expected a FlowRate or rate text, got {type(value).__name__}."
        )

    @property
    def interval(self) -> timedelta:
        """Mean spacing between consecutive events at this rate."""

        return self.duration / self.volume

    def compare_to(self, other: FlowRate) -> int:
        """Return -1, 0 or 1 comparing normalized per-second volumes."""

        if self.volume_per_second < other.volume_per_second:
            return -1
        if self.volume_per_second > other.volume_per_second:
            return 1
        return 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, FlowRate):
            return NotImplemented
        return self.volume_per_second < other.volume_per_second

    def __le__(self, other: object) -> bool:
        if not isinstance(other, FlowRate):
            return NotImplemented
        return self.volume_per_second <= other.volume_per_second

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, FlowRate):
            return NotImplemented
        return self.volume_per_second > other.volume_per_second

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, FlowRate):
            return NotImplemented
        return self.volume_per_second >= other.volume_per_second

    def __str__(self) -> str:
        """Render canonical rate text that parses back to the same rate."""

        count, unit = TimeUnit.render(self.duration)
        count_text = str(count) if count != 1 else ""
        return f"{_format_volume(self.volume)}/{count_text}{unit.token}"


def _format_volume(volume: float) -> str:
    """Format a volume without exponent notation, which the grammar rejects."""

    if volume.is_integer():
        return str(int(volume))
    text = repr(volume)
    if "e" in text:
        text = format(Decimal(text), "f")
    return text
