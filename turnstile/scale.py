"""SI scale suffixes applied to flow-rate volumes (``4.5K`` -> ``4500``)."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from .errors import InvalidFlowRateError


_Number = TypeVar("_Number", int, float)


class ScaleFactor(Enum):
    """Multiplicative volume suffix recognized by the flow-rate grammar."""

    NONE = ("", 1)
    K = ("K", 1_000)
    M = ("M", 1_000_000)
    G = ("G", 1_000_000_000)
    T = ("T", 1_000_000_000_000)

    def __init__(self, code: str, multiplier: int) -> None:
        self.code = code
        self.multiplier = multiplier

    @classmethod
    def parse(cls, code: str) -> ScaleFactor:
        """Resolve a suffix code such as ``K``; the empty code means no scaling.

        Raises:
            InvalidFlowRateError: If the code is not a known suffix.
        """

        for factor in cls:
            if factor.code == code:
                return factor
        supported = ", ".join(factor.code for factor in cls if factor.code)
        raise InvalidFlowRateError(
            f"Unrecognized scale suffix `{code}`; supported: {supported}."
        )

    def apply(self, value: _Number) -> _Number:
        """Scale a number, keeping integers integral."""

        return value * self.multiplier
