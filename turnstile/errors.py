"""Domain exceptions for flow-rate parsing and metering.

Responsibilities:
- Separate grammar failures from out-of-domain values.
- Surface interrupted delays with enough context to decide on a retry.
"""

from __future__ import annotations


class TurnstileError(Exception):
    """Base class for all errors raised by this package."""


class InvalidFlowRateError(TurnstileError, ValueError):
    """Raised when a flow-rate value or token lies outside its allowed domain."""


class FlowRateParseError(InvalidFlowRateError):
    """Raised when text does not match the flow-rate grammar at all."""

    def __init__(self, *, text: str) -> None:
        """Initialize a parse error for the rejected input text."""

        super().__init__(f"Could not parse a flow rate from input: {text!r}")
        self.text = text


class MeterCancelledError(TurnstileError):
    """Raised when a blocking meter delay is interrupted before it completes."""

    def __init__(self, *, event_count: int, delay_ms: int) -> None:
        """Initialize a cancellation error with the delay that was abandoned."""

        super().__init__(
            f"Delay of {delay_ms}ms for event {event_count} was interrupted."
        )
        self.event_count = event_count
        self.delay_ms = delay_ms
