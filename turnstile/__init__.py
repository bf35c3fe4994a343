"""Top-level package for Turnstile.

Turnstile paces a stream of discrete events against a declared maximum flow
rate. Build a `FlowRate`, hand it to a `RateControlledMeter`, start the meter and
call `delay()` with the cumulative event count before each event.

Logging is disabled until the host calls `configure_logging()` or
``loguru.logger.enable("turnstile")``.
"""

from loguru import logger

from .config import ConfigLoader, MeterConfig
from .errors import (
    FlowRateParseError,
    InvalidFlowRateError,
    MeterCancelledError,
    TurnstileError,
)
from .meter import Meter, NoopMeter, PausableMeter, RateControlledMeter, monotonic_millis
from .rate import FlowRate
from .scale import ScaleFactor
from .telemetry import configure_logging
from .units import TimeUnit

logger.disable("turnstile")

__all__ = [
    "ConfigLoader",
    "FlowRate",
    "FlowRateParseError",
    "InvalidFlowRateError",
    "Meter",
    "MeterCancelledError",
    "MeterConfig",
    "NoopMeter",
    "PausableMeter",
    "RateControlledMeter",
    "ScaleFactor",
    "TimeUnit",
    "TurnstileError",
    "configure_logging",
    "monotonic_millis",
    "__version__",
]

__version__ = "0.1.0"
