"""Structured logging for meter activity.

Responsibilities:
- Emit concise, deterministic meter event lines through `loguru`.
- Keep the library silent until the host application opts in.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger


_PACKAGE = "turnstile"


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def format_context(**context: object) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def log_meter_event(level: str, event: str, **context: object) -> None:
    """Emit one structured meter log line, formatting context only if it is emitted."""

    logger.opt(lazy=True, depth=1).log(
        level,
        "[meter] event={}{}",
        lambda: event,
        lambda: format_context(**context),
    )


def configure_logging(sink: TextIO | None = None, level: str = "INFO") -> int:
    """Enable package logging and attach a message-only sink.

    Returns:
        The loguru handler id, so callers can remove the sink again.
    """

    logger.enable(_PACKAGE)
    return logger.add(
        sink or sys.stderr,
        format="{message}",
        level=level,
        colorize=False,
        filter=_PACKAGE,
    )
