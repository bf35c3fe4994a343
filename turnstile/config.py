"""Configuration model and loaders for meters.

Responsibilities:
- Define meter configuration as a typed dataclass.
- Provide loader entry points for file-, mapping- and environment-based configuration.
- Build the meter a configuration describes.

Key types:
- `MeterConfig`: normalized meter settings.
- `ConfigLoader`: static construction helpers for `MeterConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .meter import Clock, Meter, NoopMeter, RateControlledMeter
from .rate import FlowRate


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def _normalize_optional_string(value: object) -> str | None:
    """Return a stripped string, or `None` for missing and blank values."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_boolean(value: object, field_name: str) -> bool:
    """Parse a boolean from YAML booleans or permissive textual tokens."""

    if isinstance(value, bool):
        return value
    token = (_normalize_optional_string(value) or "").lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


@dataclass(frozen=True, slots=True)
class MeterConfig:
    """Settings for one meter.

    Attributes:
        rate: Flow-rate shorthand such as ``100/s``; `None` disables pacing.
        enabled: Explicit switch; a disabled meter never delays.
    """

    rate: str | None = None
    enabled: bool = True

    def validate(self) -> None:
        """Validate the configured rate eagerly so errors surface at load time."""

        if self.rate is not None:
            FlowRate.parse(self.rate)

    def flow_rate(self) -> FlowRate | None:
        """Return the parsed rate, or `None` when pacing is off."""

        if not self.enabled or self.rate is None:
            return None
        return FlowRate.parse(self.rate)

    def build_meter(self, clock: Clock | None = None) -> Meter:
        """Create the meter this configuration describes, in the paused state."""

        rate = self.flow_rate()
        if rate is None:
            return NoopMeter(clock=clock)
        return RateControlledMeter(rate, clock=clock)


class ConfigLoader:
    """Factory methods for creating `MeterConfig` from external sources."""

    _SUPPORTED_KEYS = frozenset({"rate", "enabled"})
    _ENV_RATE = "TURNSTILE_RATE"
    _ENV_ENABLED = "TURNSTILE_ENABLED"

    @staticmethod
    def from_yaml(path: Path) -> MeterConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = yaml.safe_load(path_text)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any], source_label: str = "Meter config"
    ) -> MeterConfig:
        """Create a validated config from an already-parsed mapping."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        rate = _normalize_optional_string(payload.get("rate"))
        enabled = ConfigLoader._optional_boolean(payload, "enabled", default=True)

        config = MeterConfig(rate=rate, enabled=enabled)
        config.validate()
        return config

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> MeterConfig:
        """Create a validated config from `TURNSTILE_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        rate = _normalize_optional_string(env_map.get(ConfigLoader._ENV_RATE))
        enabled = ConfigLoader._optional_boolean(
            env_map,
            ConfigLoader._ENV_ENABLED,
            default=True,
        )

        config = MeterConfig(rate=rate, enabled=enabled)
        config.validate()
        return config

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, default: bool
    ) -> bool:
        """Read and validate a boolean field, treating blank values as absent."""

        if key not in payload or _normalize_optional_string(payload[key]) is None:
            return default

        return _parse_boolean(payload[key], key)
