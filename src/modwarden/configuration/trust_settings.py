"""
Typed trust configuration.

The ``trust`` section of the app config is user-edited YAML, so every field
is coerced when a config is built, whether from YAML or directly: a missing, non-numeric or non-finite value falls back to
the field default instead of raising. Keys may be written in snake_case or in
the camelCase used by older config files (``warnPenalty``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, Mapping

_FALSY_STRINGS = {"false", "0", "no", "off"}


def coerce_number(value: Any, default: int | float) -> int | float:
    """Return ``value`` as a finite number, or ``default`` if it is not one.

    Booleans are rejected because ``True`` would otherwise read as ``1``.
    Numeric strings are parsed; integral results keep the type of ``default``.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        try:
            return value if math.isfinite(value) else default
        except OverflowError:
            # int too large for a float
            return default

    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        if not math.isfinite(parsed):
            return default
        if isinstance(default, int) and parsed.is_integer():
            return int(parsed)
        return parsed

    return default


def coerce_enabled(value: Any) -> bool:
    """Only an explicit false-like value disables the feature."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    return value is not False


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass(frozen=True, slots=True)
class TrustConfig:
    """Trust score policy knobs; every field has a default."""

    enabled: bool = True

    base: int | float = 30
    min: int | float = 0
    max: int | float = 100

    warn_penalty: int | float = 5
    mute_penalty: int | float = 15

    regen_per_day: int | float = 1
    regen_max_days: int | float = 30

    low_threshold: int | float = 10
    high_threshold: int | float = 60

    low_trust_warnings_penalty: int | float = 1
    low_trust_messages_penalty: int | float = 1
    high_trust_messages_bonus: int | float = 0

    low_trust_mute_multiplier: float = 1.5
    high_trust_mute_multiplier: float = 0.8

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if field.name == "enabled":
                coerced = coerce_enabled(value)
            else:
                coerced = coerce_number(value, field.default)
            if coerced is not value:
                object.__setattr__(self, field.name, coerced)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "TrustConfig":
        """Build a config from a partial mapping; keys may be snake_case or camelCase."""
        if not isinstance(data, Mapping):
            return cls()

        values: dict[str, Any] = {}
        for field in fields(cls):
            if field.name in data:
                raw = data[field.name]
            elif _camel_case(field.name) in data:
                raw = data[_camel_case(field.name)]
            else:
                continue
            values[field.name] = raw

        return cls(**values)
