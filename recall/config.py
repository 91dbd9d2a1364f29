from __future__ import annotations

import dataclasses
import json
import logging
import math
from pathlib import Path
from typing import Any, Mapping, Sequence

from recall.weights import Version, default_weights, expected_weight_count

DEFAULT_REQUESTED_RETENTION = 0.9
MIN_REQUESTED_RETENTION = 0.01
MAX_REQUESTED_RETENTION = 0.999

DEFAULT_LAPSE_MIN_INTERVAL = 1
MAX_LAPSE_MIN_INTERVAL = 7

DEFAULT_MAX_INTERVAL = 36500

_KEY_ALIASES: dict[str, tuple[str, ...]] = {
    "version": ("version", "algorithmVersion"),
    "requested_retention": (
        "requested_retention",
        "requestedRetention",
        "desired_retention",
    ),
    "custom_weights": ("custom_weights", "customWeights", "weights"),
    "lapse_min_interval_days": (
        "lapse_min_interval_days",
        "lapseMinIntervalDays",
        "againMinIntervalDays",
    ),
    "max_interval_days": ("max_interval_days", "maxIntervalDays"),
}


@dataclasses.dataclass(frozen=True)
class FSRSConfig:
    """
    Fully resolved scheduling configuration.

    Build instances through `normalize_config`; the constructor itself does no
    validation so that resolved values can be passed around cheaply.
    """

    version: Version = Version.FSRS5
    requested_retention: float = DEFAULT_REQUESTED_RETENTION
    custom_weights: tuple[float, ...] | None = None
    lapse_min_interval_days: int = DEFAULT_LAPSE_MIN_INTERVAL
    max_interval_days: int = DEFAULT_MAX_INTERVAL

    @property
    def weights(self) -> tuple[float, ...]:
        if self.custom_weights is not None:
            return self.custom_weights
        return default_weights(self.version)

    @property
    def uses_custom_weights(self) -> bool:
        return self.custom_weights is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version.value,
            "requestedRetention": self.requested_retention,
            "customWeights": (
                list(self.custom_weights) if self.custom_weights is not None else None
            ),
            "lapseMinIntervalDays": self.lapse_min_interval_days,
            "maxIntervalDays": self.max_interval_days,
        }


DEFAULT_CONFIG = FSRSConfig()


def _lookup(source: Mapping[str, Any], field: str) -> Any:
    for key in _KEY_ALIASES[field]:
        if key in source:
            return source[key]
    return None


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def resolve_version(value: Any) -> Version:
    if isinstance(value, Version):
        return value
    if isinstance(value, str) and value.strip().lower() in {"fsrs6", "v6", "6"}:
        return Version.FSRS6
    if isinstance(value, int) and not isinstance(value, bool) and value == 6:
        return Version.FSRS6
    return Version.FSRS5


def resolve_retention(value: Any) -> float:
    numeric = _coerce_float(value)
    if numeric is None:
        if value is not None:
            logging.warning(
                "requested_retention %r is not a finite number; using %.2f.",
                value,
                DEFAULT_REQUESTED_RETENTION,
            )
        return DEFAULT_REQUESTED_RETENTION
    clamped = _clamp(numeric, MIN_REQUESTED_RETENTION, MAX_REQUESTED_RETENTION)
    if clamped != numeric:
        logging.warning(
            "requested_retention %.4f outside [%.2f, %.3f]; clamped to %.3f.",
            numeric,
            MIN_REQUESTED_RETENTION,
            MAX_REQUESTED_RETENTION,
            clamped,
        )
    return clamped


def resolve_custom_weights(
    value: Any, version: Version
) -> tuple[float, ...] | None:
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        logging.warning(
            "Custom weights are not a sequence; using %s defaults.", version.value
        )
        return None
    expected = expected_weight_count(version)
    if len(value) != expected:
        logging.warning(
            "Custom weights have length %d, expected %d for %s; using defaults.",
            len(value),
            expected,
            version.value,
        )
        return None
    weights: list[float] = []
    for item in value:
        numeric = _coerce_float(item)
        if numeric is None:
            logging.warning(
                "Custom weights contain non-finite value %r; using %s defaults.",
                item,
                version.value,
            )
            return None
        weights.append(numeric)
    return tuple(weights)


def _resolve_int(
    value: Any, *, name: str, default: int, low: int, high: int
) -> int:
    numeric = _coerce_float(value)
    if numeric is None:
        if value is not None:
            logging.warning(
                "%s %r is not a finite number; using %d.", name, value, default
            )
        return default
    resolved = int(_clamp(round(numeric), low, high))
    if resolved != numeric:
        logging.warning(
            "%s %r outside [%d, %d]; using %d.", name, value, low, high, resolved
        )
    return resolved


def normalize_config(raw: FSRSConfig | Mapping[str, Any] | None) -> FSRSConfig:
    """
    Resolve an arbitrary or partial configuration into a legal `FSRSConfig`.

    Never raises: invalid entries fall back to defaults (with a logged warning)
    or are clamped into their legal ranges.
    """
    if isinstance(raw, FSRSConfig):
        source: Mapping[str, Any] = {
            "version": raw.version,
            "requested_retention": raw.requested_retention,
            "custom_weights": raw.custom_weights,
            "lapse_min_interval_days": raw.lapse_min_interval_days,
            "max_interval_days": raw.max_interval_days,
        }
    elif isinstance(raw, Mapping):
        source = raw
    else:
        source = {}

    version = resolve_version(_lookup(source, "version"))
    return FSRSConfig(
        version=version,
        requested_retention=resolve_retention(_lookup(source, "requested_retention")),
        custom_weights=resolve_custom_weights(
            _lookup(source, "custom_weights"), version
        ),
        lapse_min_interval_days=_resolve_int(
            _lookup(source, "lapse_min_interval_days"),
            name="lapse_min_interval_days",
            default=DEFAULT_LAPSE_MIN_INTERVAL,
            low=0,
            high=MAX_LAPSE_MIN_INTERVAL,
        ),
        max_interval_days=_resolve_int(
            _lookup(source, "max_interval_days"),
            name="max_interval_days",
            default=DEFAULT_MAX_INTERVAL,
            low=1,
            high=DEFAULT_MAX_INTERVAL,
        ),
    )


def load_config(path: str | Path, *, key: str | None = None) -> FSRSConfig:
    """
    Load and resolve a configuration stored as a JSON object.

    `key` selects a nested object, e.g. `key="fsrs"` for an application
    settings file that keeps the scheduler block under that name.
    """
    path = Path(path)
    data = _read_json(path)
    if key is not None:
        data = data.get(key)
        if not isinstance(data, dict):
            raise ValueError(f"{path} missing '{key}' object.")
    return normalize_config(data)


def _read_json(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object.")
    return data


__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_LAPSE_MIN_INTERVAL",
    "DEFAULT_MAX_INTERVAL",
    "DEFAULT_REQUESTED_RETENTION",
    "FSRSConfig",
    "load_config",
    "normalize_config",
    "resolve_custom_weights",
    "resolve_retention",
    "resolve_version",
]
