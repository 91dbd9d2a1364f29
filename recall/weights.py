from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Version(str, Enum):
    FSRS5 = "fsrs5"
    FSRS6 = "fsrs6"


DEFAULT_FSRS5_WEIGHTS: tuple[float, ...] = (
    0.40255,
    1.18385,
    3.173,
    15.69105,
    7.1949,
    0.5345,
    1.4604,
    0.0046,
    1.54575,
    0.1192,
    1.01925,
    1.9395,
    0.11,
    0.29605,
    2.2698,
    0.2315,
    2.9898,
    0.51655,
    0.6621,
)

DEFAULT_FSRS6_WEIGHTS: tuple[float, ...] = (
    0.212,
    1.2931,
    2.3065,
    8.2956,
    6.4133,
    0.8334,
    3.0194,
    0.001,
    1.8722,
    0.1666,
    0.796,
    1.4835,
    0.0614,
    0.2629,
    1.6483,
    0.6014,
    1.8729,
    0.5425,
    0.0912,
    0.0658,
    0.1542,
)

DEFAULT_WEIGHTS: Mapping[Version, tuple[float, ...]] = MappingProxyType(
    {
        Version.FSRS5: DEFAULT_FSRS5_WEIGHTS,
        Version.FSRS6: DEFAULT_FSRS6_WEIGHTS,
    }
)

VERSION_LABEL: Mapping[Version, str] = MappingProxyType(
    {
        Version.FSRS5: "FSRS-5",
        Version.FSRS6: "FSRS-6",
    }
)


def default_weights(version: Version) -> tuple[float, ...]:
    return DEFAULT_WEIGHTS[version]


def expected_weight_count(version: Version) -> int:
    return len(DEFAULT_WEIGHTS[version])


__all__ = [
    "Version",
    "DEFAULT_FSRS5_WEIGHTS",
    "DEFAULT_FSRS6_WEIGHTS",
    "DEFAULT_WEIGHTS",
    "VERSION_LABEL",
    "default_weights",
    "expected_weight_count",
]
