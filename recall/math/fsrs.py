from __future__ import annotations

import dataclasses
import math
from typing import Sequence, Tuple

from recall.weights import DEFAULT_FSRS6_WEIGHTS, Version

MIN_STABILITY = 0.1
MAX_STABILITY = 36500.0
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
FALLBACK_DIFFICULTY = 5.0

FSRS5_DECAY = -0.5
FSRS5_FACTOR = 19.0 / 81.0

AGAIN, HARD, GOOD, EASY = 1, 2, 3, 4


@dataclasses.dataclass(frozen=True)
class Bounds:
    s_min: float = MIN_STABILITY
    s_max: float = MAX_STABILITY
    d_min: float = MIN_DIFFICULTY
    d_max: float = MAX_DIFFICULTY


@dataclasses.dataclass(frozen=True)
class CurveParams:
    decay: float
    factor: float


DEFAULT_BOUNDS = Bounds()
FSRS5_CURVE = CurveParams(decay=FSRS5_DECAY, factor=FSRS5_FACTOR)


FSRS6_DEFAULT_CURVE = CurveParams(
    decay=-DEFAULT_FSRS6_WEIGHTS[20],
    factor=0.9 ** (1.0 / -DEFAULT_FSRS6_WEIGHTS[20]) - 1.0,
)


def curve_params(version: Version, weights: Sequence[float]) -> CurveParams:
    """
    Return the (decay, factor) pair of the forgetting curve.

    FSRS-6 reads the decay from w[20]; a missing, non-positive or non-finite
    value (or one that makes the factor degenerate) falls back to the default
    FSRS-6 curve.
    """
    if version != Version.FSRS6:
        return FSRS5_CURVE
    w20 = float(weights[20]) if len(weights) > 20 else math.nan
    if not math.isfinite(w20) or w20 <= 0.0:
        return FSRS6_DEFAULT_CURVE
    decay = -w20
    params = CurveParams(decay=decay, factor=_pow(0.9, 1.0 / decay) - 1.0)
    if not math.isfinite(params.factor) or params.factor <= 0.0:
        return FSRS6_DEFAULT_CURVE
    return params


# --------------------------- memory model --------------------------- #


def init_difficulty(weights: Sequence[float], rating: int) -> float:
    return weights[4] - _exp(weights[5] * (rating - 1)) + 1.0


def init_state(
    weights: Sequence[float], rating: int, bounds: Bounds = DEFAULT_BOUNDS
) -> Tuple[float, float]:
    s = weights[rating - 1]
    d = _clamp_d(bounds, init_difficulty(weights, rating))
    return s, d


def forgetting_curve(params: CurveParams, t: float, s: float) -> float:
    if s <= 0.0:
        return 0.0
    return _pow(1.0 + params.factor * t / s, params.decay)


def next_d(
    weights: Sequence[float], d: float, rating: int, bounds: Bounds = DEFAULT_BOUNDS
) -> float:
    delta_d = -weights[6] * (rating - 3.0)
    new_d = d + _linear_damping(delta_d, d)
    new_d = _mean_reversion(weights[7], init_difficulty(weights, EASY), new_d)
    return _clamp_d(bounds, new_d)


def stability_short_term(
    weights: Sequence[float], s: float, rating: int, *, version: Version
) -> float:
    sinc = _exp(weights[17] * (rating - 3 + weights[18]))
    if version == Version.FSRS6:
        sinc *= _pow(s, -weights[19])
    # Good/Easy on the same day must not shrink stability.
    return s * (max(1.0, sinc) if rating >= GOOD else sinc)


def stability_after_success(
    weights: Sequence[float], s: float, r: float, d: float, rating: int
) -> float:
    hard_penalty = weights[15] if rating == HARD else 1.0
    easy_bonus = weights[16] if rating == EASY else 1.0
    inc = (
        _exp(weights[8])
        * (11.0 - d)
        * _pow(s, -weights[9])
        * (_exp((1.0 - r) * weights[10]) - 1.0)
    )
    return s * (1.0 + inc * hard_penalty * easy_bonus)


def stability_after_failure(
    weights: Sequence[float], s: float, r: float, d: float
) -> float:
    new_s = (
        weights[11]
        * _pow(d, -weights[12])
        * (_pow(s + 1.0, weights[13]) - 1.0)
        * _exp((1.0 - r) * weights[14])
    )
    if math.isnan(new_s):
        return new_s
    return min(new_s, s)


def retention_factor(params: CurveParams, desired_retention: float) -> float:
    return _pow(desired_retention, 1.0 / params.decay) - 1.0


def next_interval(
    params: CurveParams, s: float, desired_retention: float, max_interval: int
) -> int:
    if s <= 0.0:
        return 1
    raw = s / params.factor * retention_factor(params, desired_retention)
    if math.isnan(raw):
        return 1
    if math.isinf(raw):
        return max_interval if raw > 0 else 1
    return max(1, min(round_half_up(raw), max_interval))


def sanitize_state(
    weights: Sequence[float],
    s: float,
    d: float,
    rating: int,
    bounds: Bounds = DEFAULT_BOUNDS,
) -> Tuple[float, float]:
    """
    Replace non-finite results with fallbacks, clamp and round to 2 decimals.
    """
    if not math.isfinite(d):
        d = init_difficulty(weights, rating)
        if not math.isfinite(d):
            d = FALLBACK_DIFFICULTY
    d = _clamp_d(bounds, d)
    if not math.isfinite(s) or s < bounds.s_min:
        s = bounds.s_min
    s = _clamp_s(bounds, s)
    return round(s, 2), round(d, 2)


# --------------------------- shared helpers --------------------------- #


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _exp(value: float) -> float:
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf


def _pow(base: float, exponent: float) -> float:
    try:
        result = base**exponent
    except OverflowError:
        return math.inf
    except ZeroDivisionError:
        return math.inf
    if isinstance(result, complex):
        return math.nan
    return result


def _linear_damping(delta_d: float, old_d: float) -> float:
    return delta_d * (10.0 - old_d) / 9.0


def _mean_reversion(weight: float, init: float, current: float) -> float:
    return weight * init + (1.0 - weight) * current


def _clamp(value: float, low: float, high: float) -> float:
    if math.isnan(value):
        return value
    return max(low, min(value, high))


def _clamp_s(bounds: Bounds, s: float) -> float:
    return _clamp(s, bounds.s_min, bounds.s_max)


def _clamp_d(bounds: Bounds, d: float) -> float:
    return _clamp(d, bounds.d_min, bounds.d_max)
