from __future__ import annotations

from typing import Any, Mapping, Sequence

import torch

from recall.config import FSRSConfig, normalize_config
from recall.math.fsrs import CurveParams, curve_params, retention_factor


def _curve(config: FSRSConfig | Mapping[str, Any] | None) -> CurveParams:
    resolved = normalize_config(config)
    return curve_params(resolved.version, resolved.weights)


def forgetting_curve(
    decay: float, factor: float, t: torch.Tensor, s: torch.Tensor
) -> torch.Tensor:
    """Recall probability per entry; 0 where the topic has no stability yet."""
    safe_s = torch.where(s > 0, s, torch.ones_like(s))
    r = torch.pow(1.0 + factor * t / safe_s, decay)
    r = torch.where(s > 0, r, torch.zeros_like(r))
    return torch.nan_to_num(r, nan=0.0, posinf=0.0, neginf=0.0)


def batch_retrievability(
    stabilities: Sequence[float] | torch.Tensor,
    elapsed_days: Sequence[float] | torch.Tensor,
    config: FSRSConfig | Mapping[str, Any] | None = None,
    *,
    device: torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    dtype = dtype or torch.float64
    s = torch.as_tensor(stabilities, dtype=dtype, device=device)
    t = torch.as_tensor(elapsed_days, dtype=dtype, device=device)
    t = torch.clamp(t, min=0.0)
    params = _curve(config)
    return forgetting_curve(params.decay, params.factor, t, s)


def batch_next_intervals(
    stabilities: Sequence[float] | torch.Tensor,
    config: FSRSConfig | Mapping[str, Any] | None = None,
    *,
    device: torch.device | str | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    resolved = normalize_config(config)
    params = curve_params(resolved.version, resolved.weights)
    dtype = dtype or torch.float64
    s = torch.as_tensor(stabilities, dtype=dtype, device=device)
    scale = retention_factor(params, resolved.requested_retention) / params.factor
    raw = torch.floor(s * scale + 0.5)
    raw = torch.nan_to_num(raw, nan=1.0, posinf=float(resolved.max_interval_days))
    intervals = torch.clamp(raw, min=1.0, max=float(resolved.max_interval_days))
    intervals = torch.where(s > 0, intervals, torch.ones_like(intervals))
    return intervals.to(torch.int64)


def due_soon_mask(
    stabilities: Sequence[float] | torch.Tensor,
    elapsed_days: Sequence[float] | torch.Tensor,
    config: FSRSConfig | Mapping[str, Any] | None = None,
    *,
    threshold: float | None = None,
    device: torch.device | str | None = None,
) -> torch.Tensor:
    """
    Flag reviewed topics whose recall probability dropped to `threshold`
    (the requested retention by default).
    """
    resolved = normalize_config(config)
    limit = resolved.requested_retention if threshold is None else float(threshold)
    s = torch.as_tensor(stabilities, dtype=torch.float64, device=device)
    r = batch_retrievability(s, elapsed_days, resolved, device=device)
    return (s > 0) & (r <= limit)
