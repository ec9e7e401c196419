"""Area and time-average helpers over sampled serum trajectories."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from scipy.integrate import trapezoid


def trapezoid_integral(values: Sequence[float] | np.ndarray, time: Sequence[float] | np.ndarray) -> float:
    """Area under ``values`` sampled at ``time``; fewer than two samples have no area."""

    levels = np.asarray(values, dtype=float)
    hours = np.asarray(time, dtype=float)
    if levels.size < 2:
        return 0.0
    return float(trapezoid(levels, hours))


def time_average(values: Sequence[float] | np.ndarray, time: Sequence[float] | np.ndarray) -> float:
    """Mean level over the sampled window; a single sample is its own mean."""

    levels = np.asarray(values, dtype=float)
    hours = np.asarray(time, dtype=float)
    if levels.size == 0:
        return 0.0
    span = float(hours[-1] - hours[0]) if hours.size else 0.0
    if span <= 0.0:
        return float(levels[-1])
    return trapezoid_integral(levels, hours) / span


__all__ = ["time_average", "trapezoid_integral"]
