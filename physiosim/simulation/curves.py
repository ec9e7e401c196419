"""Piecewise-linear lookup over discrete dose-response control points."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..engine.compounds import CurvePoint


@dataclass(frozen=True)
class CurveSample:
    """Interpolated response at one dose."""

    value: float
    ci: float
    tier: str = "none"

    @property
    def is_zero(self) -> bool:
        return self.value == 0.0 and self.ci == 0.0


ZERO_SAMPLE = CurveSample(value=0.0, ci=0.0, tier="none")


def interpolate_curve(curve: Sequence[CurvePoint] | None, dose: float) -> CurveSample:
    """Return the curve response at ``dose``.

    Doses outside the curve's range return the boundary point unchanged, and
    doses between two control points interpolate value and confidence
    interval by the same ratio.  Missing or empty curves yield
    :data:`ZERO_SAMPLE`.
    """

    if not curve:
        return ZERO_SAMPLE
    first, last = curve[0], curve[-1]
    if dose <= first.dose:
        return CurveSample(value=float(first.value), ci=float(first.ci), tier=first.tier)
    if dose >= last.dose:
        return CurveSample(value=float(last.value), ci=float(last.ci), tier=last.tier)

    doses = np.fromiter((point.dose for point in curve), dtype=float, count=len(curve))
    values = np.fromiter((point.value for point in curve), dtype=float, count=len(curve))
    intervals = np.fromiter((point.ci for point in curve), dtype=float, count=len(curve))
    lower = curve[bisect_right(doses.tolist(), dose) - 1]
    return CurveSample(
        value=float(np.interp(dose, doses, values)),
        ci=float(np.interp(dose, doses, intervals)),
        tier=lower.tier,
    )


__all__ = ["CurveSample", "ZERO_SAMPLE", "interpolate_curve"]
