"""Composite 1-100 quality score for compounder candidates."""

from __future__ import annotations

from typing import Optional

from domain import GrowthStats
from utils.math_utils import clamp, round_half_up


def consistency_score(stats: GrowthStats, weight: float) -> float:
    if stats.intervals <= 0:
        return 0.0
    return stats.positive_count / stats.intervals * weight


def ramp(value: Optional[float], floor: float, ceiling: float, weight: float) -> float:
    """Linear credit from 0 at ``floor`` to ``weight`` at ``ceiling``."""
    if value is None:
        return 0.0
    return clamp((value - floor) / (ceiling - floor), 0.0, 1.0) * weight


def compute_quality_score(
    revenue_growth: GrowthStats,
    net_income_growth: GrowthStats,
    eps_growth: GrowthStats,
    roic_percent: Optional[float] = None,
    latest_fcf: Optional[float] = None,
    fcf_growth_percent: Optional[float] = None,
    shares_change_3y_percent: Optional[float] = None,
    operating_margin_percent: Optional[float] = None,
) -> int:
    score = 0.0
    score += consistency_score(revenue_growth, 20)
    score += consistency_score(net_income_growth, 20)
    score += consistency_score(eps_growth, 10)
    score += ramp(roic_percent, 5, 25, 20)
    if latest_fcf is not None and latest_fcf > 0:
        score += 5
    score += ramp(fcf_growth_percent, -5, 15, 5)
    shrink = -shares_change_3y_percent if shares_change_3y_percent is not None else None
    score += ramp(shrink, 0, 8, 10)
    score += ramp(operating_margin_percent, 10, 30, 10)
    return int(clamp(round_half_up(score), 1, 100))
