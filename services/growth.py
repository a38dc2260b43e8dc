"""Trend consistency and CAGR over a numeric series."""

from __future__ import annotations

from typing import Sequence

from domain import GrowthStats


def growth_stats(values: Sequence[float]) -> GrowthStats:
    """Count strict year-over-year increases and compute the CAGR.

    The CAGR is only defined when both endpoints are positive.
    """
    if len(values) < 2:
        return GrowthStats(positive_count=0, intervals=0)

    intervals = len(values) - 1
    positive_count = sum(1 for prev, curr in zip(values, values[1:]) if curr > prev)

    first, last = values[0], values[-1]
    cagr_percent = None
    if first > 0 and last > 0:
        cagr_percent = ((last / first) ** (1.0 / intervals) - 1.0) * 100.0

    return GrowthStats(
        positive_count=positive_count,
        intervals=intervals,
        cagr_percent=cagr_percent,
    )
