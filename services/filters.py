"""Pass/fail thresholds for compounder candidates."""

from __future__ import annotations

from typing import Any, Dict

from constants import GROWTH_PASS_RATIO, MIN_GROWTH_INTERVALS
from domain import CompounderRow, FilterEvaluation, GrowthStats, ScreenerOptions
from utils.math_utils import round_half_up


GROWTH_RULE = (
    "Revenue and Net Income: positive YoY trend "
    "(>=80% of available yearly intervals; equivalent to 4/5)"
)


def required_positive_intervals(intervals: int) -> int:
    return max(1, round_half_up(intervals * GROWTH_PASS_RATIO))


def growth_passes(stats: GrowthStats, required: int) -> bool:
    return stats.intervals >= MIN_GROWTH_INTERVALS and stats.positive_count >= required


def evaluate_filters(row: CompounderRow, options: ScreenerOptions) -> FilterEvaluation:
    revenue_required = required_positive_intervals(row.revenue_growth.intervals)
    net_income_required = required_positive_intervals(row.net_income_growth.intervals)

    revenue_pass = growth_passes(row.revenue_growth, revenue_required)
    net_income_pass = growth_passes(row.net_income_growth, net_income_required)
    roic_pass = row.roic_percent is not None and row.roic_percent > options.min_roic
    buyback_pass = (
        row.shares_change_3y_percent is not None
        and row.shares_change_3y_percent <= -abs(options.min_buyback_percent)
    )
    margin_pass = (
        row.operating_margin_percent is not None
        and row.operating_margin_percent > options.min_operating_margin
    )

    return FilterEvaluation(
        passed=revenue_pass and net_income_pass and roic_pass and buyback_pass and margin_pass,
        revenue_pass=revenue_pass,
        net_income_pass=net_income_pass,
        roic_pass=roic_pass,
        buyback_pass=buyback_pass,
        margin_pass=margin_pass,
        revenue_required=revenue_required,
        net_income_required=net_income_required,
    )


def diagnostic_checks(row: CompounderRow, evaluation: FilterEvaluation) -> Dict[str, Dict[str, Any]]:
    """Actual vs required values for each criterion."""
    return {
        "revenue": {
            "pass": evaluation.revenue_pass,
            "got": row.revenue_growth.ratio_label(),
            "required": f"{evaluation.revenue_required}/{row.revenue_growth.intervals}",
        },
        "net_income": {
            "pass": evaluation.net_income_pass,
            "got": row.net_income_growth.ratio_label(),
            "required": f"{evaluation.net_income_required}/{row.net_income_growth.intervals}",
        },
        "roic": {"pass": evaluation.roic_pass, "got_percent": row.roic_percent},
        "buyback_3y": {
            "pass": evaluation.buyback_pass,
            "got_percent": row.shares_change_3y_percent,
        },
        "operating_margin": {
            "pass": evaluation.margin_pass,
            "got_percent": row.operating_margin_percent,
        },
    }
