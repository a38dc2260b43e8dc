"""Domain models and value objects."""

from .models import (
    CompounderRow,
    DcfResult,
    FilterEvaluation,
    FilterThresholds,
    GrowthStats,
    ScreenDiagnostic,
    ScreenerOptions,
    ScreenResult,
    YieldMetrics,
)
from .snapshot import (
    AnnualBalanceSheetPoint,
    AnnualCashFlowPoint,
    AnnualFinancialPoint,
    QuarterlySharesPoint,
    TickerSnapshot,
    YieldYearPoint,
)

__all__ = [
    "AnnualBalanceSheetPoint",
    "AnnualCashFlowPoint",
    "AnnualFinancialPoint",
    "CompounderRow",
    "DcfResult",
    "FilterEvaluation",
    "FilterThresholds",
    "GrowthStats",
    "QuarterlySharesPoint",
    "ScreenDiagnostic",
    "ScreenerOptions",
    "ScreenResult",
    "TickerSnapshot",
    "YieldMetrics",
    "YieldYearPoint",
]
