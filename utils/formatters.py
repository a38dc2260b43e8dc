"""Helpers for rendering screen results as text or JSON."""

import json
from typing import Any, List, Optional

import numpy as np


TABLE_COLUMNS = [
    ("Ticker", 8),
    ("Score", 6),
    ("RevYoY", 7),
    ("NIYoY", 7),
    ("ROIC", 8),
    ("Buyback3Y", 10),
    ("OpMargin", 9),
    ("YieldΔ", 8),
    ("DCF↑", 8),
]


def format_pct(value: Optional[float], decimals: int = 1) -> str:
    if value is None or not np.isfinite(value):
        return "N/A"
    return f"{value:.{decimals}f}%"


def pad(value: str, width: int) -> str:
    return value[:width] if len(value) >= width else value.ljust(width)


def format_threshold(value: float) -> str:
    return f"{value:g}"


def filter_summary(filters: Any) -> str:
    return (
        "Filters: YoY growth >=80% of available yearly intervals (4/5 target), "
        f"ROIC > {format_threshold(filters.min_roic_percent)}%, "
        f"Buyback <= -{format_threshold(abs(filters.min_buyback_percent))}% (3y), "
        f"Operating Margin > {format_threshold(filters.min_operating_margin_percent)}%"
    )


def failed_checks(diagnostic: Any, filters: Any) -> List[str]:
    """Describe every failing criterion of one diagnostic entry."""
    checks = diagnostic.checks
    failed: List[str] = []
    if not checks["revenue"]["pass"]:
        failed.append(
            f"Revenue YoY {checks['revenue']['got']} (need {checks['revenue']['required']})"
        )
    if not checks["net_income"]["pass"]:
        failed.append(
            f"Net Income YoY {checks['net_income']['got']} "
            f"(need {checks['net_income']['required']})"
        )
    if not checks["roic"]["pass"]:
        failed.append(
            f"ROIC {format_pct(checks['roic']['got_percent'])} "
            f"(need > {format_threshold(filters.min_roic_percent)}%)"
        )
    if not checks["buyback_3y"]["pass"]:
        failed.append(
            f"Buyback 3Y {format_pct(checks['buyback_3y']['got_percent'])} "
            f"(need <= -{format_threshold(abs(filters.min_buyback_percent))}%)"
        )
    if not checks["operating_margin"]["pass"]:
        failed.append(
            f"Operating Margin {format_pct(checks['operating_margin']['got_percent'])} "
            f"(need > {format_threshold(filters.min_operating_margin_percent)}%)"
        )
    return failed


def render_table(result: Any) -> str:
    lines: List[str] = [
        "📈 Compounding Machine Screener",
        f"Scanned: {result.scanned}",
        f"Qualified: {result.qualified}",
        filter_summary(result.filters),
    ]

    if not result.results:
        lines.append("No tickers passed the compounder filters.")
        if result.diagnostics:
            lines.append("")
            lines.append("Diagnostics:")
            for diagnostic in result.diagnostics:
                failed = failed_checks(diagnostic, result.filters)
                lines.append(f"- {diagnostic.ticker}: {'; '.join(failed) or 'No failures'}")
        return "\n".join(lines)

    lines.append("")
    lines.append(" | ".join(pad(name, width) for name, width in TABLE_COLUMNS))
    lines.append("-" * 94)
    for row in result.results:
        cells = [
            row.ticker,
            str(row.quality_score),
            row.revenue_growth.ratio_label(),
            row.net_income_growth.ratio_label(),
            format_pct(row.roic_percent),
            format_pct(row.shares_change_3y_percent),
            format_pct(row.operating_margin_percent),
            format_pct(row.yield_vs_5y_avg_percent),
            format_pct(row.dcf_upside_percent),
        ]
        lines.append(
            " | ".join(pad(cell, width) for cell, (_, width) in zip(cells, TABLE_COLUMNS))
        )

    lines.append("")
    lines.append("Notes:")
    lines.append("- YieldΔ = Current yield minus 5-year average yield.")
    lines.append("- DCF↑ = DCF implied upside/downside versus current price.")
    lines.append("- Data source: Yahoo fundamentals + quote data via yfinance.")
    return "\n".join(lines)


def render_json(result: Any) -> str:
    return json.dumps(result.model_dump(mode="json"), indent=2)
