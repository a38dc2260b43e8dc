"""Normalize raw fundamentals rows into canonical, deduped, date-sorted series."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

import numpy as np
import pandas as pd
from pydantic import BaseModel

from constants import DIVIDEND_YIELD_YEARS
from domain import (
    AnnualBalanceSheetPoint,
    AnnualCashFlowPoint,
    AnnualFinancialPoint,
    QuarterlySharesPoint,
    TickerSnapshot,
    YieldYearPoint,
)
from utils.math_utils import first_present, sanitize_float


# Epoch values below this are seconds, everything else milliseconds.
EPOCH_MILLIS_THRESHOLD = 1e12

PointT = TypeVar("PointT", bound=BaseModel)

# canonical field -> raw yfinance keys, most preferred first
FINANCIAL_FIELDS: Dict[str, Tuple[str, ...]] = {
    "total_revenue": ("TotalRevenue", "OperatingRevenue"),
    "net_income": ("NetIncomeCommonStockholders", "NetIncome"),
    "diluted_eps": ("DilutedEPS",),
    "basic_eps": ("BasicEPS",),
    "diluted_average_shares": ("DilutedAverageShares",),
}

BALANCE_SHEET_FIELDS: Dict[str, Tuple[str, ...]] = {
    "stockholders_equity": ("StockholdersEquity",),
    "long_term_debt": ("LongTermDebt",),
    "long_term_debt_and_capital_lease_obligation": ("LongTermDebtAndCapitalLeaseObligation",),
    "total_debt": ("TotalDebt",),
    "cash_and_cash_equivalents": ("CashAndCashEquivalents",),
    "cash_cash_equivalents_and_short_term_investments": (
        "CashCashEquivalentsAndShortTermInvestments",
    ),
}

CASH_FLOW_FIELDS: Dict[str, Tuple[str, ...]] = {
    "operating_cash_flow": ("OperatingCashFlow",),
    "capital_expenditure": ("CapitalExpenditure",),
    "free_cash_flow": ("FreeCashFlow",),
}

QUARTERLY_SHARES_FIELDS: Dict[str, Tuple[str, ...]] = {
    "ordinary_shares_number": ("OrdinarySharesNumber",),
    "share_issued": ("ShareIssued",),
}


def normalize_date(value: Any) -> Optional[str]:
    """Return the UTC calendar date of ``value`` as ``YYYY-MM-DD``.

    Accepts datetime/date objects (pandas Timestamps included), epoch numbers
    in seconds or milliseconds, and parseable strings. Anything else yields
    None.
    """
    if value is None or value is pd.NaT or isinstance(value, (bool, np.bool_)):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()

    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
        if not np.isfinite(number):
            return None
        seconds = number if number < EPOCH_MILLIS_THRESHOLD else number / 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).date().isoformat()
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = pd.to_datetime(text, utc=True, errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.date().isoformat()

    return None


def raw_number(row: Mapping[str, Any], key: str) -> Optional[float]:
    """Read ``key`` from a raw row, accepting both PascalCase and camelCase spellings."""
    for candidate in (key, key[0].lower() + key[1:]):
        if candidate in row:
            value = sanitize_float(row[candidate])
            if value is not None:
                return value
    return None


def dedupe_by_date(points: Iterable[PointT]) -> List[PointT]:
    latest: Dict[str, PointT] = {}
    for point in points:
        latest[point.date] = point
    return sorted(latest.values(), key=lambda point: point.date)


def extract_points(
    raw_rows: Sequence[Mapping[str, Any]] | None,
    fields: Mapping[str, Tuple[str, ...]],
    model: Type[PointT],
) -> List[PointT]:
    points: List[PointT] = []
    for row in raw_rows or []:
        day = normalize_date(row.get("date"))
        if day is None:
            continue
        values = {
            name: first_present(*(raw_number(row, key) for key in keys))
            for name, keys in fields.items()
        }
        if all(value is None for value in values.values()):
            continue
        points.append(model(date=day, **values))
    return dedupe_by_date(points)


def to_annual_financial_points(raw_rows) -> List[AnnualFinancialPoint]:
    return extract_points(raw_rows, FINANCIAL_FIELDS, AnnualFinancialPoint)


def to_annual_balance_sheet_points(raw_rows) -> List[AnnualBalanceSheetPoint]:
    return extract_points(raw_rows, BALANCE_SHEET_FIELDS, AnnualBalanceSheetPoint)


def to_annual_cash_flow_points(raw_rows) -> List[AnnualCashFlowPoint]:
    return extract_points(raw_rows, CASH_FLOW_FIELDS, AnnualCashFlowPoint)


def to_quarterly_shares_points(raw_rows) -> List[QuarterlySharesPoint]:
    return extract_points(raw_rows, QUARTERLY_SHARES_FIELDS, QuarterlySharesPoint)


def _utc_year(value: Any) -> Optional[int]:
    if not isinstance(value, datetime) or value is pd.NaT:
        return None
    stamp = pd.Timestamp(value)
    stamp = stamp.tz_localize("UTC") if stamp.tzinfo is None else stamp.tz_convert("UTC")
    return stamp.year


def compute_yearly_dividend_yields(
    observations: Iterable[Mapping[str, Any]] | None,
    years: int = DIVIDEND_YIELD_YEARS,
) -> List[YieldYearPoint]:
    """Dividends paid per calendar year divided by that year's average close."""
    records = []
    for item in observations or []:
        year = _utc_year(item.get("date"))
        if year is None:
            continue
        records.append(
            {
                "year": year,
                "close": sanitize_float(item.get("close")),
                "dividends": sanitize_float(item.get("dividends")) or 0.0,
            }
        )
    if not records:
        return []

    frame = pd.DataFrame.from_records(records)
    frame["close"] = pd.to_numeric(frame["close"], errors="coerce")
    valid_closes = frame[frame["close"] > 0]
    avg_close = valid_closes.groupby("year")["close"].mean()
    dividend_sum = frame.groupby("year")["dividends"].sum()

    result: List[YieldYearPoint] = []
    for year, average in avg_close.sort_index().items():
        if average <= 0:
            continue
        result.append(YieldYearPoint(year=int(year), yield_=float(dividend_sum[year] / average)))
    return result[-years:] if years > 0 else []


def build_snapshot(
    ticker: str,
    quote: Mapping[str, Any] | None,
    annual_financials: Sequence[Mapping[str, Any]] | None,
    annual_balance_sheet: Sequence[Mapping[str, Any]] | None,
    annual_cash_flow: Sequence[Mapping[str, Any]] | None,
    quarterly_balance_sheet: Sequence[Mapping[str, Any]] | None,
    history: Iterable[Mapping[str, Any]] | None,
) -> TickerSnapshot:
    quote = quote or {}
    return TickerSnapshot(
        ticker=ticker,
        annual_financials=to_annual_financial_points(annual_financials),
        annual_balance_sheet=to_annual_balance_sheet_points(annual_balance_sheet),
        annual_cash_flow=to_annual_cash_flow_points(annual_cash_flow),
        quarterly_shares=to_quarterly_shares_points(quarterly_balance_sheet),
        yearly_dividend_yields=compute_yearly_dividend_yields(history),
        operating_margins=sanitize_float(quote.get("operatingMargins")),
        dividend_yield=sanitize_float(quote.get("dividendYield")),
        shares_outstanding=sanitize_float(quote.get("sharesOutstanding")),
        current_price=first_present(
            sanitize_float(quote.get("regularMarketPrice")),
            sanitize_float(quote.get("currentPrice")),
        ),
        market_cap=sanitize_float(quote.get("marketCap")),
    )
