"""Profitability, cash flow, share count and DCF calculations."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from constants import (
    ANNUAL_POINTS_3Y,
    DCF_DEFAULT_GROWTH,
    DCF_DISCOUNT_RATE,
    DCF_MAX_GROWTH,
    DCF_MIN_GROWTH,
    DCF_TERMINAL_GROWTH,
    DCF_TRAILING_POINTS,
    DCF_YEARS,
    QUARTERS_3Y,
)
from domain import DcfResult, TickerSnapshot, YieldMetrics
from utils.math_utils import clamp, first_present


def as_percent(value: Optional[float]) -> Optional[float]:
    """Yahoo reports some ratios as fractions and some as percentages."""
    if value is None:
        return None
    return value * 100 if value <= 1 else value


class ValuationEngine:
    """Provide reusable calculations over a ticker snapshot."""

    def __init__(
        self,
        discount_rate: float = DCF_DISCOUNT_RATE,
        terminal_growth: float = DCF_TERMINAL_GROWTH,
        years: int = DCF_YEARS,
    ) -> None:
        self.discount_rate = discount_rate
        self.terminal_growth = terminal_growth
        self.years = years

    def roic_percent(self, snapshot: TickerSnapshot) -> Optional[float]:
        if not snapshot.annual_balance_sheet or not snapshot.annual_financials:
            return None
        latest_balance = snapshot.annual_balance_sheet[-1]
        latest_net_income = snapshot.annual_financials[-1].net_income
        if latest_net_income is None:
            return None

        equity = latest_balance.stockholders_equity
        if equity is None:
            return None
        debt = first_present(
            latest_balance.long_term_debt_and_capital_lease_obligation,
            latest_balance.long_term_debt,
            latest_balance.total_debt,
            0.0,
        )
        cash = first_present(
            latest_balance.cash_cash_equivalents_and_short_term_investments,
            latest_balance.cash_and_cash_equivalents,
            0.0,
        )

        invested_capital = equity + debt - cash
        if not math.isfinite(invested_capital) or invested_capital <= 0:
            return None
        return latest_net_income / invested_capital * 100

    def fcf_series(self, snapshot: TickerSnapshot) -> List[float]:
        values: List[float] = []
        for row in snapshot.annual_cash_flow:
            if row.free_cash_flow is not None:
                values.append(row.free_cash_flow)
                continue
            if row.operating_cash_flow is None or row.capital_expenditure is None:
                continue
            capex = row.capital_expenditure
            # Outflows may be reported negative or as a positive magnitude.
            if capex < 0:
                values.append(row.operating_cash_flow + capex)
            else:
                values.append(row.operating_cash_flow - capex)
        return values

    def shares_change_3y_percent(self, snapshot: TickerSnapshot) -> Optional[float]:
        quarterly = [
            value
            for value in (
                first_present(point.ordinary_shares_number, point.share_issued)
                for point in snapshot.quarterly_shares
            )
            if value is not None and value > 0
        ]
        if len(quarterly) >= QUARTERS_3Y:
            latest, earlier = quarterly[-1], quarterly[-QUARTERS_3Y]
            if earlier > 0:
                return (latest / earlier - 1) * 100

        annual = [
            point.diluted_average_shares
            for point in snapshot.annual_financials
            if point.diluted_average_shares is not None and point.diluted_average_shares > 0
        ]
        if len(annual) >= ANNUAL_POINTS_3Y:
            latest, earlier = annual[-1], annual[-ANNUAL_POINTS_3Y]
            if earlier > 0:
                return (latest / earlier - 1) * 100

        return None

    def operating_margin_percent(self, snapshot: TickerSnapshot) -> Optional[float]:
        return as_percent(snapshot.operating_margins)

    def yield_metrics(self, snapshot: TickerSnapshot) -> YieldMetrics:
        current = as_percent(snapshot.dividend_yield)
        yields = [point.yield_ for point in snapshot.yearly_dividend_yields if point.yield_ >= 0]
        average = sum(yields) / len(yields) * 100 if yields else None
        relative = current - average if current is not None and average is not None else None
        return YieldMetrics(
            current_yield_percent=current,
            avg_yield_5y_percent=average,
            yield_vs_5y_avg_percent=relative,
        )

    def shares_for_valuation(self, snapshot: TickerSnapshot) -> Optional[float]:
        latest_quarter = snapshot.quarterly_shares[-1] if snapshot.quarterly_shares else None
        return first_present(
            snapshot.shares_outstanding,
            latest_quarter.ordinary_shares_number if latest_quarter else None,
            latest_quarter.share_issued if latest_quarter else None,
        )

    @staticmethod
    def dcf_growth_rate(fcf_values: Sequence[float]) -> float:
        """Trailing FCF CAGR, clamped; falls back to a flat default."""
        trailing = [value for value in fcf_values[-DCF_TRAILING_POINTS:] if value > 0]
        growth = DCF_DEFAULT_GROWTH
        if len(trailing) >= 2:
            periods = len(trailing) - 1
            growth = (trailing[-1] / trailing[0]) ** (1.0 / periods) - 1
        return clamp(growth, DCF_MIN_GROWTH, DCF_MAX_GROWTH)

    def dcf(self, snapshot: TickerSnapshot, fcf_values: Sequence[float]) -> DcfResult:
        if len(fcf_values) < 2:
            return DcfResult()

        shares = self.shares_for_valuation(snapshot)
        latest_fcf = fcf_values[-1]
        if latest_fcf <= 0 or shares is None or shares <= 0:
            return DcfResult()

        growth = self.dcf_growth_rate(fcf_values)

        present_value = 0.0
        projected = latest_fcf
        for year in range(1, self.years + 1):
            projected *= 1 + growth
            present_value += projected / (1 + self.discount_rate) ** year

        terminal_value = projected * (1 + self.terminal_growth) / max(
            0.0001, self.discount_rate - self.terminal_growth
        )
        discounted_terminal = terminal_value / (1 + self.discount_rate) ** self.years
        per_share = (present_value + discounted_terminal) / shares

        if not math.isfinite(per_share) or per_share <= 0:
            return DcfResult()

        price = snapshot.current_price
        upside = (per_share / price - 1) * 100 if price is not None and price > 0 else None
        return DcfResult(intrinsic_value_per_share=per_share, upside_percent=upside)
