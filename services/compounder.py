"""Derive a CompounderRow from a ticker snapshot."""

from __future__ import annotations

from typing import List

from constants import FCF_GROWTH_WINDOW, GROWTH_WINDOW
from domain import CompounderRow, TickerSnapshot
from utils.math_utils import first_present

from .growth import growth_stats
from .quality_scorer import compute_quality_score
from .valuation import ValuationEngine


VALUATION = ValuationEngine()


def revenue_series(snapshot: TickerSnapshot) -> List[float]:
    values = [
        point.total_revenue
        for point in snapshot.annual_financials
        if point.total_revenue is not None and point.total_revenue > 0
    ]
    return values[-GROWTH_WINDOW:]


def net_income_series(snapshot: TickerSnapshot) -> List[float]:
    values = [point.net_income for point in snapshot.annual_financials if point.net_income is not None]
    return values[-GROWTH_WINDOW:]


def eps_series(snapshot: TickerSnapshot) -> List[float]:
    values = [
        eps
        for eps in (
            first_present(point.diluted_eps, point.basic_eps)
            for point in snapshot.annual_financials
        )
        if eps is not None
    ]
    return values[-GROWTH_WINDOW:]


def build_row(snapshot: TickerSnapshot, engine: ValuationEngine = VALUATION) -> CompounderRow:
    revenue_growth = growth_stats(revenue_series(snapshot))
    net_income_growth = growth_stats(net_income_series(snapshot))
    eps_growth = growth_stats(eps_series(snapshot))

    roic = engine.roic_percent(snapshot)
    fcf_values = engine.fcf_series(snapshot)
    latest_fcf = fcf_values[-1] if fcf_values else None
    fcf_growth = growth_stats(fcf_values[-FCF_GROWTH_WINDOW:])
    shares_change = engine.shares_change_3y_percent(snapshot)
    margin = engine.operating_margin_percent(snapshot)
    yields = engine.yield_metrics(snapshot)
    dcf = engine.dcf(snapshot, fcf_values)

    score = compute_quality_score(
        revenue_growth,
        net_income_growth,
        eps_growth,
        roic_percent=roic,
        latest_fcf=latest_fcf,
        fcf_growth_percent=fcf_growth.cagr_percent,
        shares_change_3y_percent=shares_change,
        operating_margin_percent=margin,
    )

    return CompounderRow(
        ticker=snapshot.ticker,
        revenue_growth=revenue_growth,
        net_income_growth=net_income_growth,
        eps_growth=eps_growth,
        roic_percent=roic,
        latest_fcf=latest_fcf,
        fcf_growth_percent=fcf_growth.cagr_percent,
        shares_change_3y_percent=shares_change,
        operating_margin_percent=margin,
        current_yield_percent=yields.current_yield_percent,
        avg_yield_5y_percent=yields.avg_yield_5y_percent,
        yield_vs_5y_avg_percent=yields.yield_vs_5y_avg_percent,
        dcf_intrinsic_value_per_share=dcf.intrinsic_value_per_share,
        dcf_upside_percent=dcf.upside_percent,
        quality_score=score,
    )
