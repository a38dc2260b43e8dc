"""Cached per-ticker fundamentals bundle."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from constants import SNAPSHOT_SCHEMA_VERSION


class AnnualFinancialPoint(BaseModel):
    date: str
    total_revenue: Optional[float] = None
    net_income: Optional[float] = None
    diluted_eps: Optional[float] = None
    basic_eps: Optional[float] = None
    diluted_average_shares: Optional[float] = None


class AnnualBalanceSheetPoint(BaseModel):
    date: str
    stockholders_equity: Optional[float] = None
    long_term_debt: Optional[float] = None
    long_term_debt_and_capital_lease_obligation: Optional[float] = None
    total_debt: Optional[float] = None
    cash_and_cash_equivalents: Optional[float] = None
    cash_cash_equivalents_and_short_term_investments: Optional[float] = None


class AnnualCashFlowPoint(BaseModel):
    date: str
    operating_cash_flow: Optional[float] = None
    capital_expenditure: Optional[float] = None
    free_cash_flow: Optional[float] = None


class QuarterlySharesPoint(BaseModel):
    date: str
    ordinary_shares_number: Optional[float] = None
    share_issued: Optional[float] = None


class YieldYearPoint(BaseModel):
    year: int
    # ``yield`` is a keyword, so the attribute carries a suffix.
    yield_: float = Field(alias="yield")

    model_config = ConfigDict(populate_by_name=True)


class TickerSnapshot(BaseModel):
    """Normalized fundamentals and price bundle for one ticker at one fetch time."""

    schema_version: int = SNAPSHOT_SCHEMA_VERSION
    ticker: str
    annual_financials: List[AnnualFinancialPoint] = Field(default_factory=list)
    annual_balance_sheet: List[AnnualBalanceSheetPoint] = Field(default_factory=list)
    annual_cash_flow: List[AnnualCashFlowPoint] = Field(default_factory=list)
    quarterly_shares: List[QuarterlySharesPoint] = Field(default_factory=list)
    yearly_dividend_yields: List[YieldYearPoint] = Field(default_factory=list)
    operating_margins: Optional[float] = None
    dividend_yield: Optional[float] = None
    shares_outstanding: Optional[float] = None
    current_price: Optional[float] = None
    market_cap: Optional[float] = None
