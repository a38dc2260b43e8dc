"""Domain-level data structures for the compounding machine screener."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_DB_PATH,
    DEFAULT_MARKET,
    DEFAULT_MIN_BUYBACK_PERCENT,
    DEFAULT_MIN_OPERATING_MARGIN,
    DEFAULT_MIN_ROIC,
    DEFAULT_TOP_N,
    DEFAULT_TTL_DAYS,
)
from utils.math_utils import sanitize_float


Market = Literal["us", "bk"]
OutputFormat = Literal["text", "json"]


class GrowthStats(BaseModel):
    positive_count: int = 0
    intervals: int = 0
    cagr_percent: Optional[float] = None

    def ratio_label(self) -> str:
        return f"{self.positive_count}/{self.intervals}"


@dataclass(slots=True)
class DcfResult:
    intrinsic_value_per_share: Optional[float] = None
    upside_percent: Optional[float] = None


@dataclass(slots=True)
class YieldMetrics:
    current_yield_percent: Optional[float] = None
    avg_yield_5y_percent: Optional[float] = None
    yield_vs_5y_avg_percent: Optional[float] = None


@dataclass(slots=True)
class FilterEvaluation:
    passed: bool
    revenue_pass: bool
    net_income_pass: bool
    roic_pass: bool
    buyback_pass: bool
    margin_pass: bool
    revenue_required: int
    net_income_required: int


class CompounderRow(BaseModel):
    ticker: str
    revenue_growth: GrowthStats
    net_income_growth: GrowthStats
    eps_growth: GrowthStats
    roic_percent: float | None = None
    latest_fcf: float | None = None
    fcf_growth_percent: float | None = None
    shares_change_3y_percent: float | None = None
    operating_margin_percent: float | None = None
    current_yield_percent: float | None = None
    avg_yield_5y_percent: float | None = None
    yield_vs_5y_avg_percent: float | None = None
    dcf_intrinsic_value_per_share: float | None = None
    dcf_upside_percent: float | None = None
    quality_score: int = 1

    @field_validator(
        "roic_percent",
        "latest_fcf",
        "fcf_growth_percent",
        "shares_change_3y_percent",
        "operating_margin_percent",
        "current_yield_percent",
        "avg_yield_5y_percent",
        "yield_vs_5y_avg_percent",
        "dcf_intrinsic_value_per_share",
        "dcf_upside_percent",
        mode="before",
    )
    @classmethod
    def _sanitize_numeric(cls, value: Any) -> Optional[float]:
        return sanitize_float(value)


class ScreenerOptions(BaseModel):
    market: Market = DEFAULT_MARKET
    tickers: Optional[List[str]] = None
    max_tickers: Optional[int] = Field(default=None, ge=0)
    top_n: int = Field(default=DEFAULT_TOP_N, ge=0)
    concurrency: int = DEFAULT_CONCURRENCY
    output_format: OutputFormat = "text"
    db_path: str = DEFAULT_DB_PATH
    ttl_days: float = Field(default=DEFAULT_TTL_DAYS, ge=0)
    min_roic: float = DEFAULT_MIN_ROIC
    min_operating_margin: float = DEFAULT_MIN_OPERATING_MARGIN
    min_buyback_percent: float = DEFAULT_MIN_BUYBACK_PERCENT
    show_rejected: bool = False

    @field_validator("tickers", mode="before")
    @classmethod
    def _normalize_tickers(cls, value: Any) -> Optional[List[str]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        cleaned = [str(item).strip().upper() for item in value]
        cleaned = [item for item in cleaned if item]
        return cleaned or None

    @field_validator("concurrency", mode="after")
    @classmethod
    def _at_least_one_worker(cls, value: int) -> int:
        return max(1, value)


class FilterThresholds(BaseModel):
    growth_rule: str
    min_roic_percent: float
    min_buyback_percent: float
    min_operating_margin_percent: float


class ScreenDiagnostic(BaseModel):
    ticker: str
    passed: bool
    checks: Dict[str, Dict[str, Any]]


class ScreenResult(BaseModel):
    market: str
    scanned: int
    qualified: int
    filters: FilterThresholds
    diagnostics: List[ScreenDiagnostic] = Field(default_factory=list)
    results: List[CompounderRow] = Field(default_factory=list)
