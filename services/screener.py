"""Drive the compounder screen across a ticker universe."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Protocol, Tuple

from clients import TickerUniverseProvider
from constants import PROGRESS_EVERY
from domain import (
    CompounderRow,
    FilterEvaluation,
    FilterThresholds,
    ScreenDiagnostic,
    ScreenerOptions,
    ScreenResult,
    TickerSnapshot,
)

from .compounder import build_row
from .concurrency import map_with_concurrency
from .filters import GROWTH_RULE, diagnostic_checks, evaluate_filters


logger = logging.getLogger(__name__)

Evaluated = Tuple[CompounderRow, FilterEvaluation]


class SnapshotFetcher(Protocol):
    def fetch(self, ticker: str) -> Optional[TickerSnapshot]: ...


class UniverseProvider(Protocol):
    def list_tickers(self, market: str) -> List[str]: ...


class CompoundingScreener:
    """Fetch, derive, filter and rank every ticker of the configured universe."""

    def __init__(
        self,
        options: ScreenerOptions,
        fetcher: SnapshotFetcher,
        universe: UniverseProvider | None = None,
    ) -> None:
        self.options = options
        self._fetcher = fetcher
        self._universe = universe if universe is not None else TickerUniverseProvider()
        self._progress_lock = threading.Lock()
        self._completed = 0

    def resolve_tickers(self) -> List[str]:
        if self.options.tickers:
            tickers = list(self.options.tickers)
        else:
            tickers = self._universe.list_tickers(self.options.market)
        if self.options.max_tickers is not None:
            tickers = tickers[: self.options.max_tickers]
        return tickers

    def run(self) -> ScreenResult:
        tickers = self.resolve_tickers()
        logger.info(
            "Compounding Machine (%s): universe size %d", self.options.market.upper(), len(tickers)
        )

        slots: List[Optional[Evaluated]] = [None] * len(tickers)
        self._completed = 0

        def process(ticker: str, index: int) -> None:
            try:
                slots[index] = self.evaluate_ticker(ticker)
            except Exception as exc:
                logger.error("%s: skipped after derivation error (%s)", ticker, exc)
            finally:
                self._report_progress(len(tickers))

        map_with_concurrency(tickers, self.options.concurrency, process)

        evaluated = [slot for slot in slots if slot is not None]
        qualified = [row for row, evaluation in evaluated if evaluation.passed]
        qualified.sort(key=lambda row: row.quality_score, reverse=True)

        return ScreenResult(
            market=self.options.market,
            scanned=len(tickers),
            qualified=len(qualified),
            filters=self.thresholds(),
            diagnostics=self._diagnostics(evaluated),
            results=qualified[: self.options.top_n],
        )

    def evaluate_ticker(self, ticker: str) -> Optional[Evaluated]:
        snapshot = self._fetcher.fetch(ticker)
        if snapshot is None:
            return None
        row = build_row(snapshot)
        return row, evaluate_filters(row, self.options)

    def thresholds(self) -> FilterThresholds:
        return FilterThresholds(
            growth_rule=GROWTH_RULE,
            min_roic_percent=self.options.min_roic,
            min_buyback_percent=self.options.min_buyback_percent,
            min_operating_margin_percent=self.options.min_operating_margin,
        )

    def _diagnostics(self, evaluated: List[Evaluated]) -> List[ScreenDiagnostic]:
        if not (self.options.show_rejected or self.options.tickers):
            return []
        return [
            ScreenDiagnostic(
                ticker=row.ticker,
                passed=evaluation.passed,
                checks=diagnostic_checks(row, evaluation),
            )
            for row, evaluation in evaluated
        ]

    def _report_progress(self, total: int) -> None:
        with self._progress_lock:
            self._completed += 1
            done = self._completed
        if done % PROGRESS_EVERY == 0 or done == total:
            logger.info("Progress: %d/%d", done, total)
