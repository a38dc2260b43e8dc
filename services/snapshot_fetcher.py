"""Fetch ticker snapshots with retries, backoff and a cache in front."""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import pandas as pd

from clients import FundamentalDataSource, YFinanceClient
from constants import (
    HISTORY_YEARS,
    MAX_RETRIES,
    REQUEST_DELAY_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_JITTER_SECONDS,
)
from domain import TickerSnapshot
from persistence import SnapshotStore
from persistence.snapshot_cache import utc_now

from .metrics_deriver import build_snapshot


logger = logging.getLogger(__name__)


class RetryingFetcher:
    """Download and normalize one ticker, retrying the whole batch on failure.

    ``fetch`` never raises for transport problems: once ``max_retries``
    additional attempts are spent it logs the last error and returns None.
    """

    def __init__(
        self,
        source: FundamentalDataSource | None = None,
        *,
        base_delay: float = REQUEST_DELAY_SECONDS,
        jitter_max: float = RETRY_JITTER_SECONDS,
        max_retries: int = MAX_RETRIES,
        request_timeout: float | None = REQUEST_TIMEOUT_SECONDS,
        history_years: int = HISTORY_YEARS,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[float, float], float] = random.uniform,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._source = source if source is not None else YFinanceClient()
        self.base_delay = base_delay
        self.jitter_max = jitter_max
        self.max_retries = max(0, max_retries)
        self.request_timeout = request_timeout
        self.history_years = history_years
        self._sleep = sleep
        self._jitter = jitter
        self._clock = clock

    def backoff_delay(self, attempt: int) -> float:
        return self.base_delay * 2**attempt + self._jitter(0, self.jitter_max)

    def fetch(self, ticker: str) -> Optional[TickerSnapshot]:
        attempt = 0
        while True:
            try:
                return self._fetch_once(ticker)
            except Exception as exc:
                if attempt >= self.max_retries:
                    logger.error("%s: failed after retries (%s)", ticker, exc)
                    return None
                delay = self.backoff_delay(attempt)
                logger.debug(
                    "%s: attempt %d failed (%s); retrying in %.2fs", ticker, attempt + 1, exc, delay
                )
                self._sleep(delay)
                attempt += 1

    def _requests(self, ticker: str) -> Dict[str, Callable[[], Any]]:
        now = self._clock()
        start = (pd.Timestamp(now.date()) - pd.DateOffset(years=self.history_years)).date()
        end = now.date() + timedelta(days=1)
        source = self._source
        return {
            "quote": lambda: source.quote_summary(ticker),
            "annual_financials": lambda: source.fundamentals_time_series(
                ticker, start, "annual", "financials"
            ),
            "annual_balance_sheet": lambda: source.fundamentals_time_series(
                ticker, start, "annual", "balance-sheet"
            ),
            "annual_cash_flow": lambda: source.fundamentals_time_series(
                ticker, start, "annual", "cash-flow"
            ),
            "quarterly_balance_sheet": lambda: source.fundamentals_time_series(
                ticker, start, "quarterly", "balance-sheet"
            ),
            "history": lambda: source.daily_history(ticker, start, end),
        }

    def _fetch_once(self, ticker: str) -> TickerSnapshot:
        requests = self._requests(ticker)
        self._sleep(self.base_delay)

        pool = ThreadPoolExecutor(max_workers=len(requests), thread_name_prefix=f"fetch-{ticker}")
        try:
            futures = {name: pool.submit(call) for name, call in requests.items()}
            done, not_done = wait(futures.values(), timeout=self.request_timeout)
            for future in done:
                error = future.exception()
                if error is not None:
                    raise error
            if not_done:
                raise TimeoutError(
                    f"{len(not_done)} request(s) still pending after {self.request_timeout}s"
                )
            results = {name: future.result() for name, future in futures.items()}
        finally:
            # A hung request must not pin this worker; abandon it.
            pool.shutdown(wait=False, cancel_futures=True)

        return build_snapshot(
            ticker,
            results["quote"],
            results["annual_financials"],
            results["annual_balance_sheet"],
            results["annual_cash_flow"],
            results["quarterly_balance_sheet"],
            results["history"],
        )


class CachedSnapshotFetcher:
    """Serve fresh snapshots from the store and fetch the rest."""

    def __init__(self, cache: SnapshotStore, fetcher: RetryingFetcher) -> None:
        self._cache = cache
        self._fetcher = fetcher

    def fetch(self, ticker: str) -> Optional[TickerSnapshot]:
        cached = self._cache.get(ticker)
        if cached is not None:
            return cached
        snapshot = self._fetcher.fetch(ticker)
        if snapshot is not None:
            self._cache.set(ticker, snapshot)
        return snapshot

    def close(self) -> None:
        self._cache.close()
