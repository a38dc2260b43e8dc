"""Ticker universes for the supported markets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from constants import (
    MAX_SET_TICKER_LENGTH,
    SET_TICKER_FILE,
    SET_TICKER_SUFFIX,
    SP500_CSV_URL,
)


logger = logging.getLogger(__name__)


class UniverseError(RuntimeError):
    """Raised when a market's ticker list cannot be resolved."""


class TickerUniverseProvider:
    def __init__(
        self,
        sp500_source: str = SP500_CSV_URL,
        set_ticker_file: str | Path = SET_TICKER_FILE,
    ) -> None:
        self._sp500_source = sp500_source
        self._set_ticker_file = Path(set_ticker_file)

    def list_tickers(self, market: str) -> List[str]:
        if market == "us":
            return self.sp500_tickers()
        if market == "bk":
            return self.set_tickers()
        raise UniverseError(f"Unsupported market: {market!r}")

    def sp500_tickers(self) -> List[str]:
        try:
            frame = pd.read_csv(self._sp500_source)
        except Exception as exc:
            raise UniverseError(f"Failed to fetch S&P 500 data: {exc}") from exc
        if "Symbol" not in frame.columns:
            raise UniverseError("Symbol column not found in CSV")
        tickers = [str(symbol).strip() for symbol in frame["Symbol"].dropna()]
        tickers = [ticker for ticker in tickers if ticker]
        logger.debug("Loaded %d S&P 500 tickers", len(tickers))
        return tickers

    def set_tickers(self) -> List[str]:
        """Read the SET list; symbols sit on every other line, names in between."""
        if not self._set_ticker_file.exists():
            raise UniverseError(f"SET ticker file not found: {self._set_ticker_file}")
        with self._set_ticker_file.open(encoding="utf-8") as fh:
            lines = fh.read().split("\n")
        tickers = []
        for line in lines[::2]:
            symbol = line.strip()
            if symbol and len(symbol) <= MAX_SET_TICKER_LENGTH:
                tickers.append(f"{symbol}{SET_TICKER_SUFFIX}")
        return tickers
