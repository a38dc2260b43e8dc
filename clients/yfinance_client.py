"""Thin wrapper around yfinance to ease testing and substitution."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol

import pandas as pd
import yfinance as yf


RawRow = Dict[str, Any]

_FREQUENCIES = {"annual": "yearly", "quarterly": "quarterly"}


class FundamentalDataSource(Protocol):
    def quote_summary(self, ticker: str) -> Dict[str, Any]: ...

    def fundamentals_time_series(
        self,
        ticker: str,
        start: Optional[date],
        frequency: str,
        statement: str,
    ) -> List[RawRow]: ...

    def daily_history(self, ticker: str, start: date, end: date) -> List[RawRow]: ...


def statement_rows(frame: pd.DataFrame | None, start: Optional[date] = None) -> List[RawRow]:
    """Turn a yfinance statement (line items x period columns) into one dict per period."""
    if frame is None or not isinstance(frame, pd.DataFrame) or frame.empty:
        return []
    rows: List[RawRow] = []
    for period, values in frame.to_dict().items():
        if start is not None:
            stamp = pd.Timestamp(period)
            if stamp.tzinfo is not None:
                stamp = stamp.tz_convert(None)
            if stamp < pd.Timestamp(start):
                continue
        row: RawRow = {"date": period}
        row.update({str(key): value for key, value in values.items()})
        rows.append(row)
    return rows


def history_rows(frame: pd.DataFrame | None) -> List[RawRow]:
    if frame is None or frame.empty or "Close" not in frame:
        return []
    dividends = frame["Dividends"] if "Dividends" in frame else pd.Series(0.0, index=frame.index)
    return [
        {"date": stamp, "close": close, "dividends": dividend}
        for stamp, close, dividend in zip(frame.index, frame["Close"], dividends)
    ]


class YFinanceClient:
    """Provide typed accessors for the yfinance data used in the pipeline."""

    def _ticker(self, symbol: str) -> yf.Ticker:
        return yf.Ticker(symbol)

    def quote_summary(self, ticker: str) -> Dict[str, Any]:
        info = self._ticker(ticker).info
        if not info:
            raise ValueError(f"{ticker}: empty quote summary")
        return {
            "operatingMargins": info.get("operatingMargins"),
            "dividendYield": info.get("dividendYield"),
            "sharesOutstanding": info.get("sharesOutstanding"),
            "regularMarketPrice": info.get("regularMarketPrice"),
            "currentPrice": info.get("currentPrice"),
            "marketCap": info.get("marketCap"),
        }

    def fundamentals_time_series(
        self,
        ticker: str,
        start: Optional[date],
        frequency: str,
        statement: str,
    ) -> List[RawRow]:
        freq = _FREQUENCIES[frequency]
        handle = self._ticker(ticker)
        if statement == "financials":
            frame = handle.get_income_stmt(pretty=False, freq=freq)
        elif statement == "balance-sheet":
            frame = handle.get_balance_sheet(pretty=False, freq=freq)
        elif statement == "cash-flow":
            frame = handle.get_cash_flow(pretty=False, freq=freq)
        else:
            raise ValueError(f"Unknown statement: {statement}")
        return statement_rows(frame, start)

    def daily_history(self, ticker: str, start: date, end: date | datetime) -> List[RawRow]:
        frame = self._ticker(ticker).history(
            start=start,
            end=end,
            interval="1d",
            auto_adjust=False,
            actions=True,
            raise_errors=True,
        )
        return history_rows(frame)
