"""External data sources."""

from .universe import TickerUniverseProvider, UniverseError
from .yfinance_client import FundamentalDataSource, YFinanceClient

__all__ = [
    "FundamentalDataSource",
    "TickerUniverseProvider",
    "UniverseError",
    "YFinanceClient",
]
