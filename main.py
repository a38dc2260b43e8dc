# compounding_machine.py
# Screen a market for steady compounders: consistent revenue/earnings growth,
# high ROIC, buybacks and fat operating margins, ranked by a quality score.

from __future__ import annotations

import argparse
import logging
import sys
from typing import List

from pydantic import ValidationError

from clients import TickerUniverseProvider, UniverseError
from constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_DB_PATH,
    DEFAULT_MIN_BUYBACK_PERCENT,
    DEFAULT_MIN_OPERATING_MARGIN,
    DEFAULT_MIN_ROIC,
    DEFAULT_TOP_N,
    DEFAULT_TTL_DAYS,
    SET_TICKER_FILE,
)
from domain import ScreenerOptions, ScreenResult
from persistence import SnapshotCache
from services import CachedSnapshotFetcher, CompoundingScreener, RetryingFetcher
from utils import render_json, render_table


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Compounding machine stock screener")
    p.add_argument("--market", choices=["us", "bk"], default="us", help="Universe: us (S&P 500) or bk (SET).")
    p.add_argument("--tickers", type=str, help="Comma separated tickers; overrides --market universe.")
    p.add_argument("--max-tickers", type=int, help="Only scan the first N tickers of the universe.")
    p.add_argument("--top-n", type=int, default=DEFAULT_TOP_N, help=f"Rows to show (default: {DEFAULT_TOP_N}).")
    p.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Tickers fetched in parallel (default: {DEFAULT_CONCURRENCY}).",
    )
    p.add_argument("--format", dest="output_format", choices=["text", "json"], default="text")
    p.add_argument(
        "--db-path",
        type=str,
        default=DEFAULT_DB_PATH,
        help=f"SQLite snapshot cache (default: {DEFAULT_DB_PATH}).",
    )
    p.add_argument(
        "--ttl-days",
        type=float,
        default=DEFAULT_TTL_DAYS,
        help=f"Refetch cached snapshots older than this (default: {DEFAULT_TTL_DAYS:g}).",
    )
    p.add_argument("--min-roic", type=float, default=DEFAULT_MIN_ROIC, help="ROIC %% must exceed this.")
    p.add_argument(
        "--min-op-margin",
        dest="min_operating_margin",
        type=float,
        default=DEFAULT_MIN_OPERATING_MARGIN,
        help="Operating margin %% must exceed this.",
    )
    p.add_argument(
        "--min-buyback",
        dest="min_buyback_percent",
        type=float,
        default=DEFAULT_MIN_BUYBACK_PERCENT,
        help="Shares must have shrunk by at least this %% over 3 years.",
    )
    p.add_argument("--show-rejected", action="store_true", help="List why each ticker failed.")
    p.add_argument("--set-file", type=str, default=SET_TICKER_FILE, help="SET ticker list for --market bk.")
    p.add_argument(
        "--log-level",
        type=str,
        help="Logging level (default: INFO for text output, WARNING for JSON).",
    )
    return p


def options_from_args(args: argparse.Namespace) -> ScreenerOptions:
    return ScreenerOptions(
        market=args.market,
        tickers=args.tickers,
        max_tickers=args.max_tickers,
        top_n=args.top_n,
        concurrency=args.concurrency,
        output_format=args.output_format,
        db_path=args.db_path,
        ttl_days=args.ttl_days,
        min_roic=args.min_roic,
        min_operating_margin=args.min_operating_margin,
        min_buyback_percent=args.min_buyback_percent,
        show_rejected=args.show_rejected,
    )


def run_screen(options: ScreenerOptions, universe: TickerUniverseProvider) -> ScreenResult:
    with SnapshotCache(options.db_path, options.ttl_days) as cache:
        fetcher = CachedSnapshotFetcher(cache, RetryingFetcher())
        return CompoundingScreener(options, fetcher, universe).run()


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    default_level = "WARNING" if args.output_format == "json" else "INFO"
    logging.basicConfig(
        level=(args.log_level or default_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # yfinance is noisy about missing statement rows.
    logging.getLogger("yfinance").setLevel(logging.CRITICAL)

    try:
        options = options_from_args(args)
        result = run_screen(options, TickerUniverseProvider(set_ticker_file=args.set_file))
    except (UniverseError, ValidationError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    if options.output_format == "json":
        print(render_json(result))
    else:
        print(render_table(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
