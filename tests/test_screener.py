import json
import unittest

from clients import UniverseError
from domain import ScreenerOptions
from main import build_parser, options_from_args
from services import CompoundingScreener
from utils import render_json, render_table

from snapshot_factory import compounder_snapshot, make_snapshot


class FakeFetcher:
    def __init__(self, snapshots) -> None:
        self.snapshots = snapshots
        self.fetched = []

    def fetch(self, ticker):
        self.fetched.append(ticker)
        return self.snapshots.get(ticker)


class FakeUniverse:
    def __init__(self, tickers=None, error=None) -> None:
        self.tickers = tickers or []
        self.error = error
        self.markets = []

    def list_tickers(self, market):
        self.markets.append(market)
        if self.error:
            raise self.error
        return list(self.tickers)


def sample_snapshots():
    return {
        "BEST": compounder_snapshot("BEST", operating_margins=0.35),
        "GOOD": compounder_snapshot("GOOD", operating_margins=0.25),
        "THIN": compounder_snapshot("THIN", operating_margins=0.05),
        "MIXED": make_snapshot("MIXED", revenue=[100, 110, 121, 133], net_income=[10, -5, 12, 15]),
    }


class TestCompoundingScreener(unittest.TestCase):
    def test_ranks_qualified_rows_by_score(self):
        universe = FakeUniverse(["THIN", "GOOD", "GONE", "BEST", "MIXED"])
        screener = CompoundingScreener(
            ScreenerOptions(concurrency=3), FakeFetcher(sample_snapshots()), universe
        )
        result = screener.run()

        self.assertEqual(universe.markets, ["us"])
        self.assertEqual(result.scanned, 5)
        self.assertEqual(result.qualified, 2)
        self.assertEqual([row.ticker for row in result.results], ["BEST", "GOOD"])
        self.assertGreater(result.results[0].quality_score, result.results[1].quality_score)
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(result.filters.min_roic_percent, 15.0)

    def test_top_n_and_max_tickers(self):
        fetcher = FakeFetcher(sample_snapshots())
        options = ScreenerOptions(top_n=1, max_tickers=2)
        result = CompoundingScreener(options, fetcher, FakeUniverse(["GOOD", "BEST", "THIN"])).run()

        self.assertEqual(sorted(fetcher.fetched), ["BEST", "GOOD"])
        self.assertEqual(result.scanned, 2)
        self.assertEqual(result.qualified, 2)
        self.assertEqual([row.ticker for row in result.results], ["BEST"])

    def test_explicit_tickers_collect_diagnostics(self):
        universe = FakeUniverse()
        options = ScreenerOptions(tickers="thin, best,GONE")
        result = CompoundingScreener(options, FakeFetcher(sample_snapshots()), universe).run()

        self.assertEqual(universe.markets, [])
        by_ticker = {diagnostic.ticker: diagnostic for diagnostic in result.diagnostics}
        self.assertEqual(sorted(by_ticker), ["BEST", "THIN"])
        self.assertTrue(by_ticker["BEST"].passed)
        thin = by_ticker["THIN"]
        self.assertFalse(thin.passed)
        self.assertFalse(thin.checks["operating_margin"]["pass"])
        self.assertAlmostEqual(thin.checks["operating_margin"]["got_percent"], 5.0)
        self.assertEqual(thin.checks["revenue"]["got"], "5/5")
        self.assertEqual(thin.checks["revenue"]["required"], "4/5")

    def test_show_rejected_keeps_failures(self):
        options = ScreenerOptions(show_rejected=True)
        result = CompoundingScreener(
            options, FakeFetcher(sample_snapshots()), FakeUniverse(["MIXED"])
        ).run()
        self.assertEqual(result.qualified, 0)
        self.assertEqual(result.diagnostics[0].ticker, "MIXED")
        self.assertEqual(result.diagnostics[0].checks["net_income"]["got"], "2/3")

    def test_derivation_errors_skip_the_ticker(self):
        class BrokenFetcher(FakeFetcher):
            def fetch(self, ticker):
                if ticker == "BROKEN":
                    raise RuntimeError("bad payload")
                return super().fetch(ticker)

        with self.assertLogs("services.screener", level="ERROR"):
            result = CompoundingScreener(
                ScreenerOptions(), BrokenFetcher(sample_snapshots()), FakeUniverse(["BROKEN", "BEST"])
            ).run()
        self.assertEqual([row.ticker for row in result.results], ["BEST"])

    def test_universe_failure_is_fatal(self):
        screener = CompoundingScreener(
            ScreenerOptions(market="bk"),
            FakeFetcher({}),
            FakeUniverse(error=UniverseError("no list")),
        )
        with self.assertRaises(UniverseError):
            screener.run()


class TestRendering(unittest.TestCase):
    def _result(self, **options):
        return CompoundingScreener(
            ScreenerOptions(**options),
            FakeFetcher(sample_snapshots()),
            FakeUniverse(["BEST", "THIN"]),
        ).run()

    def test_table_lists_qualified_rows(self):
        text = render_table(self._result())
        self.assertIn("Scanned: 2", text)
        self.assertIn("Qualified: 1", text)
        self.assertIn("BEST", text)
        self.assertNotIn("THIN", text)

    def test_table_explains_rejections(self):
        result = self._result(min_roic=99, show_rejected=True)
        text = render_table(result)
        self.assertIn("Diagnostics:", text)
        self.assertIn("ROIC 30.0% (need > 99%)", text)
        self.assertIn("Operating Margin 5.0% (need > 20%)", text)

    def test_json_payload(self):
        payload = json.loads(render_json(self._result()))
        self.assertEqual(payload["scanned"], 2)
        self.assertEqual(payload["results"][0]["ticker"], "BEST")
        self.assertIn("quality_score", payload["results"][0])
        self.assertEqual(payload["results"][0]["revenue_growth"]["intervals"], 5)


class TestCommandLine(unittest.TestCase):
    def test_arguments_map_onto_options(self):
        args = build_parser().parse_args(
            ["--tickers", "aapl,msft", "--min-op-margin", "25", "--format", "json", "--concurrency", "0"]
        )
        options = options_from_args(args)
        self.assertEqual(options.tickers, ["AAPL", "MSFT"])
        self.assertEqual(options.min_operating_margin, 25.0)
        self.assertEqual(options.output_format, "json")
        self.assertEqual(options.concurrency, 1)
        self.assertEqual(options.ttl_days, 7.0)


if __name__ == "__main__":
    unittest.main()
