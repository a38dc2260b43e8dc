import unittest

from domain import AnnualBalanceSheetPoint, AnnualCashFlowPoint, GrowthStats, ScreenerOptions
from services import ValuationEngine, build_row, compute_quality_score, evaluate_filters, growth_stats
from services.filters import required_positive_intervals

from snapshot_factory import compounder_snapshot, make_snapshot


class TestGrowthStats(unittest.TestCase):
    def test_short_series_has_no_intervals(self):
        for values in ([], [42.0]):
            stats = growth_stats(values)
            self.assertEqual(stats.intervals, 0)
            self.assertEqual(stats.positive_count, 0)
            self.assertIsNone(stats.cagr_percent)

    def test_strictly_increasing_series(self):
        stats = growth_stats([100.0, 110.0, 121.0, 133.1])
        self.assertEqual(stats.positive_count, 3)
        self.assertEqual(stats.intervals, 3)
        self.assertAlmostEqual(stats.cagr_percent, 10.0, places=6)

    def test_flat_years_are_not_positive(self):
        stats = growth_stats([5.0, 5.0, 6.0])
        self.assertEqual(stats.positive_count, 1)

    def test_cagr_requires_positive_endpoints(self):
        self.assertIsNone(growth_stats([-10.0, 5.0, 20.0]).cagr_percent)
        self.assertIsNone(growth_stats([10.0, 5.0, -1.0]).cagr_percent)


class TestValuationEngine(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = ValuationEngine()

    def test_fcf_capex_sign_conventions_agree(self):
        snapshot = make_snapshot()
        snapshot.annual_cash_flow = [
            AnnualCashFlowPoint(date="2022-12-31", operating_cash_flow=200, capital_expenditure=-50),
            AnnualCashFlowPoint(date="2023-12-31", operating_cash_flow=200, capital_expenditure=50),
        ]
        self.assertEqual(self.engine.fcf_series(snapshot), [150, 150])

    def test_fcf_prefers_reported_value_and_skips_incomplete_rows(self):
        snapshot = make_snapshot()
        snapshot.annual_cash_flow = [
            AnnualCashFlowPoint(date="2021-12-31", operating_cash_flow=200),
            AnnualCashFlowPoint(
                date="2022-12-31",
                operating_cash_flow=200,
                capital_expenditure=-50,
                free_cash_flow=120,
            ),
        ]
        self.assertEqual(self.engine.fcf_series(snapshot), [120])

    def test_roic_uses_fallback_chains(self):
        snapshot = make_snapshot(net_income=[20, 24])
        snapshot.annual_balance_sheet = [
            AnnualBalanceSheetPoint(
                date="2024-12-31",
                stockholders_equity=100,
                long_term_debt=40,
                long_term_debt_and_capital_lease_obligation=50,
                cash_and_cash_equivalents=10,
                cash_cash_equivalents_and_short_term_investments=30,
            )
        ]
        self.assertAlmostEqual(self.engine.roic_percent(snapshot), 24 / 120 * 100)

        snapshot.annual_balance_sheet = [
            AnnualBalanceSheetPoint(date="2024-12-31", stockholders_equity=100, total_debt=20)
        ]
        self.assertAlmostEqual(self.engine.roic_percent(snapshot), 20.0)

    def test_roic_undefined_without_equity_or_capital(self):
        snapshot = make_snapshot(net_income=[10], long_term_debt=50, cash=5)
        self.assertIsNone(self.engine.roic_percent(snapshot))

        snapshot = make_snapshot(net_income=[10], equity=10, cash=50)
        self.assertIsNone(self.engine.roic_percent(snapshot))

    def test_share_change_prefers_quarterly_counts(self):
        quarterly = [1000.0 - 5 * index for index in range(13)]
        snapshot = make_snapshot(quarterly_shares=quarterly, diluted_shares=[100, 100, 100, 200])
        self.assertAlmostEqual(self.engine.shares_change_3y_percent(snapshot), (940 / 1000 - 1) * 100)

    def test_share_change_falls_back_to_annual(self):
        snapshot = make_snapshot(quarterly_shares=[1000.0] * 12, diluted_shares=[100, 98, 96, 95])
        self.assertAlmostEqual(self.engine.shares_change_3y_percent(snapshot), -5.0)

    def test_share_change_undefined_with_short_history(self):
        snapshot = make_snapshot(quarterly_shares=[1000.0] * 12, diluted_shares=[100, 98, 96])
        self.assertIsNone(self.engine.shares_change_3y_percent(snapshot))

    def test_dcf_growth_is_clamped(self):
        self.assertAlmostEqual(ValuationEngine.dcf_growth_rate([100, 150, 225]), 0.20)
        self.assertAlmostEqual(ValuationEngine.dcf_growth_rate([100, 70, 49]), -0.05)
        self.assertAlmostEqual(ValuationEngine.dcf_growth_rate([-10, 100]), 0.04)

    def test_dcf_intrinsic_value(self):
        snapshot = make_snapshot(shares_outstanding=10, current_price=50)
        result = self.engine.dcf(snapshot, [-10, 100])

        growth, rate, terminal = 0.04, 0.10, 0.025
        pv, projected = 0.0, 100.0
        for year in range(1, 11):
            projected *= 1 + growth
            pv += projected / (1 + rate) ** year
        terminal_value = projected * (1 + terminal) / (rate - terminal) / (1 + rate) ** 10
        expected = (pv + terminal_value) / 10

        self.assertAlmostEqual(result.intrinsic_value_per_share, expected)
        self.assertAlmostEqual(result.upside_percent, (expected / 50 - 1) * 100)

    def test_dcf_unavailable_without_inputs(self):
        snapshot = make_snapshot(shares_outstanding=10, current_price=50)
        self.assertIsNone(self.engine.dcf(snapshot, [100]).intrinsic_value_per_share)
        self.assertIsNone(self.engine.dcf(snapshot, [100, -5]).intrinsic_value_per_share)
        no_shares = make_snapshot(current_price=50)
        self.assertIsNone(self.engine.dcf(no_shares, [100, 110]).intrinsic_value_per_share)

    def test_dcf_uses_latest_quarterly_shares_and_skips_upside_without_price(self):
        snapshot = make_snapshot(quarterly_shares=[20.0, 10.0])
        result = self.engine.dcf(snapshot, [100, 110])
        self.assertIsNotNone(result.intrinsic_value_per_share)
        self.assertIsNone(result.upside_percent)

    def test_percent_conversions(self):
        snapshot = make_snapshot(operating_margins=0.31, dividend_yield=2.5)
        self.assertAlmostEqual(self.engine.operating_margin_percent(snapshot), 31.0)
        self.assertAlmostEqual(self.engine.yield_metrics(snapshot).current_yield_percent, 2.5)


class TestQualityScore(unittest.TestCase):
    def test_full_marks(self):
        full = GrowthStats(positive_count=5, intervals=5)
        score = compute_quality_score(
            full,
            full,
            full,
            roic_percent=30,
            latest_fcf=10,
            fcf_growth_percent=20,
            shares_change_3y_percent=-10,
            operating_margin_percent=35,
        )
        self.assertEqual(score, 100)

    def test_missing_inputs_floor_at_one(self):
        empty = GrowthStats()
        self.assertEqual(compute_quality_score(empty, empty, empty), 1)

    def test_partial_credit(self):
        score = compute_quality_score(
            GrowthStats(positive_count=3, intervals=3),
            GrowthStats(positive_count=2, intervals=3),
            GrowthStats(),
            roic_percent=15,
            operating_margin_percent=20,
            shares_change_3y_percent=4,
        )
        # 20 + 13.33 + 10 + 5, share issuance earns nothing
        self.assertEqual(score, 48)


class TestFilters(unittest.TestCase):
    def setUp(self) -> None:
        self.options = ScreenerOptions()

    def test_compounder_passes(self):
        evaluation = evaluate_filters(build_row(compounder_snapshot()), self.options)
        self.assertTrue(evaluation.passed)

    def test_threshold_boundaries(self):
        row = build_row(compounder_snapshot())
        row.roic_percent = 15.0
        row.shares_change_3y_percent = -2.0
        row.operating_margin_percent = 20.0
        evaluation = evaluate_filters(row, self.options)
        self.assertFalse(evaluation.roic_pass)
        self.assertTrue(evaluation.buyback_pass)
        self.assertFalse(evaluation.margin_pass)
        self.assertFalse(evaluation.passed)

    def test_buyback_threshold_sign_is_ignored(self):
        row = build_row(compounder_snapshot())
        row.shares_change_3y_percent = -1.0
        options = ScreenerOptions(min_buyback_percent=-2)
        self.assertFalse(evaluate_filters(row, options).buyback_pass)

    def test_missing_values_fail(self):
        row = build_row(make_snapshot(revenue=[1, 2, 3, 4], net_income=[1, 2, 3, 4]))
        evaluation = evaluate_filters(row, self.options)
        self.assertTrue(evaluation.revenue_pass)
        self.assertFalse(evaluation.roic_pass)
        self.assertFalse(evaluation.buyback_pass)
        self.assertFalse(evaluation.margin_pass)

    def test_required_positive_intervals(self):
        self.assertEqual(required_positive_intervals(0), 1)
        self.assertEqual(required_positive_intervals(3), 2)
        self.assertEqual(required_positive_intervals(5), 4)

    def test_growth_needs_three_intervals(self):
        row = build_row(make_snapshot(revenue=[1, 2, 3], net_income=[1, 2, 3]))
        evaluation = evaluate_filters(row, self.options)
        self.assertFalse(evaluation.revenue_pass)
        self.assertFalse(evaluation.net_income_pass)

    def test_mixed_net_income_scenario(self):
        row = build_row(make_snapshot(revenue=[100, 110, 121, 133], net_income=[10, -5, 12, 15]))
        self.assertEqual((row.revenue_growth.positive_count, row.revenue_growth.intervals), (3, 3))
        self.assertEqual((row.net_income_growth.positive_count, row.net_income_growth.intervals), (2, 3))

        evaluation = evaluate_filters(row, self.options)
        self.assertEqual(evaluation.revenue_required, 2)
        self.assertEqual(evaluation.net_income_required, 2)
        self.assertTrue(evaluation.revenue_pass)


class TestBuildRow(unittest.TestCase):
    def test_compounder_row(self):
        row = build_row(compounder_snapshot())
        self.assertEqual(row.ticker, "GOOD")
        self.assertEqual(row.revenue_growth.positive_count, 5)
        self.assertAlmostEqual(row.roic_percent, 30.0)
        self.assertAlmostEqual(row.latest_fcf, 172.8)
        self.assertAlmostEqual(row.fcf_growth_percent, 20.0)
        self.assertAlmostEqual(row.operating_margin_percent, 35.0)
        self.assertEqual(row.quality_score, 97)
        self.assertIsNotNone(row.dcf_intrinsic_value_per_share)

    def test_growth_windows(self):
        row = build_row(make_snapshot(revenue=[-1, 1, 2, 3, 4, 5, 6, 7], net_income=[1] * 8))
        # negative revenue is dropped, then only the last six points count
        self.assertEqual(row.revenue_growth.intervals, 5)
        self.assertEqual(row.net_income_growth.positive_count, 0)

    def test_eps_falls_back_to_basic(self):
        snapshot = make_snapshot(revenue=[1, 2, 3])
        for point, basic in zip(snapshot.annual_financials, [1.0, 2.0, 3.0]):
            point.basic_eps = basic
        row = build_row(snapshot)
        self.assertEqual(row.eps_growth.positive_count, 2)


if __name__ == "__main__":
    unittest.main()
