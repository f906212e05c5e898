import unittest
from hunt_tracker.core.rates import RateCalculator, MS_PER_HOUR
from hunt_tracker.core.session import Baseline, TrustedState

class TestRateCalculator(unittest.TestCase):
    def test_exp_metrics(self):
        baseline = Baseline(exp_value=1000, percent=10.0, currency=None, started_at=0)
        trusted = TrustedState(last_exp=1100, last_percent=11.0)
        snap = RateCalculator.compute(baseline, trusted, 60_000)

        self.assertEqual(snap.exp.change, 100)
        self.assertEqual(snap.exp.per_hour, 6000)
        self.assertAlmostEqual(snap.exp.percent_change, 1.0)
        self.assertEqual(snap.exp.total_required, 10000)
        self.assertEqual(snap.exp.remaining, 8900)
        self.assertAlmostEqual(snap.exp.time_to_level, 8900 / 6000 * MS_PER_HOUR)
        self.assertEqual(snap.elapsed, 60_000)

    def test_currency_metrics(self):
        baseline = Baseline(currency=50_000, started_at=0)
        trusted = TrustedState(last_currency=80_000)
        snap = RateCalculator.compute(baseline, trusted, MS_PER_HOUR // 2)
        self.assertEqual(snap.currency.current, 80_000)
        self.assertEqual(snap.currency.change, 30_000)
        self.assertEqual(snap.currency.per_hour, 60_000)

    def test_no_elapsed_time_leaves_rates_unset(self):
        baseline = Baseline(exp_value=1000, percent=10.0, started_at=0)
        trusted = TrustedState(last_exp=1000, last_percent=10.0)
        snap = RateCalculator.compute(baseline, trusted, 0)
        self.assertEqual(snap.exp.change, 0)
        self.assertIsNone(snap.exp.per_hour)
        self.assertIsNone(snap.exp.time_to_level)

    def test_eta_unset_when_rate_not_positive(self):
        baseline = Baseline(exp_value=1000, percent=10.0, started_at=0)
        losing = TrustedState(last_exp=900, last_percent=9.0)
        snap = RateCalculator.compute(baseline, losing, 60_000)
        self.assertLess(snap.exp.per_hour, 0)
        self.assertIsNone(snap.exp.time_to_level)

        flat = TrustedState(last_exp=1000, last_percent=10.0)
        snap = RateCalculator.compute(baseline, flat, 60_000)
        self.assertEqual(snap.exp.per_hour, 0)
        self.assertIsNone(snap.exp.time_to_level)

    def test_zero_percent_leaves_requirement_unset(self):
        baseline = Baseline(exp_value=0, percent=0.0, started_at=0)
        trusted = TrustedState(last_exp=0, last_percent=0.0)
        snap = RateCalculator.compute(baseline, trusted, 60_000)
        self.assertIsNone(snap.exp.total_required)
        self.assertIsNone(snap.exp.remaining)

    def test_missing_inputs_never_raise(self):
        snap = RateCalculator.compute(Baseline(), TrustedState(), 60_000)
        self.assertIsNone(snap.exp.current)
        self.assertIsNone(snap.exp.change)
        self.assertIsNone(snap.currency.change)
        self.assertFalse(snap.is_level_up)

    def test_non_finite_inputs_give_no_value(self):
        self.assertIsNone(RateCalculator.total_required(1000, float("nan")))
        self.assertIsNone(RateCalculator.total_required(float("inf"), 10.0))
        self.assertIsNone(RateCalculator.per_hour(float("nan"), 60_000))

    def test_negative_remaining_gives_no_eta(self):
        self.assertIsNone(RateCalculator.time_to_level(-5, 100))

if __name__ == '__main__':
    unittest.main()
