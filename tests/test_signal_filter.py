import unittest
from hunt_tracker.core.reading import Reading
from hunt_tracker.core.session import TrustedState
from hunt_tracker.core.settings import AnalyzerSettings
from hunt_tracker.core.signal_filter import SignalFilter

class TestExpFilter(unittest.TestCase):
    def setUp(self):
        self.f = SignalFilter()

    def test_implausible_jump_is_carried_forward(self):
        value, rejected = self.f.filter_exp(2_500_000, 1_000_000)
        self.assertTrue(rejected)
        self.assertEqual(value, 1_000_000)

    def test_plausible_jump_is_accepted(self):
        value, rejected = self.f.filter_exp(1_900_000, 1_000_000)
        self.assertFalse(rejected)
        self.assertEqual(value, 1_900_000)

    def test_ratio_bounds_are_inclusive(self):
        self.assertFalse(self.f.filter_exp(2_000_000, 1_000_000)[1])
        self.assertFalse(self.f.filter_exp(500_000, 1_000_000)[1])
        self.assertTrue(self.f.filter_exp(499_999, 1_000_000)[1])

    def test_first_reading_and_missing_values(self):
        self.assertEqual(self.f.filter_exp(123, None), (123, False))
        self.assertEqual(self.f.filter_exp(None, 456), (456, False))
        # No ratio against zero
        self.assertEqual(self.f.filter_exp(10, 0), (10, False))

class TestPercentFilter(unittest.TestCase):
    def setUp(self):
        self.f = SignalFilter()

    def test_jump_over_limit_rejected(self):
        self.assertEqual(self.f.filter_percent(35.0, 20.0), (20.0, True))

    def test_jump_at_limit_accepted(self):
        self.assertEqual(self.f.filter_percent(30.0, 20.0), (30.0, False))

    def test_missing_values(self):
        self.assertEqual(self.f.filter_percent(None, 20.0), (20.0, False))
        self.assertEqual(self.f.filter_percent(12.5, None), (12.5, False))

    def test_percent_rejection_does_not_reject_exp(self):
        trusted = TrustedState(last_exp=1_000_000, last_percent=20.0)
        new, outcome = self.f.apply(Reading(1_050_000, 35.0, None), trusted)
        self.assertEqual(new.last_exp, 1_050_000)
        self.assertEqual(new.last_percent, 20.0)
        self.assertFalse(outcome.exp_rejected)
        self.assertTrue(outcome.percent_rejected)

class TestCurrencyFilter(unittest.TestCase):
    def setUp(self):
        self.f = SignalFilter()

    def feed(self, trusted, value, baseline=None, times=1):
        outcome = None
        for _ in range(times):
            trusted, outcome = self.f.apply(Reading(currency=value), trusted, baseline)
        return trusted, outcome

    def test_same_value_is_idempotent(self):
        trusted = TrustedState(last_currency=5000)
        trusted, _ = self.feed(trusted, 5000, times=10)
        self.assertEqual(trusted.last_currency, 5000)
        self.assertEqual(trusted.currency_reject_streak, 0)

    def test_zero_or_missing_reading_leaves_filter_untouched(self):
        trusted = TrustedState(last_currency=5000, currency_reject_streak=3)
        for value in (0, None):
            new, outcome = self.f.apply(Reading(currency=value), trusted)
            self.assertEqual(new.last_currency, 5000)
            self.assertEqual(new.currency_reject_streak, 3)
            self.assertFalse(outcome.currency_rejected)

    def test_first_currency_is_adopted(self):
        trusted, _ = self.feed(TrustedState(), 777)
        self.assertEqual(trusted.last_currency, 777)

    def test_short_dip_then_recovery_keeps_maximum(self):
        trusted = TrustedState(last_currency=10_000)
        trusted, outcome = self.feed(trusted, 2_000, times=4)
        self.assertTrue(outcome.currency_rejected)
        self.assertEqual(trusted.currency_reject_streak, 4)
        self.assertEqual(trusted.last_currency, 10_000)

        trusted, outcome = self.feed(trusted, 10_500)
        self.assertFalse(outcome.currency_rejected)
        self.assertEqual(trusted.last_currency, 10_500)
        self.assertEqual(trusted.currency_reject_streak, 0)

    def test_sustained_value_below_baseline_is_refused(self):
        trusted = TrustedState(last_currency=1_000_000)
        trusted, outcome = self.feed(trusted, 300_000, baseline=500_000, times=5)
        self.assertEqual(trusted.last_currency, 1_000_000)
        self.assertEqual(trusted.currency_reject_streak, 0)
        self.assertFalse(outcome.currency_unstuck)

    def test_sustained_value_above_baseline_unsticks_on_fifth_tick(self):
        trusted = TrustedState(last_currency=1_000_000)
        trusted, _ = self.feed(trusted, 600_000, baseline=500_000, times=4)
        self.assertEqual(trusted.last_currency, 1_000_000)

        trusted, outcome = self.feed(trusted, 600_000, baseline=500_000)
        self.assertTrue(outcome.currency_unstuck)
        self.assertEqual(trusted.last_currency, 600_000)
        self.assertEqual(trusted.currency_reject_streak, 0)

    def test_unstick_streak_is_configurable(self):
        f = SignalFilter(AnalyzerSettings(currency_unstick_streak=2))
        trusted = TrustedState(last_currency=9000)
        trusted, _ = f.apply(Reading(currency=8000), trusted)
        trusted, outcome = f.apply(Reading(currency=8000), trusted)
        self.assertTrue(outcome.currency_unstuck)
        self.assertEqual(trusted.last_currency, 8000)

if __name__ == '__main__':
    unittest.main()
