"""
Unit tests for the monthly loan schedule.

Checks the per-period identities, terminal conditions (balance exactly 0,
balloon for interest-only), cumulative totals and agreement with the
closed-form balance factor.

Version: 0.1.0
Last Updated: 2026-10-18
Status: Active
"""

import unittest
import warnings

import numpy as np

from btc_powerlaw.loan_payments import ZeroRateWarning, monthly_payment, scheduled_balance_factor
from btc_powerlaw.loan_schedule import LoanSchedule, run_loan_schedule


# =============================================================================
# Test Parameters
# =============================================================================

DECIMAL_PLACES_FOR_ASSERTIONS: int = 8

SCENARIOS = [
    (50_000.0, 0.045, 120),
    (250_000.0, 0.0725, 360),
    (10_000.0, 0.12, 12),
    (1_000.0, 0.01, 1),
]


class TestAmortisingSchedule(unittest.TestCase):

    def test_shape(self):
        schedule = run_loan_schedule(50_000, 0.045, 120)
        self.assertIsInstance(schedule, LoanSchedule)
        self.assertEqual(len(schedule), 121)
        np.testing.assert_array_equal(schedule.period, np.arange(121))

    def test_period_zero_is_drawdown(self):
        schedule = run_loan_schedule(50_000, 0.045, 120)
        self.assertEqual(schedule.payment[0], 0.0)
        self.assertEqual(schedule.interest[0], 0.0)
        self.assertEqual(schedule.ending_balance[0], 50_000)
        self.assertEqual(schedule.cumulative_payments[0], 0.0)

    def test_identities(self):
        for principal, rate, n in SCENARIOS:
            with self.subTest(principal=principal, rate=rate, n=n):
                s = run_loan_schedule(principal, rate, n)
                np.testing.assert_allclose(s.payment[1:], s.interest[1:] + s.principal[1:])
                np.testing.assert_allclose(s.ending_balance[1:], s.beginning_balance[1:] - s.principal[1:])
                np.testing.assert_allclose(s.beginning_balance[1:], s.ending_balance[:-1])
                np.testing.assert_allclose(s.interest[1:], s.beginning_balance[1:] * rate / 12)

    def test_final_balance_exactly_zero(self):
        for principal, rate, n in SCENARIOS:
            with self.subTest(principal=principal, rate=rate, n=n):
                self.assertEqual(run_loan_schedule(principal, rate, n).ending_balance[-1], 0.0)

    def test_level_payment(self):
        for principal, rate, n in SCENARIOS:
            with self.subTest(principal=principal, rate=rate, n=n):
                s = run_loan_schedule(principal, rate, n)
                level = monthly_payment(principal, rate, n)
                self.assertEqual(s.level_payment, level)
                np.testing.assert_allclose(s.payment[1:], level, rtol=1e-9)

    def test_principal_repaid(self):
        for principal, rate, n in SCENARIOS:
            with self.subTest(principal=principal, rate=rate, n=n):
                s = run_loan_schedule(principal, rate, n)
                self.assertAlmostEqual(s.principal.sum(), principal, places=DECIMAL_PLACES_FOR_ASSERTIONS)
                self.assertAlmostEqual(s.cumulative_payments[-1] - s.cumulative_interest[-1], principal,
                                       places=6)

    def test_balance_non_increasing(self):
        s = run_loan_schedule(250_000, 0.0725, 360)
        self.assertTrue(np.all(np.diff(s.ending_balance) <= 0))

    def test_cumulative_totals_monotonic(self):
        s = run_loan_schedule(250_000, 0.0725, 360)
        self.assertTrue(np.all(np.diff(s.cumulative_payments) >= 0))
        self.assertTrue(np.all(np.diff(s.cumulative_interest) >= 0))
        np.testing.assert_allclose(s.cumulative_payments, np.cumsum(s.payment))

    def test_matches_balance_factor(self):
        principal, rate, n = 50_000.0, 0.045, 120
        s = run_loan_schedule(principal, rate, n)
        for k in (1, 30, 60, 119):
            with self.subTest(k=k):
                self.assertAlmostEqual(s.ending_balance[k] / principal, scheduled_balance_factor(rate, n, k),
                                       places=DECIMAL_PLACES_FOR_ASSERTIONS)


class TestInterestOnlySchedule(unittest.TestCase):

    def test_balance_constant_until_balloon(self):
        s = run_loan_schedule(50_000, 0.045, 120, interest_only=True)
        np.testing.assert_array_equal(s.ending_balance[:120], 50_000)
        self.assertEqual(s.ending_balance[120], 0.0)

    def test_interest_payments_then_balloon(self):
        s = run_loan_schedule(50_000, 0.045, 120, interest_only=True)
        np.testing.assert_allclose(s.payment[1:120], 187.5)
        self.assertAlmostEqual(s.payment[120], 50_000 + 187.5, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertEqual(s.level_payment, 187.5)

    def test_totals(self):
        s = run_loan_schedule(50_000, 0.045, 120, interest_only=True)
        self.assertAlmostEqual(s.cumulative_interest[-1], 187.5 * 120, places=6)
        self.assertAlmostEqual(s.cumulative_payments[-1], 50_000 + 187.5 * 120, places=6)


class TestZeroRateSchedule(unittest.TestCase):

    def test_amortising_straight_line(self):
        with self.assertWarns(ZeroRateWarning):
            s = run_loan_schedule(12_000, 0.0, 12)
        np.testing.assert_allclose(s.payment[1:], 1_000.0)
        np.testing.assert_allclose(s.ending_balance, 12_000 - 1_000.0 * np.arange(13), atol=1e-9)
        self.assertEqual(s.ending_balance[-1], 0.0)
        self.assertEqual(s.cumulative_interest[-1], 0.0)

    def test_interest_only_balloon(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", ZeroRateWarning)
            s = run_loan_schedule(12_000, 0.0, 12, interest_only=True)
        np.testing.assert_array_equal(s.payment[1:12], 0.0)
        self.assertEqual(s.payment[12], 12_000)
        self.assertEqual(s.cumulative_payments[-1], 12_000)


if __name__ == '__main__':
    unittest.main()
