"""
Test Suite Utilities for the power law and equity loan tests

Provides seeded generators for loan parameters and synthetic price
histories with a known trend and deviation.

Version: 0.1.0
Last Updated: 2026-10-18
Status: Active
"""

from __future__ import annotations

import datetime as dt

import numpy as np

from btc_powerlaw.equity_loan import LoanParams
from btc_powerlaw.scenarios import SCENARIO_MODES
from btc_powerlaw.trend_models import (
    HistoricalSeries,
    TrendModel,
    trend_price,
)


# =============================================================================
# Random Seed for Reproducibility
# =============================================================================

RANDOM_SEED = 42

# Fixed simulation "now" so results do not depend on the wall clock
AS_OF = dt.datetime(2025, 1, 10, tzinfo=dt.timezone.utc)


def get_random_state(seed: int = RANDOM_SEED) -> np.random.RandomState:
    """Get a reproducible random state."""
    return np.random.RandomState(seed)


# =============================================================================
# Random Loan Generator
# =============================================================================

def generate_random_loan_params(rng: np.random.RandomState) -> LoanParams:
    """Generate LoanParams with realistic, valid values."""
    home_value = rng.uniform(200_000, 1_500_000)
    return LoanParams(
        loan_amount=round(rng.uniform(5_000, 250_000), 2),
        duration_months=int(rng.choice([12, 36, 60, 120, 180, 240, 360])),
        annual_rate=rng.uniform(0.0, 0.12),
        interest_only=bool(rng.random() < 0.3),
        home_value=home_value,
        mortgage_balance=home_value * rng.uniform(0.0, 0.7),
        buy_now=True,
        model=TrendModel(str(rng.choice([m.value for m in TrendModel]))),
        sigma=rng.uniform(0.1, 0.5),
        scenario_mode=SCENARIO_MODES[rng.randint(len(SCENARIO_MODES))],
        initial_k=None if rng.random() < 0.3 else rng.uniform(-2.5, 2.5),
    )


def generate_random_loan_params_list(count: int = 25, seed: int = RANDOM_SEED) -> list[LoanParams]:
    """Generate a list of random LoanParams."""
    rng = get_random_state(seed)
    return [generate_random_loan_params(rng) for _ in range(count)]


# =============================================================================
# Synthetic Price Histories
# =============================================================================

def weekly_dates(start: str = "2013-01-06", weeks: int = 520) -> np.ndarray:
    """Weekly datetime64[us] dates starting at start."""
    return np.datetime64(start, "us") + np.arange(weeks) * np.timedelta64(7, "D")


def generate_price_history(
        model: TrendModel,
        residuals: np.ndarray,
        start: str = "2013-01-06",
) -> HistoricalSeries:
    """Weekly prices with exactly the given log10 deviations from the trend."""
    dates = weekly_dates(start, len(residuals))
    prices = np.asarray(trend_price(model, dates)) * 10.0 ** np.asarray(residuals, dtype=float)
    return HistoricalSeries(dates=dates, prices=prices)


def generate_noisy_history(
        model: TrendModel,
        sigma: float,
        weeks: int = 520,
        seed: int = RANDOM_SEED,
) -> HistoricalSeries:
    """Weekly prices scattered around the trend with normal log10 noise."""
    rng = get_random_state(seed)
    return generate_price_history(model, rng.normal(0.0, sigma, weeks))
