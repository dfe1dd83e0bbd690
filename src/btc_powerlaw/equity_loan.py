# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
"""
Home equity loan to BTC simulator.

A homeowner borrows against their home, buys BTC with the loan, and repays
the loan monthly. The simulator projects the BTC price with a trend model
and a scenario, and tracks the loan, the BTC position and the combined
loan-to-value of the home month by month.

All functions are pure: the same (params, live_price, as_of) always give the
same result. Inputs are not validated here; callers that accept user input
should run validate_loan_params first.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import warnings
from dataclasses import dataclass, replace

import numpy as np
from scipy.optimize import brentq

from btc_powerlaw.loan_payments import ZeroRateWarning, monthly_payment
from btc_powerlaw.loan_schedule import run_loan_schedule
from btc_powerlaw.scenarios import (
    SCENARIO_MODES,
    ScenarioMode,
    resolve_scenario_k,
    scenario_label,
    scenario_price,
)
from btc_powerlaw.trend_models import DAYS_PER_YEAR, TrendModel, days_since_genesis, trend_price

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Combined LTV above which lenders typically refuse or reprice a home equity loan
LTV_WARNING_THRESHOLD = 0.80

# Day of the month every simulated month is priced on
_MID_MONTH = 15


# =============================================================================
# Inputs
# =============================================================================

@dataclass(frozen=True)
class LoanParams:
    """
    Home equity loan and BTC purchase assumptions.

    Rate convention: annual_rate is a decimal (0.045 for 4.5%).

    Purchase timing:
        - buy_now with a live price: buy at the live price
        - future_buy_year/future_buy_month set: buy on the 15th of that month
          at the scenario price
        - otherwise: buy at the trend price of the as-of date
    """
    loan_amount: float = 50_000.0
    duration_months: int = 120
    annual_rate: float = 0.045
    interest_only: bool = False

    home_value: float = 500_000.0
    mortgage_balance: float = 300_000.0

    buy_now: bool = True
    future_buy_year: int | None = None
    future_buy_month: int | None = None    # 1-12

    model: TrendModel = TrendModel.SANTOSTASI
    sigma: float = 0.3
    scenario_mode: ScenarioMode = ScenarioMode.CYCLICAL
    initial_k: float | None = None


def validate_loan_params(
        params: LoanParams,
        as_of: dt.date | dt.datetime | None = None,
) -> None:
    """
    Fail fast on malformed LoanParams.

    The simulator itself never validates; this is for callers that build
    LoanParams from user input. as_of is the simulation "now" (defaults to
    the current UTC time); future purchases must not fall in an earlier month.

    Raises:
        ValueError: If a numeric field is non-finite
        ValueError: If loan_amount or duration_months is not positive
        ValueError: If annual_rate, home_value or mortgage_balance is negative
        ValueError: If sigma is not positive
        ValueError: If only one of future_buy_year/future_buy_month is set
        ValueError: If future_buy_month is outside 1-12
        ValueError: If the future purchase month is before the as_of month
        ValueError: If model or scenario_mode is unknown
    """
    numeric_fields = {
        "loan_amount": params.loan_amount,
        "annual_rate": params.annual_rate,
        "home_value": params.home_value,
        "mortgage_balance": params.mortgage_balance,
        "sigma": params.sigma,
    }
    if params.initial_k is not None:
        numeric_fields["initial_k"] = params.initial_k
    for name, value in numeric_fields.items():
        if not math.isfinite(value):
            raise ValueError(f"{name} must be finite, got {value}")

    if params.loan_amount <= 0:
        raise ValueError(f"loan_amount must be positive, got {params.loan_amount}")
    if params.duration_months <= 0:
        raise ValueError(f"duration_months must be positive, got {params.duration_months}")
    if params.annual_rate < 0:
        raise ValueError(f"annual_rate must be non-negative, got {params.annual_rate}")
    if params.home_value < 0:
        raise ValueError(f"home_value must be non-negative, got {params.home_value}")
    if params.mortgage_balance < 0:
        raise ValueError(f"mortgage_balance must be non-negative, got {params.mortgage_balance}")
    if params.sigma <= 0:
        raise ValueError(f"sigma must be positive, got {params.sigma}")

    if (params.future_buy_year is None) != (params.future_buy_month is None):
        raise ValueError(
            f"future_buy_year and future_buy_month must be set together, got "
            f"{params.future_buy_year}/{params.future_buy_month}"
        )
    if params.future_buy_month is not None and not 1 <= params.future_buy_month <= 12:
        raise ValueError(f"future_buy_month must be within 1-12, got {params.future_buy_month}")
    if params.future_buy_year is not None:
        as_of = _resolve_as_of(as_of)
        if (params.future_buy_year, params.future_buy_month) < (as_of.year, as_of.month):
            raise ValueError(
                f"future purchase {params.future_buy_year}-{params.future_buy_month:02d} "
                f"is before as_of {as_of.year}-{as_of.month:02d}"
            )

    TrendModel(params.model)
    ScenarioMode(params.scenario_mode)


# =============================================================================
# Outputs
# =============================================================================

@dataclass(frozen=True)
class MonthRecord:
    """One simulated month. Month 0 is the purchase month and has no payment."""
    month_index: int
    date: dt.date
    year_index: float           # month_index / 12
    effective_k: float          # scenario deviation in sigmas
    btc_price: float
    trend_price: float
    monthly_payment: float
    principal_paid: float
    interest_paid: float
    cumulative_payments: float
    cumulative_interest: float
    remaining_balance: float
    btc_amount: float
    btc_value: float
    net_position: float         # btc_value − remaining_balance − cumulative_interest
    total_ltv: float            # (mortgage_balance + remaining_balance) / home_value
    roi_pct: float              # (btc_value − cumulative_payments) / cumulative_payments × 100


@dataclass(frozen=True)
class SimulationResult:
    """Full month-by-month projection of one LoanParams."""
    months: tuple[MonthRecord, ...]
    purchase_price: float
    purchase_date: dt.date | dt.datetime
    btc_amount: float
    break_even_month: int | None
    params: LoanParams

    def column(self, name: str) -> np.ndarray:
        """One MonthRecord field across all months, e.g. column("btc_value")."""
        return np.array([getattr(m, name) for m in self.months])


@dataclass(frozen=True)
class SimulationSummary:
    total_cost: float
    total_interest: float
    btc_amount: float
    buy_price: float
    final_btc_price: float
    final_btc_value: float
    net_gain_loss: float
    roi_pct: float
    break_even_month: int | None
    break_even_date: dt.date | None
    monthly_payment: float
    max_ltv: float
    final_ltv: float
    remaining_balance: float


@dataclass(frozen=True)
class EquityMetrics:
    home_equity: float
    existing_ltv: float
    total_ltv: float
    ltv_warning: bool


@dataclass(frozen=True)
class ScenarioComparison:
    scenario_mode: ScenarioMode
    label: str
    summary: SimulationSummary
    months: tuple[MonthRecord, ...]


# =============================================================================
# Equity & LTV
# =============================================================================

def compute_equity_metrics(home_value: float, mortgage_balance: float, loan_amount: float) -> EquityMetrics:
    """
    Home equity and loan-to-value before and after the equity loan.

    A home value of 0 reports both LTVs as 0 instead of dividing by zero.
    ltv_warning is set when the combined LTV exceeds LTV_WARNING_THRESHOLD.
    """
    existing_ltv = mortgage_balance / home_value if home_value > 0 else 0.0
    total_ltv = (mortgage_balance + loan_amount) / home_value if home_value > 0 else 0.0
    return EquityMetrics(
        home_equity=home_value - mortgage_balance,
        existing_ltv=existing_ltv,
        total_ltv=total_ltv,
        ltv_warning=total_ltv > LTV_WARNING_THRESHOLD,
    )


# =============================================================================
# Simulation
# =============================================================================

def _resolve_as_of(as_of: dt.date | dt.datetime | None) -> dt.date | dt.datetime:
    return dt.datetime.now(dt.timezone.utc) if as_of is None else as_of


def _add_months(start: dt.date, months: int) -> dt.date:
    """The 15th of the month `months` calendar months after start."""
    index = start.year * 12 + (start.month - 1) + months
    return dt.date(index // 12, index % 12 + 1, _MID_MONTH)


def _resolve_purchase(
        params: LoanParams,
        live_price: float | None,
        as_of: dt.date | dt.datetime,
) -> tuple[dt.date | dt.datetime, float, float]:
    """
    Purchase date, purchase price and the scenario time (years after as_of)
    at which the purchase happens.
    """
    if params.buy_now and live_price:
        return as_of, live_price, 0.0
    if params.future_buy_year and params.future_buy_month:
        purchase_date = dt.date(params.future_buy_year, params.future_buy_month, _MID_MONTH)
        years_ahead = (days_since_genesis(purchase_date) - days_since_genesis(as_of)) / DAYS_PER_YEAR
        future_k = resolve_scenario_k(params.scenario_mode, years_ahead, params.initial_k)
        return purchase_date, scenario_price(params.model, purchase_date, params.sigma, future_k), years_ahead
    return as_of, trend_price(params.model, as_of), 0.0


def simulate_equity_loan(
        params: LoanParams,
        live_price: float | None = None,
        as_of: dt.date | dt.datetime | None = None,
) -> SimulationResult:
    """
    Project an equity loan used to buy BTC, month by month.

    Steps:
        1. Resolve the purchase price and date (live price, future scenario
           price, or today's trend price; see LoanParams).
        2. btc_amount = loan_amount / purchase_price. The purchase price must
           be positive; this is not checked.
        3. For month i = 0..duration_months, priced on the 15th of the i-th
           month after the purchase month:
              - k = resolve_scenario_k(mode, t₀ + i/12, initial_k), where t₀
                is the purchase time in years after as_of
              - btc_price = scenario_price(model, date, sigma, k)
              - loan figures from run_loan_schedule (month 0 pays nothing,
                the final month retires the balance exactly)
              - break_even_month is the first i > 0 with
                btc_value >= cumulative_payments; it is never overwritten

    Args:
        params: Loan and scenario assumptions
        live_price: Live BTC price in USD, None when unavailable
        as_of: Simulation "now"; defaults to the current UTC time

    Returns:
        SimulationResult with duration_months + 1 MonthRecords
    """
    as_of = _resolve_as_of(as_of)
    purchase_date, purchase_price, purchase_years = _resolve_purchase(params, live_price, as_of)
    btc_amount = params.loan_amount / purchase_price

    schedule = run_loan_schedule(
        params.loan_amount, params.annual_rate, params.duration_months, params.interest_only
    )

    months: list[MonthRecord] = []
    break_even_month: int | None = None

    for i in range(params.duration_months + 1):
        sim_date = _add_months(purchase_date, i)
        year_index = i / 12
        effective_k = resolve_scenario_k(params.scenario_mode, purchase_years + year_index, params.initial_k)
        btc_price = scenario_price(params.model, sim_date, params.sigma, effective_k)

        remaining_balance = float(schedule.ending_balance[i])
        cumulative_payments = float(schedule.cumulative_payments[i])
        cumulative_interest = float(schedule.cumulative_interest[i])

        btc_value = btc_amount * btc_price
        total_ltv = (
            (params.mortgage_balance + remaining_balance) / params.home_value
            if params.home_value > 0 else 0.0
        )
        roi_pct = (
            (btc_value - cumulative_payments) / cumulative_payments * 100
            if cumulative_payments > 0 else 0.0
        )

        if break_even_month is None and i > 0 and btc_value >= cumulative_payments:
            break_even_month = i

        months.append(MonthRecord(
            month_index=i,
            date=sim_date,
            year_index=year_index,
            effective_k=effective_k,
            btc_price=btc_price,
            trend_price=trend_price(params.model, sim_date),
            monthly_payment=float(schedule.payment[i]),
            principal_paid=float(schedule.principal[i]),
            interest_paid=float(schedule.interest[i]),
            cumulative_payments=cumulative_payments,
            cumulative_interest=cumulative_interest,
            remaining_balance=remaining_balance,
            btc_amount=btc_amount,
            btc_value=btc_value,
            net_position=btc_value - remaining_balance - cumulative_interest,
            total_ltv=total_ltv,
            roi_pct=roi_pct,
        ))

    return SimulationResult(
        months=tuple(months),
        purchase_price=purchase_price,
        purchase_date=purchase_date,
        btc_amount=btc_amount,
        break_even_month=break_even_month,
        params=params,
    )


def simulation_summary(result: SimulationResult) -> SimulationSummary:
    """Totals, final values and LTV extremes of a simulation."""
    params = result.params
    last = result.months[-1]
    total_cost = last.cumulative_payments
    net_gain_loss = last.btc_value - total_cost
    break_even = result.break_even_month

    return SimulationSummary(
        total_cost=total_cost,
        total_interest=last.cumulative_interest,
        btc_amount=result.btc_amount,
        buy_price=result.purchase_price,
        final_btc_price=last.btc_price,
        final_btc_value=last.btc_value,
        net_gain_loss=net_gain_loss,
        roi_pct=net_gain_loss / total_cost * 100 if total_cost > 0 else 0.0,
        break_even_month=break_even,
        break_even_date=result.months[break_even].date if break_even is not None else None,
        monthly_payment=monthly_payment(
            params.loan_amount, params.annual_rate, params.duration_months, params.interest_only
        ),
        max_ltv=max(m.total_ltv for m in result.months),
        final_ltv=last.total_ltv,
        remaining_balance=last.remaining_balance,
    )


def compare_scenarios(
        params: LoanParams,
        live_price: float | None = None,
        as_of: dt.date | dt.datetime | None = None,
) -> list[ScenarioComparison]:
    """
    Run the simulator once per mode in SCENARIO_MODES, all other inputs fixed.

    The output order matches SCENARIO_MODES. Runs are independent of each
    other.
    """
    as_of = _resolve_as_of(as_of)
    comparisons = []
    for mode in SCENARIO_MODES:
        result = simulate_equity_loan(replace(params, scenario_mode=mode), live_price, as_of)
        summary = simulation_summary(result)
        logger.debug(
            "Scenario %s: final value %.2f, total cost %.2f, break-even month %s",
            mode.value, summary.final_btc_value, summary.total_cost, summary.break_even_month,
        )
        comparisons.append(ScenarioComparison(
            scenario_mode=mode,
            label=scenario_label(mode),
            summary=summary,
            months=result.months,
        ))
    return comparisons


# =============================================================================
# Break-even rate
# =============================================================================

def break_even_rate(
        params: LoanParams,
        live_price: float | None = None,
        as_of: dt.date | dt.datetime | None = None,
        max_rate: float = 1.0,
        tolerance: float = 1e-10,
        max_iterations: int = 100,
) -> float:
    """
    Annual loan rate at which the final BTC value exactly repays the loan.

    The BTC path does not depend on the loan rate, only the total cost does,
    so the objective

        f(rate) = final_btc_value − total_payments(rate)

    is strictly decreasing and Brent's method (scipy.optimize.brentq) finds
    its root on [0, max_rate].

    Args:
        params: Loan and scenario assumptions (annual_rate is ignored)
        live_price: Live BTC price in USD, None when unavailable
        as_of: Simulation "now"; defaults to the current UTC time
        max_rate: Upper end of the search bracket (decimal)
        tolerance: Convergence tolerance on the rate
        max_iterations: Maximum iterations for Brent's method

    Returns:
        Annual rate as decimal

    Raises:
        ValueError: If no rate in [0, max_rate] breaks even, i.e. the position
            loses money even interest-free or still profits at max_rate
    """
    as_of = _resolve_as_of(as_of)
    final_value = simulate_equity_loan(params, live_price, as_of).months[-1].btc_value

    def objective(rate: float) -> float:
        schedule = run_loan_schedule(
            params.loan_amount, rate, params.duration_months, params.interest_only
        )
        return final_value - schedule.cumulative_payments[-1]

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ZeroRateWarning)
            rate = brentq(objective, 0.0, max_rate, xtol=tolerance, maxiter=max_iterations)
    except ValueError as e:
        raise ValueError(
            f"No break-even rate in [0, {max_rate}] for scenario "
            f"{ScenarioMode(params.scenario_mode).value}: final BTC value {final_value:.2f}. "
            f"Original error: {e}"
        ) from e

    logger.debug("Break-even rate %.6f for final BTC value %.2f", rate, final_value)
    return rate
