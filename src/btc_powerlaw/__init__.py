# Requires Python 3.10+
"""
BTC Power Law: trend models, price scenarios and a home equity loan simulator.

Models: the Krueger and Santostasi power law fits of the bitcoin price
against days since the genesis block.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Trend models and deviation statistics
from btc_powerlaw.trend_models import (
    GENESIS,
    DAYS_PER_YEAR,
    TrendModel,
    ModelParameters,
    MODEL_PARAMETERS,
    model_parameters,
    model_sigma,
    days_since_genesis,
    years_since_genesis,
    trend_price,
    band_price,
    multiplier,
    Valuation,
    VALUATION_THRESHOLDS,
    valuation_label,
    milestone_date_for_price,
    cagr_between,
    HistoricalSeries,
    SigmaStat,
    log_residuals,
    calculate_sigma,
    SigmaCache,
    PowerLawFit,
    fit_power_law,
)

# Scenarios
from btc_powerlaw.scenarios import (
    ScenarioMode,
    SmoothScenario,
    CyclicalScenario,
    SCENARIO_PARAMETERS,
    SCENARIO_MODES,
    SCENARIO_LABELS,
    SCENARIO_DESCRIPTIONS,
    scenario_label,
    scenario_description,
    smooth_sigma_k,
    cyclical_sigma_k,
    resolve_scenario_k,
    scenario_k_curve,
    scenario_price,
    current_sigma_k,
)

# Loan payments and schedule
from btc_powerlaw.loan_payments import (
    ZeroRateWarning,
    monthly_payment,
    scheduled_balance_factor,
)
from btc_powerlaw.loan_schedule import (
    LoanSchedule,
    run_loan_schedule,
)

# Equity loan simulator
from btc_powerlaw.equity_loan import (
    LTV_WARNING_THRESHOLD,
    LoanParams,
    MonthRecord,
    SimulationResult,
    SimulationSummary,
    EquityMetrics,
    ScenarioComparison,
    validate_loan_params,
    compute_equity_metrics,
    simulate_equity_loan,
    simulation_summary,
    compare_scenarios,
    break_even_rate,
)

__all__ = [
    "__version__",
    # Trend models
    "GENESIS",
    "DAYS_PER_YEAR",
    "TrendModel",
    "ModelParameters",
    "MODEL_PARAMETERS",
    "model_parameters",
    "model_sigma",
    "days_since_genesis",
    "years_since_genesis",
    "trend_price",
    "band_price",
    "multiplier",
    "Valuation",
    "VALUATION_THRESHOLDS",
    "valuation_label",
    "milestone_date_for_price",
    "cagr_between",
    "HistoricalSeries",
    "SigmaStat",
    "log_residuals",
    "calculate_sigma",
    "SigmaCache",
    "PowerLawFit",
    "fit_power_law",
    # Scenarios
    "ScenarioMode",
    "SmoothScenario",
    "CyclicalScenario",
    "SCENARIO_PARAMETERS",
    "SCENARIO_MODES",
    "SCENARIO_LABELS",
    "SCENARIO_DESCRIPTIONS",
    "scenario_label",
    "scenario_description",
    "smooth_sigma_k",
    "cyclical_sigma_k",
    "resolve_scenario_k",
    "scenario_k_curve",
    "scenario_price",
    "current_sigma_k",
    # Loan payments
    "ZeroRateWarning",
    "monthly_payment",
    "scheduled_balance_factor",
    "LoanSchedule",
    "run_loan_schedule",
    # Equity loan
    "LTV_WARNING_THRESHOLD",
    "LoanParams",
    "MonthRecord",
    "SimulationResult",
    "SimulationSummary",
    "EquityMetrics",
    "ScenarioComparison",
    "validate_loan_params",
    "compute_equity_metrics",
    "simulate_equity_loan",
    "simulation_summary",
    "compare_scenarios",
    "break_even_rate",
]
