# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from btc_powerlaw.trend_models import TrendModel, trend_price

__version__ = "0.1.0"


# =============================================================================
# Scenario Generator
# =============================================================================
#
# A scenario maps elapsed years t to a deviation multiplier k(t): the number
# of sigmas the projected price sits above (k > 0) or below (k < 0) the
# trend. The projected price is
#
#     price(t) = trend(t) × 10^(k(t) × sigma)
#
# Two families exist:
#   - smooth: k reverts exponentially from its starting value to a floor
#   - cyclical: a damped sine around a mean whose period lengthens with time
#
# Anchoring: when the caller supplies initial_k (usually the k implied by the
# live price) the curve is written as
#
#     k(t) = initial_k + g(t),   g(0) == 0.0
#
# so k(0) is initial_k bit-for-bit and feeding k(0) back in as initial_k
# reproduces the same curve.
# =============================================================================

class ScenarioMode(Enum):
    """Closed set of projection scenarios."""
    SMOOTH_TREND = "smooth_trend"
    SMOOTH_BEAR = "smooth_bear"
    SMOOTH_DEEP_BEAR = "smooth_deep_bear"
    CYCLICAL = "cyclical"
    CYCLICAL_BEAR = "cyclical_bear"


@dataclass(frozen=True)
class SmoothScenario:
    """Exponential reversion of k towards a floor."""
    floor: float
    reversion_years: float = 2.0  # e-folding time of the reversion


@dataclass(frozen=True)
class CyclicalScenario:
    """Damped boom-bust wave around a mean."""
    mean: float
    amplitude: float = 1.0            # sigmas
    first_period_years: float = 4.0   # length of the first full cycle
    period_growth: float = 0.25       # years of period added per elapsed year
    damping_per_year: float = 0.03    # exponential decay rate of the amplitude


# sin(0.1π) ≈ 0.309: a sine shifted down by 0.31 amplitudes spends 60% of
# each cycle below zero.
_BEAR_BIAS = -0.31

SCENARIO_PARAMETERS: dict[ScenarioMode, SmoothScenario | CyclicalScenario] = {
    ScenarioMode.SMOOTH_TREND: SmoothScenario(floor=0.0),
    ScenarioMode.SMOOTH_BEAR: SmoothScenario(floor=-1.0),
    ScenarioMode.SMOOTH_DEEP_BEAR: SmoothScenario(floor=-2.0),
    ScenarioMode.CYCLICAL: CyclicalScenario(mean=0.0),
    ScenarioMode.CYCLICAL_BEAR: CyclicalScenario(mean=_BEAR_BIAS),
}

# Fixed order used for side-by-side comparisons
SCENARIO_MODES: tuple[ScenarioMode, ...] = (
    ScenarioMode.SMOOTH_TREND,
    ScenarioMode.SMOOTH_BEAR,
    ScenarioMode.SMOOTH_DEEP_BEAR,
    ScenarioMode.CYCLICAL,
    ScenarioMode.CYCLICAL_BEAR,
)

SCENARIO_LABELS: dict[ScenarioMode, str] = {
    ScenarioMode.SMOOTH_TREND: "Smooth Trend",
    ScenarioMode.SMOOTH_BEAR: "Bear (−1σ)",
    ScenarioMode.SMOOTH_DEEP_BEAR: "Deep Bear (−2σ)",
    ScenarioMode.CYCLICAL: "Cyclical (±1σ)",
    ScenarioMode.CYCLICAL_BEAR: "Bear Bias Cycles",
}

SCENARIO_DESCRIPTIONS: dict[ScenarioMode, str] = {
    ScenarioMode.SMOOTH_TREND: (
        "Price follows the power law trend with no volatility, an idealised baseline."
    ),
    ScenarioMode.SMOOTH_BEAR: (
        "Price stays 1 standard deviation below the trend for the entire period, "
        "a persistent bear market."
    ),
    ScenarioMode.SMOOTH_DEEP_BEAR: (
        "Price stays 2 standard deviations below the trend, an extreme, prolonged downturn."
    ),
    ScenarioMode.CYCLICAL: (
        "Boom-bust cycles around the power law trend with gradually lengthening periods."
    ),
    ScenarioMode.CYCLICAL_BEAR: (
        "Same cyclical pattern but spending 60% of the time below trend, "
        "a pessimistic but plausible path."
    ),
}


def scenario_label(mode: ScenarioMode | str) -> str:
    return SCENARIO_LABELS[ScenarioMode(mode)]


def scenario_description(mode: ScenarioMode | str) -> str:
    return SCENARIO_DESCRIPTIONS[ScenarioMode(mode)]


# -----------------------------------------------------------------------------
# k(t) curves
# -----------------------------------------------------------------------------

def _scalar_or_array(values):
    if np.ndim(values) == 0:
        return float(values)
    return values


def smooth_sigma_k(
        years,
        *,
        floor: float,
        reversion_years: float = 2.0,
        initial_k: float | None = None,
) -> float | np.ndarray:
    """
    Exponential reversion of k from initial_k to floor.

    Formula:
        k(t) = k₀ + (floor − k₀) × (1 − e^(−t/τ))

    Where:
        k₀ = initial_k, or floor when no initial_k is given (flat curve)
        τ  = reversion_years

    Args:
        years: Elapsed years (float or ndarray)
        floor: Level k settles at
        reversion_years: e-folding time of the reversion
        initial_k: Deviation at t = 0

    Returns:
        k(t), float for scalar input
    """
    k0 = floor if initial_k is None else initial_k
    t = np.asarray(years, dtype=float)
    return _scalar_or_array(k0 + (floor - k0) * (1.0 - np.exp(-t / reversion_years)))


def _cycle_phase(t: np.ndarray, first_period_years: float, period_growth: float) -> np.ndarray:
    """
    Number of cycles completed after t years when the period grows linearly.

    With P(t) = P₀ + g·t the phase is ∫ dt / P(t) = ln(1 + g·t/P₀) / g,
    reducing to t / P₀ when g = 0.
    """
    if period_growth == 0:
        return t / first_period_years
    return np.log1p(period_growth * t / first_period_years) / period_growth


def _wave(
        t: np.ndarray,
        mean: float,
        amplitude: float,
        start_angle: float,
        first_period_years: float,
        period_growth: float,
        damping_per_year: float,
) -> np.ndarray:
    phase = _cycle_phase(t, first_period_years, period_growth)
    envelope = amplitude * np.exp(-damping_per_year * t)
    return mean + envelope * np.sin(start_angle + 2.0 * math.pi * phase)


def cyclical_sigma_k(
        years,
        *,
        mean: float = 0.0,
        amplitude: float = 1.0,
        initial_k: float | None = None,
        first_period_years: float = 4.0,
        period_growth: float = 0.25,
        damping_per_year: float = 0.03,
) -> float | np.ndarray:
    """
    Damped boom-bust wave for k with lengthening cycles.

    Formula:
        wave(t) = mean + A × e^(−λt) × sin(θ + 2π × φ(t))
        φ(t)    = ln(1 + g·t/P₀) / g

    Where:
        A  = amplitude (sigmas)
        λ  = damping_per_year
        P₀ = first_period_years, g = period_growth
        θ  = starting angle

    Precondition: years > −P₀/g (−16 years with the defaults). Below that
    ln(1 + g·t/P₀) is undefined and the result is nan; past purchase dates
    are rejected upstream by equity_loan.validate_loan_params.

    Without initial_k, θ = 0: the wave starts at its mean, rising.

    With initial_k the starting angle is solved from
    sin(θ) = (initial_k − mean) / A. Above the mean the falling branch is
    taken (θ = π − asin), at or below it the rising branch (θ = asin), so the
    first move is back towards the mean. If |initial_k − mean| exceeds A the
    amplitude is widened to reach initial_k. The result is then shifted so
    that k(0) equals initial_k exactly:

        k(t) = initial_k + (wave(t) − wave(0))

    Args:
        years: Elapsed years (float or ndarray)
        mean: Level the wave oscillates around
        amplitude: Wave amplitude in sigmas
        initial_k: Deviation at t = 0
        first_period_years: Length of the first cycle
        period_growth: Years added to the period per elapsed year
        damping_per_year: Amplitude decay rate

    Returns:
        k(t), float for scalar input
    """
    t = np.asarray(years, dtype=float)
    wave_args = (first_period_years, period_growth, damping_per_year)
    if initial_k is None:
        return _scalar_or_array(_wave(t, mean, amplitude, 0.0, *wave_args))

    offset = initial_k - mean
    amplitude = max(amplitude, abs(offset))
    ratio = min(1.0, max(-1.0, offset / amplitude)) if amplitude > 0 else 0.0
    start_angle = math.pi - math.asin(ratio) if offset > 0 else math.asin(ratio)

    shape = _wave(t, mean, amplitude, start_angle, *wave_args)
    origin = _wave(np.zeros_like(t), mean, amplitude, start_angle, *wave_args)
    return _scalar_or_array(initial_k + (shape - origin))


def resolve_scenario_k(
        mode: ScenarioMode | str,
        years_elapsed,
        initial_k: float | None = None,
) -> float | np.ndarray:
    """
    Deviation multiplier k for a scenario after years_elapsed years.

    Args:
        mode: ScenarioMode member or its string value
        years_elapsed: Elapsed years since the anchor (float or ndarray)
        initial_k: Optional deviation at t = 0; None uses the mode's own start

    Returns:
        k(t). resolve_scenario_k(mode, 0, k0) == k0 for every finite k0.
    """
    match SCENARIO_PARAMETERS[ScenarioMode(mode)]:
        case SmoothScenario(floor=floor, reversion_years=reversion_years):
            return smooth_sigma_k(
                years_elapsed,
                floor=floor,
                reversion_years=reversion_years,
                initial_k=initial_k,
            )
        case CyclicalScenario() as cycle:
            return cyclical_sigma_k(
                years_elapsed,
                mean=cycle.mean,
                amplitude=cycle.amplitude,
                initial_k=initial_k,
                first_period_years=cycle.first_period_years,
                period_growth=cycle.period_growth,
                damping_per_year=cycle.damping_per_year,
            )
        case other:
            raise TypeError(f"Unsupported scenario parameters: {other!r}")


def scenario_k_curve(
        mode: ScenarioMode | str,
        years: np.ndarray,
        initial_k: float | None = None,
) -> np.ndarray:
    """k(t) over an array of elapsed years."""
    return np.asarray(resolve_scenario_k(mode, np.asarray(years, dtype=float), initial_k), dtype=float)


# -----------------------------------------------------------------------------
# Prices
# -----------------------------------------------------------------------------

def scenario_price(model: TrendModel | str, when, sigma: float, k) -> float | np.ndarray:
    """Projected price: trend × 10^(k × sigma)."""
    trend = np.asarray(trend_price(model, when))
    return _scalar_or_array(trend * 10.0 ** (np.asarray(k, dtype=float) * sigma))


def current_sigma_k(
        model: TrendModel | str,
        sigma: float,
        live_price: float,
        when: dt.date | dt.datetime | None = None,
) -> float:
    """
    Deviation multiplier implied by an observed price.

    Formula:
        k = log10(live_price / trend(when)) / sigma

    The result is what callers pass as initial_k to anchor a scenario at the
    live price.
    """
    return math.log10(live_price / trend_price(model, when)) / sigma
