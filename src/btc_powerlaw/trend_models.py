# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import datetime as dt
import hashlib
import math
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

import numpy as np

__version__ = "0.1.0"


# =============================================================================
# Power Law Trend Models
# =============================================================================
#
# Every model has the form
#
#     price(t) = 10^intercept × t^exponent
#
# where t is the number of days elapsed since the genesis block
# (2009-01-03T00:00:00Z). Both models are fitted on days, not years.
# =============================================================================

GENESIS = dt.datetime(2009, 1, 3, tzinfo=dt.timezone.utc)
_GENESIS_NP = np.datetime64("2009-01-03T00:00:00", "us")
_ONE_DAY = np.timedelta64(1, "D")
_MIN_DAYS = 1e-9  # keeps t^exponent finite at or before genesis
DAYS_PER_YEAR = 365.25


class TrendModel(Enum):
    """Supported power law fits."""
    KRUEGER = "krueger"
    SANTOSTASI = "santostasi"


@dataclass(frozen=True)
class ModelParameters:
    """Constants of one power law fit."""
    name: str
    intercept: float   # log10 of the price scale (log10 A)
    exponent: float    # power law slope (β)
    sigma: float       # canonical log10 volatility around the trend


# Santostasi constants are the site's published fit; the Krueger row is an
# assumed days-based fit (trend ≈ 100,800 USD on 2025-01-10), not sourced.
MODEL_PARAMETERS: dict[TrendModel, ModelParameters] = {
    TrendModel.KRUEGER: ModelParameters(
        name="Krueger",
        intercept=-17.016,
        exponent=5.845,
        sigma=0.30,
    ),
    TrendModel.SANTOSTASI: ModelParameters(
        name="Santostasi",
        intercept=-16.493,
        exponent=5.688,
        sigma=0.20,
    ),
}


def model_parameters(model: TrendModel | str) -> ModelParameters:
    """Look up the constants of a model given the enum or its string value."""
    return MODEL_PARAMETERS[TrendModel(model)]


def model_sigma(model: TrendModel | str) -> float:
    """Canonical sigma of a model, used when no historical series is loaded."""
    return model_parameters(model).sigma


# -----------------------------------------------------------------------------
# Genesis clock
# -----------------------------------------------------------------------------

def _as_datetime64(when) -> np.datetime64 | np.ndarray:
    """Convert a date-like value (or array of them) to datetime64[us] in UTC."""
    if isinstance(when, dt.datetime):
        if when.tzinfo is not None:
            when = when.astimezone(dt.timezone.utc).replace(tzinfo=None)
        return np.datetime64(when, "us")
    if isinstance(when, dt.date):
        return np.datetime64(when, "D").astype("datetime64[us]")
    if isinstance(when, (str, np.datetime64)):
        return np.datetime64(when, "us")
    if isinstance(when, np.ndarray) and np.issubdtype(when.dtype, np.datetime64):
        return when.astype("datetime64[us]")
    return np.array([_as_datetime64(w) for w in when], dtype="datetime64[us]")


def _scalar_or_array(values):
    """Return a Python float for 0-d results, the array otherwise."""
    if np.ndim(values) == 0:
        return float(values)
    return values


def days_since_genesis(when=None):
    """
    Elapsed days (fractional) since the genesis block.

    Args:
        when: ``datetime.date``, ``datetime.datetime`` (naive values are read as
            UTC), ``numpy.datetime64``, ISO string, or a sequence/array of those.
            Defaults to the current instant.

    Returns:
        float for a scalar input, float64 ndarray for array input. Dates before
        genesis give negative values; they are not guarded.
    """
    if when is None:
        when = dt.datetime.now(dt.timezone.utc)
    elapsed = (_as_datetime64(when) - _GENESIS_NP) / _ONE_DAY
    return _scalar_or_array(elapsed)


def years_since_genesis(when=None):
    """Elapsed Julian years (365.25 days) since the genesis block."""
    return _scalar_or_array(np.asarray(days_since_genesis(when)) / DAYS_PER_YEAR)


# =============================================================================
# Trend, bands and valuation
# =============================================================================

def trend_price(model: TrendModel | str, when=None):
    """
    Power law fair value at a date.

    Formula:
        P(t) = 10^intercept × max(t, ε)^exponent

    Where t is days since genesis and ε = 1e-9 keeps the result finite at or
    before genesis.

    Args:
        model: TrendModel member or its string value
        when: Date-like value or array of them (see days_since_genesis)

    Returns:
        Trend price in USD (float, or ndarray for array input)
    """
    params = model_parameters(model)
    days = np.maximum(np.asarray(days_since_genesis(when), dtype=float), _MIN_DAYS)
    return _scalar_or_array(10.0 ** params.intercept * days ** params.exponent)


def band_price(model: TrendModel | str, sigma: float, n_sigma: float, when=None):
    """Price n_sigma standard deviations from the trend: trend × 10^(n_sigma·sigma)."""
    trend = np.asarray(trend_price(model, when))
    return _scalar_or_array(trend * 10.0 ** (n_sigma * sigma))


def multiplier(price: float, model: TrendModel | str, when=None) -> float:
    """Observed price as a multiple of the trend price."""
    return price / trend_price(model, when)


@dataclass(frozen=True)
class Valuation:
    """Qualitative reading of a trend multiplier."""
    label: str
    color: str


# Rows are (exclusive upper bound on the multiplier, valuation), ascending.
VALUATION_THRESHOLDS: tuple[tuple[float, Valuation], ...] = (
    (0.5, Valuation("Extremely Undervalued", "#00C853")),
    (0.75, Valuation("Undervalued", "#00C853")),
    (1.25, Valuation("Fair Value", "#757575")),
    (2.0, Valuation("Overvalued", "#FF1744")),
    (3.0, Valuation("Highly Overvalued", "#FF1744")),
    (math.inf, Valuation("Extremely Overvalued", "#FF1744")),
)


def valuation_label(mult: float) -> Valuation:
    """Map a trend multiplier to the first VALUATION_THRESHOLDS row it falls under."""
    for upper_bound, valuation in VALUATION_THRESHOLDS:
        if mult < upper_bound:
            return valuation
    return VALUATION_THRESHOLDS[-1][1]


def milestone_date_for_price(target_price: float, model: TrendModel | str) -> dt.datetime:
    """
    Date at which the trend reaches a target price.

    Inverts the trend formula:
        t = (target_price / 10^intercept)^(1 / exponent)

    Returns:
        Timezone-aware UTC datetime
    """
    params = model_parameters(model)
    days = (target_price / 10.0 ** params.intercept) ** (1.0 / params.exponent)
    return GENESIS + dt.timedelta(days=days)


def cagr_between(model: TrendModel | str, start, end) -> float:
    """Compound annual growth rate of the trend between two dates (0 if end <= start)."""
    p1 = trend_price(model, start)
    p2 = trend_price(model, end)
    years = (days_since_genesis(end) - days_since_genesis(start)) / DAYS_PER_YEAR
    if years <= 0 or p1 <= 0:
        return 0.0
    return (p2 / p1) ** (1.0 / years) - 1.0


# =============================================================================
# Historical series and deviation statistics
# =============================================================================

@dataclass(frozen=True, eq=False)
class HistoricalSeries:
    """
    Observed prices, date-ascending.

    The static dataset ships weekly closes; the statistics below use
    whatever sampling the caller loads.
    """
    dates: np.ndarray   # datetime64[us]
    prices: np.ndarray  # float64, USD

    def __post_init__(self) -> None:
        if len(self.dates) == 0:
            dates = np.array([], dtype="datetime64[us]")
        elif isinstance(self.dates, np.ndarray):
            dates = _as_datetime64(self.dates)
        else:
            dates = _as_datetime64(list(self.dates))
        object.__setattr__(self, "dates", dates)
        object.__setattr__(self, "prices", np.asarray(self.prices, dtype=float))
        if len(self.dates) != len(self.prices):
            raise ValueError(
                f"dates and prices must have equal length, got {len(self.dates)} != {len(self.prices)}"
            )

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[object, float]]) -> HistoricalSeries:
        """Build a series from (date, price) pairs."""
        pairs = list(pairs)
        return cls(dates=[d for d, _ in pairs], prices=[p for _, p in pairs])

    @classmethod
    def from_records(
            cls,
            records: Iterable[Mapping[str, object]],
            date_key: str = "date",
            price_key: str = "price",
    ) -> HistoricalSeries:
        """Build a series from already-parsed dataset records such as {"date": "2013-04-28", "price": 134.2}."""
        return cls.from_pairs((r[date_key], float(r[price_key])) for r in records)

    def __len__(self) -> int:
        return len(self.prices)

    def fingerprint(self) -> str:
        """Digest of the series contents; changes whenever any point changes."""
        digest = hashlib.sha1(self.dates.astype("int64").tobytes())
        digest.update(self.prices.tobytes())
        return digest.hexdigest()


@dataclass(frozen=True)
class SigmaStat:
    """Deviation statistics of log10(observed / trend)."""
    sigma: float  # population standard deviation
    mean: float
    count: int


def log_residuals(series: HistoricalSeries, model: TrendModel | str) -> np.ndarray:
    """log10(price) − log10(trend) for every point with a positive price and trend."""
    trend = np.asarray(trend_price(model, series.dates), dtype=float)
    usable = (series.prices > 0) & (trend > 0)
    return np.log10(series.prices[usable]) - np.log10(trend[usable])


def calculate_sigma(series: HistoricalSeries, model: TrendModel | str) -> SigmaStat:
    """
    Standard deviation of the log10 deviation between observed price and trend.

    For each usable point (positive price and trend):
        residual = log10(price) − log10(trend(date))

    sigma is the POPULATION standard deviation of the residuals (divide by N,
    numpy ddof=0). The same definition is used by fit_power_law.

    Args:
        series: Historical prices
        model: Trend model the residuals are measured against

    Returns:
        SigmaStat(sigma, mean, count). With no usable points sigma and mean are
        nan, count is 0, and a RuntimeWarning is issued; callers must guard.
    """
    residuals = log_residuals(series, model)
    if residuals.size == 0:
        warnings.warn("series has no usable points, sigma is undefined", RuntimeWarning)
        return SigmaStat(sigma=math.nan, mean=math.nan, count=0)
    return SigmaStat(
        sigma=float(np.std(residuals)),
        mean=float(np.mean(residuals)),
        count=int(residuals.size),
    )


class SigmaCache:
    """
    Per-model SigmaStat cache bound to one historical series.

    The cache remembers the fingerprint of the series it was filled from.
    Asking with a different series drops every cached model before
    recomputing; invalidate() drops them explicitly.
    """

    def __init__(self) -> None:
        self._fingerprint: str | None = None
        self._stats: dict[TrendModel, SigmaStat] = {}

    def get(self, model: TrendModel | str, series: HistoricalSeries) -> SigmaStat:
        """Cached SigmaStat for model, computing it on first use for this series."""
        fingerprint = series.fingerprint()
        if fingerprint != self._fingerprint:
            self._stats.clear()
            self._fingerprint = fingerprint
        model = TrendModel(model)
        if model not in self._stats:
            self._stats[model] = calculate_sigma(series, model)
        return self._stats[model]

    def invalidate(self) -> None:
        self._stats.clear()
        self._fingerprint = None

    def __contains__(self, model: object) -> bool:
        try:
            return TrendModel(model) in self._stats
        except ValueError:
            return False


@dataclass(frozen=True)
class PowerLawFit:
    """Least-squares power law fit of a price series."""
    intercept: float
    exponent: float
    sigma: float  # population std of the fit residuals (log10)
    count: int


def fit_power_law(series: HistoricalSeries) -> PowerLawFit:
    """
    Fit log10(price) = intercept + exponent × log10(days) by least squares.

    Only points after genesis with a positive price are used. At least two
    such points are required.
    """
    days = np.asarray(days_since_genesis(series.dates), dtype=float)
    usable = (days > 0) & (series.prices > 0)
    x = np.log10(days[usable])
    y = np.log10(series.prices[usable])
    exponent, intercept = np.polyfit(x, y, 1)
    residuals = y - (intercept + exponent * x)
    return PowerLawFit(
        intercept=float(intercept),
        exponent=float(exponent),
        sigma=float(np.std(residuals)),
        count=int(x.size),
    )
