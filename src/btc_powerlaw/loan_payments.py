# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import warnings

__version__ = "0.1.0"


class ZeroRateWarning(UserWarning):
    """An amortising loan at 0% is repaid straight-line."""


# =============================================================================
# Level Payment Loans
# =============================================================================
#
# Rate convention: annual_rate is a DECIMAL (0.045 for 4.5%) and is
# compounded monthly, r = annual_rate / 12.
#
# Zero-rate convention:
#   - interest-only at 0%: the recurring payment is 0 and the whole principal
#     falls due as the final balloon.
#   - amortising at 0%: the principal is repaid straight-line,
#     principal / duration_months per month (ZeroRateWarning is issued).
#
# Inputs are not validated. Non-positive durations or non-finite numbers
# produce non-finite results or ZeroDivisionError; see
# equity_loan.validate_loan_params for an upstream check.
# =============================================================================

def monthly_payment(
        principal: float,
        annual_rate: float,
        duration_months: int,
        interest_only: bool = False,
) -> float:
    """
    Recurring monthly payment of a fixed-rate loan.

    Formula (amortising, r > 0):
        PMT = P × r / [1 − (1 + r)^-n]

    Where:
        P = principal
        r = monthly rate (annual_rate / 12)
        n = duration in months

    Interest-only loans pay P × r each month (the principal is repaid as a
    balloon with the final payment, see loan_schedule.run_loan_schedule).

    Author's Note:
    --------------
    The annuity factor r / [1 − (1 + r)^-n] is the payment per dollar of
    balance that retires the loan in exactly n equal installments: the present
    value of n payments of PMT discounted at r equals P.

    Args:
        principal: Amount borrowed
        annual_rate: Annual rate as decimal (e.g., 0.045 for 4.5%)
        duration_months: Term in months
        interest_only: True for interest-only with a final balloon

    Returns:
        Monthly payment

    Warns:
        ZeroRateWarning: If annual_rate is zero on an amortising loan
    """
    r = annual_rate / 12.0
    if interest_only:
        return principal * r
    if r == 0.0:
        warnings.warn(
            "annual_rate is zero, returning straight-line amortization",
            ZeroRateWarning,
            stacklevel=2,
        )
        return principal / duration_months
    return principal * r / (1 - (1 + r) ** (-duration_months))


def scheduled_balance_factor(
        annual_rate: float,
        duration_months: int,
        months_elapsed: int,
) -> float:
    """
    Remaining balance of an amortising loan as a fraction of principal.

    Formula:
        BAL(k) = [1 − (1 + r)^-(n − k)] / [1 − (1 + r)^-n]

    Where:
        r = monthly rate (annual_rate / 12)
        n = duration in months
        k = months elapsed (payments made)

    BAL(k) is the ratio of the present value annuity factors with n − k and n
    payments remaining. At 0% it reduces to straight-line, (n − k) / n.

    Args:
        annual_rate: Annual rate as decimal
        duration_months: Term in months (n)
        months_elapsed: Payments made so far (k), 0 <= k <= n

    Returns:
        Scheduled balance factor (1.0 at k = 0, 0.0 at k = n)
    """
    remaining = duration_months - months_elapsed
    if remaining <= 0:
        return 0.0
    r = annual_rate / 12.0
    if r == 0.0:
        return remaining / duration_months
    return (1 - (1 + r) ** (-remaining)) / (1 - (1 + r) ** (-duration_months))
