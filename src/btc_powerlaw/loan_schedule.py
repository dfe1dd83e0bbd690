# Requires Python 3.10+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import numpy as np
from dataclasses import dataclass

from btc_powerlaw.loan_payments import monthly_payment

__version__ = "0.1.0"


# =============================================================================
# Monthly Loan Schedule
# =============================================================================

@dataclass
class LoanSchedule:
    """
    Container for a month-by-month loan schedule.

    Arrays have duration_months + 1 entries. Period 0 is the drawdown
    (purchase) month: no payment, ending_balance = principal.

    Identities for every period i >= 1:
        payment[i]        = interest[i] + principal[i]
        ending_balance[i] = beginning_balance[i] − principal[i]
    """
    period: np.ndarray
    beginning_balance: np.ndarray
    payment: np.ndarray
    interest: np.ndarray
    principal: np.ndarray
    ending_balance: np.ndarray
    cumulative_payments: np.ndarray
    cumulative_interest: np.ndarray
    level_payment: float  # recurring installment (interest-only: interest)

    def __len__(self) -> int:
        return len(self.period)


def run_loan_schedule(
    principal: float,
    annual_rate: float,
    duration_months: int,
    interest_only: bool = False,
) -> LoanSchedule:
    """
    Generate the repayment schedule of a fixed-rate loan.

    Amortising loans pay the level installment from monthly_payment(); in the
    final period the principal paid is whatever balance remains, so the
    ending balance is exactly 0 rather than a rounding residual.

    Interest-only loans pay interest each period and, in the final period,
    the full remaining balance plus that period's interest (balloon).

    Args:
        principal: Amount borrowed
        annual_rate: Annual rate as decimal (e.g., 0.045 for 4.5%)
        duration_months: Term in months
        interest_only: True for interest-only with a final balloon

    Returns:
        LoanSchedule with all schedule arrays
    """
    periods = duration_months + 1
    period = np.arange(periods)
    beginning_balance = np.zeros(periods)
    payment = np.zeros(periods)
    interest = np.zeros(periods)
    principal_paid = np.zeros(periods)
    ending_balance = np.zeros(periods)

    monthly_rate = annual_rate / 12.0
    level_payment = monthly_payment(principal, annual_rate, duration_months, interest_only)

    # Period 0 is the drawdown, nothing is paid
    ending_balance[0] = principal

    for i in range(1, periods):
        beginning_balance[i] = ending_balance[i - 1]
        if beginning_balance[i] <= 0.0:
            continue
        interest[i] = beginning_balance[i] * monthly_rate

        if i == duration_months:
            principal_paid[i] = beginning_balance[i]
        elif interest_only:
            principal_paid[i] = 0.0
        else:
            principal_paid[i] = min(level_payment - interest[i], beginning_balance[i])

        payment[i] = interest[i] + principal_paid[i]
        ending_balance[i] = beginning_balance[i] - principal_paid[i]

    return LoanSchedule(
        period=period,
        beginning_balance=beginning_balance,
        payment=payment,
        interest=interest,
        principal=principal_paid,
        ending_balance=ending_balance,
        cumulative_payments=np.cumsum(payment),
        cumulative_interest=np.cumsum(interest),
        level_payment=level_payment,
    )
