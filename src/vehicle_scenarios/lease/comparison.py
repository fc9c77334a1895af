from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from vehicle_scenarios.financing.loan import FinancingOption, remaining_balance
from vehicle_scenarios.lease.options import LeaseOption

logger = logging.getLogger(__name__)


class BalanceMethod(str, Enum):
    # Closed-form amortization balance after the lease term.
    EXACT = "exact"
    # Straight-line interest allocation used by the first version of the product.
    LEGACY_APPROXIMATION = "legacy"


@dataclass(frozen=True)
class LeaseVsBuyComparison:
    term_months: int
    lease_cost: float
    finance_cost: float
    lease_advantage: float  # finance_cost - lease_cost; positive means leasing costs less
    remaining_balance: float
    vehicle_value_at_end: float
    equity_built: float
    cheaper_path: str  # "lease" | "finance" | "even"


def _balance_at_lease_end(lease: LeaseOption, finance: FinancingOption, method: BalanceMethod) -> float:
    months = lease.term_months
    if method is BalanceMethod.LEGACY_APPROXIMATION:
        paid = finance.monthly_payment * months
        interest_share = finance.total_interest * months / finance.term_months
        return max(0.0, finance.loan_amount - (paid - interest_share))
    return remaining_balance(
        principal=finance.loan_amount,
        apr=finance.apr,
        term_months=finance.term_months,
        payments_made=min(months, finance.term_months),
    )


def compare_lease_vs_buy(
    lease: LeaseOption,
    finance: FinancingOption,
    *,
    balance_method: BalanceMethod = BalanceMethod.EXACT,
) -> LeaseVsBuyComparison:
    """
    Cash out of pocket for each path over the lease term, plus the equity a
    financed buyer holds when the lease would have ended.

    The vehicle's value at lease end is taken to be the lease residual.
    """
    months = lease.term_months
    if finance.term_months != months:
        logger.info(
            "comparing lease and loan with different terms",
            extra={"lease_term_months": months, "loan_term_months": finance.term_months},
        )

    lease_cost = lease.total_payments + lease.upfront_costs
    finance_cost = finance.monthly_payment * min(months, finance.term_months) + finance.down_payment

    balance = _balance_at_lease_end(lease, finance, balance_method)
    value_at_end = lease.residual_value
    equity = max(0.0, value_at_end - balance)

    gap = round(finance_cost - lease_cost, 2)
    if gap > 0:
        cheaper = "lease"
    elif gap < 0:
        cheaper = "finance"
    else:
        cheaper = "even"

    return LeaseVsBuyComparison(
        term_months=months,
        lease_cost=round(lease_cost, 2),
        finance_cost=round(finance_cost, 2),
        lease_advantage=gap,
        remaining_balance=round(balance, 2),
        vehicle_value_at_end=round(value_at_end, 2),
        equity_built=round(equity, 2),
        cheaper_path=cheaper,
    )
