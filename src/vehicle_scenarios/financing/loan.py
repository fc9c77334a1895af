from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from vehicle_scenarios.config import DEFAULT_ASSUMPTIONS, EngineAssumptions
from vehicle_scenarios.errors import ScenarioInputError

logger = logging.getLogger(__name__)


def _monthly_rate_from_apr(apr: float) -> float:
    # Treat APR as nominal annual with monthly compounding for payments.
    return apr / 12.0


def _check_loan(principal: float, apr: float, term_months: int) -> None:
    if not isinstance(term_months, int) or term_months <= 0:
        raise ScenarioInputError("term_months must be an integer > 0")
    if not math.isfinite(principal) or principal < 0:
        raise ScenarioInputError("principal must be finite and >= 0")
    if not math.isfinite(apr) or apr < 0:
        raise ScenarioInputError("apr must be finite and >= 0")


def monthly_payment(*, principal: float, apr: float, term_months: int) -> float:
    """
    Standard fixed-rate loan payment.

    principal: amount borrowed today
    apr: nominal annual interest rate (e.g. 0.055 for 5.5%)
    term_months: number of monthly payments
    """
    _check_loan(principal, apr, term_months)

    r = _monthly_rate_from_apr(apr)
    n = term_months
    pv = float(principal)

    if abs(r) < 1e-12:
        return pv / n

    # PMT = P * r(1+r)^n / ((1+r)^n - 1)
    growth = (1.0 + r) ** n
    return float(pv * r * growth / (growth - 1.0))


def remaining_balance(*, principal: float, apr: float, term_months: int, payments_made: int) -> float:
    """Remaining balance immediately after `payments_made` scheduled payments."""
    _check_loan(principal, apr, term_months)
    if payments_made < 0:
        raise ScenarioInputError("payments_made must be >= 0")
    if payments_made >= term_months:
        return 0.0

    r = _monthly_rate_from_apr(apr)
    pv = float(principal)
    pmt = monthly_payment(principal=pv, apr=apr, term_months=term_months)

    if abs(r) < 1e-12:
        return float(max(0.0, pv - pmt * payments_made))

    # Balance at k: B_k = PMT * (1 - (1+r)^-(n-k)) / r
    rem = term_months - payments_made
    bal = pmt * (1.0 - (1.0 + r) ** (-rem)) / r
    return float(max(0.0, bal))


@dataclass(frozen=True)
class FinancingOption:
    term_months: int
    apr: float
    monthly_payment: float
    total_payments: float
    total_interest: float
    total_cost: float
    loan_amount: float
    down_payment: float


def financing_option(*, loan_amount: float, apr: float, term_months: int, down_payment: float = 0.0) -> FinancingOption:
    if not math.isfinite(down_payment) or down_payment < 0:
        raise ScenarioInputError("down_payment must be finite and >= 0")

    pmt = monthly_payment(principal=loan_amount, apr=apr, term_months=term_months)
    total_payments = pmt * term_months
    return FinancingOption(
        term_months=term_months,
        apr=apr,
        monthly_payment=round(pmt, 2),
        total_payments=round(total_payments, 2),
        total_interest=round(total_payments - loan_amount, 2),
        total_cost=round(total_payments + down_payment, 2),
        loan_amount=round(float(loan_amount), 2),
        down_payment=round(float(down_payment), 2),
    )


def financing_options(
    *,
    loan_amount: float,
    apr: float,
    down_payment: float = 0.0,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> tuple[FinancingOption, ...]:
    """One option per configured loan term, shortest term first."""
    options = tuple(
        financing_option(loan_amount=loan_amount, apr=apr, term_months=term, down_payment=down_payment)
        for term in sorted(assumptions.loan_terms)
    )
    logger.debug(
        "financing options computed",
        extra={"loan_amount": loan_amount, "apr": apr, "terms": [o.term_months for o in options]},
    )
    return options


def option_for_term(options: tuple[FinancingOption, ...], term_months: int) -> FinancingOption:
    for opt in options:
        if opt.term_months == term_months:
            return opt
    raise ScenarioInputError(f"no financing option with a {term_months}-month term")
