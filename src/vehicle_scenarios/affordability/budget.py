from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from vehicle_scenarios.parsing import parse_money

logger = logging.getLogger(__name__)

CAR_BUDGET_SHARE = 0.10  # of gross monthly income, all car costs included
BUDGET_LOAN_APR = 0.06
BUDGET_LOAN_TERM_MONTHS = 48
BUDGET_DOWN_PAYMENT_PCT = 0.20

_ASSESSMENT_BANDS = (
    (10, "excellent", "Very affordable - well within recommended limits"),
    (15, "good", "Affordable - within reasonable limits"),
    (20, "caution", "Consider your budget carefully"),
)


@dataclass(frozen=True)
class PaymentAssessment:
    percentage: int | None  # payment as % of monthly income; None when income is unknown
    status: str
    message: str


@dataclass(frozen=True)
class PriceRange:
    label: str
    min: float
    max: float


@dataclass(frozen=True)
class BudgetRecommendation:
    monthly_income: float
    max_monthly_car_expenses: float
    estimated_insurance: float
    estimated_gas: float
    estimated_maintenance: float
    max_monthly_payment: float
    max_loan_amount: float
    max_car_price: float
    conservative: PriceRange
    moderate: PriceRange
    optimistic: PriceRange


def assess_payment(monthly_payment: float, monthly_income: Any) -> PaymentAssessment:
    income = parse_money(monthly_income)
    if income is None or income <= 0:
        return PaymentAssessment(None, "warning", "Income unknown - cannot judge affordability")

    pct = monthly_payment / income * 100
    for bound, status, message in _ASSESSMENT_BANDS:
        if pct <= bound:
            return PaymentAssessment(round(pct), status, message)
    return PaymentAssessment(round(pct), "warning", "May strain your budget - consider alternatives")


def _round_thousand(amount: float) -> float:
    return float(round(amount / 1000.0) * 1000)


def max_loan_for_payment(payment: float, *, apr: float, term_months: int) -> float:
    """Inverse annuity: the principal a level payment retires over the term."""
    r = apr / 12.0
    if r <= 0:
        return payment * term_months
    growth = (1.0 + r) ** term_months
    return payment * (growth - 1.0) / (r * growth)


def recommend_price_range(annual_income: Any) -> BudgetRecommendation | None:
    """
    Price ranges under the 10% rule: all monthly car costs within 10% of gross
    monthly income, financed 20% down over 48 months at 6%.

    Returns None when income is missing or unparsable.
    """
    annual = parse_money(annual_income)
    if annual is None or annual <= 0:
        logger.info("no usable annual income; skipping price recommendation")
        return None

    monthly = annual / 12.0
    budget = monthly * CAR_BUDGET_SHARE
    insurance = min(200.0, budget * 0.30)
    gas = min(150.0, budget * 0.25)
    maintenance = min(100.0, budget * 0.15)
    max_payment = max(0.0, budget - insurance - gas - maintenance)

    max_loan = max_loan_for_payment(max_payment, apr=BUDGET_LOAN_APR, term_months=BUDGET_LOAN_TERM_MONTHS)
    max_price = max_loan / (1.0 - BUDGET_DOWN_PAYMENT_PCT)

    conservative_max = max_price * 0.8
    moderate_max = max_price * 0.9

    return BudgetRecommendation(
        monthly_income=round(monthly, 2),
        max_monthly_car_expenses=round(budget, 2),
        estimated_insurance=round(insurance, 2),
        estimated_gas=round(gas, 2),
        estimated_maintenance=round(maintenance, 2),
        max_monthly_payment=round(max_payment, 2),
        max_loan_amount=round(max_loan, 2),
        max_car_price=round(max_price, 2),
        conservative=PriceRange(
            "Conservative", _round_thousand(conservative_max * 0.6), _round_thousand(conservative_max)
        ),
        moderate=PriceRange("Moderate", _round_thousand(conservative_max * 0.8), _round_thousand(moderate_max)),
        optimistic=PriceRange("Optimistic", _round_thousand(moderate_max * 0.8), _round_thousand(max_price)),
    )
