from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from vehicle_scenarios.config import DEFAULT_ASSUMPTIONS, EngineAssumptions
from vehicle_scenarios.credit.tiers import VehicleType, apr_for_credit_score
from vehicle_scenarios.errors import ScenarioInputError
from vehicle_scenarios.financing.loan import FinancingOption, financing_option
from vehicle_scenarios.parsing import parse_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpportunityCost:
    cash_to_invest: float
    projected_value: float
    opportunity_loss: float
    interest_saved: float
    net_benefit: float
    is_lump_sum_better: bool


@dataclass(frozen=True)
class LumpSumAnalysis:
    vehicle_price: float
    taxes_and_fees: float
    total_cash_needed: float
    remaining_cash: float
    emergency_fund_needed: float
    financial_health_score: str  # "excellent" | "good" | "concerning"
    opportunity_cost: OpportunityCost


def reference_financing(vehicle_price: float, *, assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS) -> FinancingOption:
    """The financed alternative a cash purchase is measured against."""
    apr = apr_for_credit_score(assumptions.reference_credit_score, VehicleType.NEW, assumptions=assumptions)
    down = vehicle_price * assumptions.reference_down_payment_pct
    return financing_option(
        loan_amount=vehicle_price - down,
        apr=apr,
        term_months=assumptions.reference_term_months,
        down_payment=down,
    )


def future_value(principal: float, *, annual_return: float, months: int) -> float:
    """Monthly compounding at annual_return / 12."""
    return principal * (1.0 + annual_return / 12.0) ** months


def _classify_health(remaining_cash: float, emergency_fund: float) -> str:
    if remaining_cash >= emergency_fund:
        return "excellent"
    if remaining_cash >= emergency_fund * 0.5:
        return "good"
    return "concerning"


def _non_negative(name: str, raw: Any) -> float | None:
    value = parse_money(raw)
    if value is not None and value < 0:
        raise ScenarioInputError(f"{name} must be >= 0")
    return value


def analyze_lump_sum(
    *,
    vehicle_price: float,
    current_cash: Any = None,
    monthly_income: Any = None,
    monthly_expenses: Any = None,
    expected_return: float | None = None,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> LumpSumAnalysis:
    """
    Cost of paying cash, the cushion left afterwards, and what the same cash
    could have earned if the car were financed instead.

    Unknown cash defaults to a year of income; unknown expenses to
    `assumed_expense_ratio` of income.
    """
    if not math.isfinite(vehicle_price) or vehicle_price <= 0:
        raise ScenarioInputError("vehicle_price must be finite and > 0")

    income = _non_negative("monthly_income", monthly_income)
    cash = _non_negative("current_cash", current_cash)
    expenses = _non_negative("monthly_expenses", monthly_expenses)
    if income is None and (cash is None or expenses is None):
        logger.warning("monthly income unknown; unknown cash and expenses default to 0")
    income = income or 0.0
    if cash is None:
        cash = income * 12
    if expenses is None:
        expenses = income * assumptions.assumed_expense_ratio

    rate = assumptions.expected_return if expected_return is None else expected_return
    if not math.isfinite(rate) or rate <= -1.0:
        raise ScenarioInputError("expected_return must be finite and > -1")

    taxes_and_fees = vehicle_price * assumptions.taxes_and_fees_pct
    total_needed = vehicle_price + taxes_and_fees
    remaining = cash - total_needed
    emergency_fund = expenses * assumptions.emergency_fund_months

    ref = reference_financing(vehicle_price, assumptions=assumptions)
    cash_to_invest = total_needed - ref.down_payment
    projected = future_value(cash_to_invest, annual_return=rate, months=ref.term_months)
    loss = projected - cash_to_invest
    net_benefit = ref.total_interest - loss

    logger.debug(
        "lump sum analyzed",
        extra={"vehicle_price": vehicle_price, "net_benefit": round(net_benefit, 2)},
    )
    return LumpSumAnalysis(
        vehicle_price=round(float(vehicle_price), 2),
        taxes_and_fees=round(taxes_and_fees, 2),
        total_cash_needed=round(total_needed, 2),
        remaining_cash=round(remaining, 2),
        emergency_fund_needed=round(emergency_fund, 2),
        financial_health_score=_classify_health(remaining, emergency_fund),
        opportunity_cost=OpportunityCost(
            cash_to_invest=round(cash_to_invest, 2),
            projected_value=round(projected, 2),
            opportunity_loss=round(loss, 2),
            interest_saved=ref.total_interest,
            net_benefit=round(net_benefit, 2),
            is_lump_sum_better=net_benefit > 0,
        ),
    )
