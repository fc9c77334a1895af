from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from vehicle_scenarios.affordability.budget import PaymentAssessment, assess_payment
from vehicle_scenarios.config import DEFAULT_ASSUMPTIONS, EngineAssumptions
from vehicle_scenarios.credit.tiers import CreditTier, VehicleType, apr_for_tier, resolve_credit_tier
from vehicle_scenarios.errors import ScenarioInputError
from vehicle_scenarios.financing.loan import FinancingOption, financing_options, option_for_term
from vehicle_scenarios.financing.schedule import (
    EquityPoint,
    PaymentBreakdownPoint,
    breakeven_month,
    equity_timeline,
    payment_breakdown,
)
from vehicle_scenarios.lease.comparison import BalanceMethod, LeaseVsBuyComparison, compare_lease_vs_buy
from vehicle_scenarios.lease.mileage import MileageAnalysis, analyze_mileage
from vehicle_scenarios.lease.options import LeaseOption, lease_options
from vehicle_scenarios.parsing import parse_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioInput:
    vehicle_price: float
    down_payment: float = 0.0
    credit_score: Any = None
    annual_income: Any = None
    vehicle_type: VehicleType = VehicleType.NEW

    def __post_init__(self) -> None:
        if isinstance(self.vehicle_price, bool) or not isinstance(self.vehicle_price, (int, float)):
            raise ScenarioInputError("vehicle_price must be a number")
        if not math.isfinite(self.vehicle_price) or self.vehicle_price <= 0:
            raise ScenarioInputError("vehicle_price must be finite and > 0")
        if isinstance(self.down_payment, bool) or not isinstance(self.down_payment, (int, float)):
            raise ScenarioInputError("down_payment must be a number")
        if not math.isfinite(self.down_payment) or not (0 <= self.down_payment <= self.vehicle_price):
            raise ScenarioInputError("down_payment must be in [0, vehicle_price]")
        object.__setattr__(self, "vehicle_type", VehicleType.parse(self.vehicle_type))

    @property
    def loan_amount(self) -> float:
        return float(self.vehicle_price - self.down_payment)

    @property
    def annual_income_value(self) -> float | None:
        return parse_money(self.annual_income)


@dataclass(frozen=True)
class ScenarioReport:
    credit_tier: CreditTier
    apr: float
    financing_options: tuple[FinancingOption, ...]
    lease_options: tuple[LeaseOption, ...]
    selected_financing: FinancingOption
    equity_timeline: tuple[EquityPoint, ...]
    breakeven_month: int | None
    payment_breakdown: tuple[PaymentBreakdownPoint, ...]
    selected_lease: LeaseOption
    lease_vs_buy: LeaseVsBuyComparison
    mileage: MileageAnalysis
    payment_assessment: PaymentAssessment


def _monthly_income(scenario: ScenarioInput) -> float | None:
    annual = scenario.annual_income_value
    return None if annual is None else annual / 12.0


def _pick(options: tuple, term_months: int | None, default_term: int, kind: str):
    wanted = default_term if term_months is None else term_months
    for opt in options:
        if opt.term_months == wanted:
            return opt
    raise ScenarioInputError(f"no {kind} option with a {wanted}-month term")


def build_scenario_report(
    scenario: ScenarioInput,
    *,
    loan_term_months: int | None = None,
    lease_term_months: int | None = None,
    estimated_annual_miles: Any = None,
    balance_method: BalanceMethod = BalanceMethod.EXACT,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> ScenarioReport:
    """
    Run every financing and lease calculation for one scenario.

    The selected loan defaults to the reference term (48 months) and the
    selected lease to 36 months, or the middle configured term when 36 is not
    offered. The lease-vs-buy comparison uses the loan with the lease's term
    when one exists, otherwise the selected loan.
    """
    tier = resolve_credit_tier(scenario.credit_score)
    apr = apr_for_tier(tier, scenario.vehicle_type, assumptions=assumptions)

    loans = financing_options(
        loan_amount=scenario.loan_amount,
        apr=apr,
        down_payment=scenario.down_payment,
        assumptions=assumptions,
    )
    leases = lease_options(vehicle_price=scenario.vehicle_price, apr=apr, assumptions=assumptions)

    loan = _pick(loans, loan_term_months, assumptions.reference_term_months, "financing")
    lease_terms = sorted(assumptions.lease_terms)
    default_lease_term = 36 if 36 in lease_terms else lease_terms[len(lease_terms) // 2]
    lease = _pick(leases, lease_term_months, default_lease_term, "lease")

    try:
        comparable = option_for_term(loans, lease.term_months)
    except ScenarioInputError:
        comparable = loan

    timeline = equity_timeline(loan, scenario.vehicle_price)
    logger.debug(
        "scenario report built",
        extra={"credit_tier": tier.value, "apr": apr, "loan_term": loan.term_months, "lease_term": lease.term_months},
    )
    return ScenarioReport(
        credit_tier=tier,
        apr=apr,
        financing_options=loans,
        lease_options=leases,
        selected_financing=loan,
        equity_timeline=timeline,
        breakeven_month=breakeven_month(timeline),
        payment_breakdown=payment_breakdown(loan, assumptions=assumptions),
        selected_lease=lease,
        lease_vs_buy=compare_lease_vs_buy(lease, comparable, balance_method=balance_method),
        mileage=analyze_mileage(estimated_annual_miles, lease),
        payment_assessment=assess_payment(loan.monthly_payment, _monthly_income(scenario)),
    )
