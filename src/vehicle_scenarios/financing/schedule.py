from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import accumulate
from typing import NamedTuple

from vehicle_scenarios.config import DEFAULT_ASSUMPTIONS, EngineAssumptions
from vehicle_scenarios.errors import ScenarioInputError
from vehicle_scenarios.financing.loan import FinancingOption
from vehicle_scenarios.resale.depreciation import depreciation_curve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquityPoint:
    month: int
    vehicle_value: float
    remaining_balance: float
    equity: float
    is_breakeven: bool = False


@dataclass(frozen=True)
class PaymentBreakdownPoint:
    month: int
    monthly_payment: float
    principal_payment: float
    interest_payment: float
    principal_percentage: int
    interest_percentage: int
    remaining_balance: float


class _LoanState(NamedTuple):
    month: int
    interest: float
    principal: float
    balance: float


def _amortize(*, principal: float, apr: float, payment: float, months: int) -> tuple[_LoanState, ...]:
    """
    Fold the loan forward one payment at a time.

    Element k is the state after k payments; element 0 is the opening balance.
    """
    rate = apr / 12.0

    def pay(prev: _LoanState, month: int) -> _LoanState:
        interest = prev.balance * rate
        principal_paid = payment - interest
        return _LoanState(month, interest, principal_paid, max(0.0, prev.balance - principal_paid))

    opening = _LoanState(0, 0.0, 0.0, float(principal))
    return tuple(accumulate(range(1, months + 1), pay, initial=opening))


def equity_timeline(option: FinancingOption, vehicle_price: float) -> tuple[EquityPoint, ...]:
    """
    Vehicle value vs. loan balance for months 0..term_months.

    The first month after 0 where equity turns positive is flagged as breakeven.
    """
    if vehicle_price <= 0:
        raise ScenarioInputError("vehicle_price must be > 0")

    states = _amortize(
        principal=option.loan_amount,
        apr=option.apr,
        payment=option.monthly_payment,
        months=option.term_months,
    )
    values = depreciation_curve(vehicle_price, option.term_months)

    points: list[EquityPoint] = []
    prev_equity = 0.0
    for state, value in zip(states, values):
        equity = max(0.0, float(value) - state.balance)
        points.append(
            EquityPoint(
                month=state.month,
                vehicle_value=round(float(value), 2),
                remaining_balance=round(state.balance, 2),
                equity=round(equity, 2),
                is_breakeven=state.month > 0 and equity > 0 and prev_equity <= 0,
            )
        )
        prev_equity = equity

    logger.debug(
        "equity timeline projected",
        extra={"term_months": option.term_months, "breakeven_month": breakeven_month(points)},
    )
    return tuple(points)


def breakeven_month(points: tuple[EquityPoint, ...] | list[EquityPoint]) -> int | None:
    for p in points:
        if p.is_breakeven:
            return p.month
    return None


def payment_breakdown(
    option: FinancingOption,
    *,
    horizon_months: int | None = None,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> tuple[PaymentBreakdownPoint, ...]:
    """
    Principal/interest split of each payment.

    Covers the configured horizon (24 months by default) or the full term if
    shorter. Pass `horizon_months=option.term_months` for the whole schedule.
    """
    horizon = assumptions.breakdown_horizon_months if horizon_months is None else horizon_months
    if horizon <= 0:
        raise ScenarioInputError("horizon_months must be > 0")
    months = min(option.term_months, horizon)

    payment = option.monthly_payment
    states = _amortize(principal=option.loan_amount, apr=option.apr, payment=payment, months=months)

    points = []
    for state in states[1:]:
        if payment > 0:
            principal_pct = round(state.principal / payment * 100)
            interest_pct = round(state.interest / payment * 100)
        else:
            principal_pct = interest_pct = 0
        points.append(
            PaymentBreakdownPoint(
                month=state.month,
                monthly_payment=payment,
                principal_payment=round(state.principal, 2),
                interest_payment=round(state.interest, 2),
                principal_percentage=int(principal_pct),
                interest_percentage=int(interest_pct),
                remaining_balance=round(state.balance, 2),
            )
        )
    return tuple(points)
