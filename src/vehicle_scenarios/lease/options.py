from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from vehicle_scenarios.config import DEFAULT_ASSUMPTIONS, EngineAssumptions
from vehicle_scenarios.errors import ScenarioInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaseOption:
    term_months: int
    vehicle_price: float
    residual_value: float
    monthly_payment: float
    total_payments: float
    money_factor: float
    apr_equivalent: float
    upfront_costs: float
    mileage_allowance: int  # miles per year
    excess_mileage_fee: float  # per mile


def money_factor_from_apr(apr: float) -> float:
    # Industry approximation: MF ~= APR% / 2400, i.e. apr / 24 for a decimal APR.
    return apr / 24.0


def lease_option(
    *,
    vehicle_price: float,
    apr: float,
    term_months: int,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> LeaseOption:
    if not math.isfinite(vehicle_price) or vehicle_price <= 0:
        raise ScenarioInputError("vehicle_price must be finite and > 0")
    if not math.isfinite(apr) or apr < 0:
        raise ScenarioInputError("apr must be finite and >= 0")
    if term_months <= 0:
        raise ScenarioInputError("term_months must be > 0")
    if term_months not in assumptions.residual_fractions:
        raise ScenarioInputError(f"no residual fraction configured for a {term_months}-month lease")

    residual = vehicle_price * assumptions.residual_fractions[term_months]
    mf = money_factor_from_apr(apr)

    depreciation_payment = (vehicle_price - residual) / term_months
    finance_payment = (vehicle_price + residual) * mf
    pmt = depreciation_payment + finance_payment

    # First payment is due at signing along with deposit and fees.
    upfront = pmt + assumptions.security_deposit + assumptions.lease_fees

    return LeaseOption(
        term_months=term_months,
        vehicle_price=round(float(vehicle_price), 2),
        residual_value=round(residual, 2),
        monthly_payment=round(pmt, 2),
        total_payments=round(pmt * term_months, 2),
        money_factor=round(mf, 5),
        apr_equivalent=apr,
        upfront_costs=round(upfront, 2),
        mileage_allowance=assumptions.mileage_allowance,
        excess_mileage_fee=assumptions.excess_mileage_fee,
    )


def lease_options(
    *,
    vehicle_price: float,
    apr: float,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> tuple[LeaseOption, ...]:
    """One lease option per configured term, shortest first."""
    options = tuple(
        lease_option(vehicle_price=vehicle_price, apr=apr, term_months=term, assumptions=assumptions)
        for term in sorted(assumptions.lease_terms)
    )
    logger.debug("lease options computed", extra={"vehicle_price": vehicle_price, "apr": apr})
    return options
