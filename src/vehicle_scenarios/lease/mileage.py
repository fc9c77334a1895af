from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from vehicle_scenarios.errors import ScenarioInputError
from vehicle_scenarios.lease.options import LeaseOption
from vehicle_scenarios.parsing import parse_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MileageAnalysis:
    allowed_miles: int
    projected_miles: int
    excess_miles: int
    excess_fees: float
    is_overage: bool
    utilization_percentage: int | None  # None when the lease allows no miles


def analyze_mileage(estimated_annual_miles: Any, lease: LeaseOption) -> MileageAnalysis:
    """
    Project lease-end mileage against the allowance.

    A missing or unparsable estimate is treated as driving exactly the allowance.
    """
    annual = parse_money(estimated_annual_miles)
    if annual is None:
        logger.warning(
            "annual mileage %r unusable; assuming the lease allowance of %s",
            estimated_annual_miles,
            lease.mileage_allowance,
        )
        annual = float(lease.mileage_allowance)
    elif annual < 0:
        raise ScenarioInputError("estimated_annual_miles must be >= 0")

    years = lease.term_months / 12.0
    allowed = lease.mileage_allowance * years
    projected = annual * years
    excess_miles = int(round(max(0.0, projected - allowed)))

    if allowed > 0:
        utilization: int | None = int(round(projected / allowed * 100))
    else:
        utilization = None

    return MileageAnalysis(
        allowed_miles=int(round(allowed)),
        projected_miles=int(round(projected)),
        excess_miles=excess_miles,
        excess_fees=round(excess_miles * lease.excess_mileage_fee, 2),
        is_overage=excess_miles > 0,
        utilization_percentage=utilization,
    )
