from __future__ import annotations

import math
from dataclasses import dataclass

from vehicle_scenarios.errors import ScenarioInputError

BASE_INSURANCE = 1200.0  # per year, grows 3% of base each year
INSURANCE_GROWTH = 0.03
REGISTRATION = 150.0  # per year


@dataclass(frozen=True)
class OwnershipYear:
    year: int
    purchase_cost: float
    maintenance: float
    insurance: float
    registration: float
    total: float


def _maintenance(year: int) -> float:
    if year == 0:
        return 500.0
    if year <= 3:
        return 800.0 + 200.0 * year
    return 1500.0 + 300.0 * (year - 3)


def ownership_costs(vehicle_price: float, *, years: int = 5) -> tuple[OwnershipYear, ...]:
    """Year-by-year running costs of a vehicle bought outright; year 0 is the purchase year."""
    if not math.isfinite(vehicle_price) or vehicle_price <= 0:
        raise ScenarioInputError("vehicle_price must be finite and > 0")
    if years < 0:
        raise ScenarioInputError("years must be >= 0")

    rows = []
    for year in range(years + 1):
        purchase = float(vehicle_price) if year == 0 else 0.0
        maintenance = _maintenance(year)
        insurance = round(BASE_INSURANCE * (1.0 + INSURANCE_GROWTH * year), 2)
        rows.append(
            OwnershipYear(
                year=year,
                purchase_cost=round(purchase, 2),
                maintenance=maintenance,
                insurance=insurance,
                registration=REGISTRATION,
                total=round(purchase + maintenance + insurance + REGISTRATION, 2),
            )
        )
    return tuple(rows)
