from __future__ import annotations

import numpy as np

from vehicle_scenarios.errors import ScenarioInputError

FIRST_YEAR_LOSS = 0.15  # linear over months 0-12
LATER_ANNUAL_RETENTION = 0.90  # compounding after month 12


def depreciation_curve(vehicle_price: float, months: int | np.ndarray) -> np.ndarray:
    """
    Market value of a vehicle at each month.

    `months` is either a horizon (values for 0..months inclusive) or an array of
    month indices.
    """
    if vehicle_price < 0:
        raise ScenarioInputError("vehicle_price must be >= 0")
    m = np.arange(int(months) + 1, dtype=float) if np.isscalar(months) else np.asarray(months, dtype=float)
    if np.any(m < 0):
        raise ScenarioInputError("months must be >= 0")

    first_year = vehicle_price * (1.0 - FIRST_YEAR_LOSS * m / 12.0)
    later = vehicle_price * (1.0 - FIRST_YEAR_LOSS) * LATER_ANNUAL_RETENTION ** ((m - 12.0) / 12.0)
    return np.where(m <= 12.0, first_year, later)


def vehicle_value_at(vehicle_price: float, month: int) -> float:
    return float(depreciation_curve(vehicle_price, np.array([month]))[0])
