from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any

from vehicle_scenarios.config import DEFAULT_ASSUMPTIONS, EngineAssumptions
from vehicle_scenarios.parsing import parse_money

logger = logging.getLogger(__name__)

MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 850


class CreditTier(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    BAD = "bad"

    @classmethod
    def from_label(cls, label: Any) -> CreditTier | None:
        """Parse a self-reported bucket ("Excellent", "good", ...). Unknown labels give None."""
        if not isinstance(label, str):
            return None
        try:
            return cls(label.strip().lower())
        except ValueError:
            return None


class VehicleType(str, Enum):
    NEW = "new"
    USED = "used"

    @classmethod
    def parse(cls, value: Any) -> VehicleType:
        if isinstance(value, VehicleType):
            return value
        if value is None:
            return cls.NEW
        label = value.strip().lower() if isinstance(value, str) else None
        if label in ("new", "used"):
            return cls(label)
        logger.warning("unknown vehicle type %r; pricing as new", value)
        return cls.NEW


# Score floors, best tier first.
TIER_FLOORS: tuple[tuple[int, CreditTier], ...] = (
    (750, CreditTier.EXCELLENT),
    (700, CreditTier.GOOD),
    (650, CreditTier.FAIR),
    (600, CreditTier.POOR),
)

NEW_VEHICLE_BASE_APR: dict[CreditTier, float] = {
    CreditTier.EXCELLENT: 0.035,
    CreditTier.GOOD: 0.055,
    CreditTier.FAIR: 0.085,
    CreditTier.POOR: 0.135,
    CreditTier.BAD: 0.185,
}


def _coerce_score(credit_score: Any) -> float | None:
    if isinstance(credit_score, str):
        return parse_money(credit_score)
    if isinstance(credit_score, bool) or not isinstance(credit_score, (int, float)):
        return None
    if not math.isfinite(credit_score):
        return None
    return float(credit_score)


def resolve_credit_tier(credit_score: Any) -> CreditTier:
    """
    Map a bureau-style score to a tier.

    Missing, NaN or non-numeric scores resolve to the worst tier. Scores outside
    300-850 are clamped into range first.
    """
    score = _coerce_score(credit_score)
    if score is None:
        logger.warning("credit score %r unusable; resolving to %s tier", credit_score, CreditTier.BAD.value)
        return CreditTier.BAD
    score = min(max(score, MIN_CREDIT_SCORE), MAX_CREDIT_SCORE)
    for floor, tier in TIER_FLOORS:
        if score >= floor:
            return tier
    return CreditTier.BAD


def apr_for_tier(
    tier: CreditTier,
    vehicle_type: Any = VehicleType.NEW,
    *,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> float:
    apr = NEW_VEHICLE_BASE_APR[tier]
    if VehicleType.parse(vehicle_type) is VehicleType.USED:
        apr += assumptions.used_vehicle_apr_premium
    return round(apr, 6)


def apr_for_credit_score(
    credit_score: Any,
    vehicle_type: Any = VehicleType.NEW,
    *,
    assumptions: EngineAssumptions = DEFAULT_ASSUMPTIONS,
) -> float:
    """APR as a decimal fraction (0.055 for 5.5%)."""
    return apr_for_tier(resolve_credit_tier(credit_score), vehicle_type, assumptions=assumptions)
