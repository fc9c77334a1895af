from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from vehicle_scenarios.credit.tiers import CreditTier
from vehicle_scenarios.parsing import parse_money

logger = logging.getLogger(__name__)

INCOME_TO_PRICE = "income_to_price"
CREDIT = "credit"
EMPLOYMENT = "employment"
PAYMENT_TO_INCOME = "payment_to_income"

MAX_POINTS = {INCOME_TO_PRICE: 30, CREDIT: 25, EMPLOYMENT: 20, PAYMENT_TO_INCOME: 25}

# (upper ratio bound, points, status), checked in order.
_PRICE_BANDS = ((0.50, 30, "excellent"), (0.75, 22, "good"), (1.00, 15, "fair"))
_PAYMENT_BANDS = ((0.10, 25, "excellent"), (0.15, 20, "good"), (0.20, 12, "caution"))

_CREDIT_POINTS = {CreditTier.EXCELLENT: 25, CreditTier.GOOD: 20, CreditTier.FAIR: 12}
_EMPLOYMENT_POINTS = {"full-time": 20, "self-employed": 15, "part-time": 10}

_RATINGS = ((80, "Excellent Fit"), (65, "Good Fit"), (50, "Fair Fit"))


@dataclass(frozen=True)
class CriterionScore:
    score: int
    max_score: int
    status: str
    detail: str


@dataclass(frozen=True)
class AffordabilityScore:
    score: int
    rating: str
    earned: int
    possible: int
    breakdown: dict[str, CriterionScore] = field(default_factory=dict)


def _banded(ratio: float, bands: tuple[tuple[float, int, str], ...], fallback: str) -> tuple[int, str]:
    for bound, points, status in bands:
        if ratio <= bound:
            return points, status
    return 5, fallback


def _present(label: Any) -> str | None:
    if isinstance(label, CreditTier):
        return label.value
    if not isinstance(label, str) or not label.strip():
        return None
    return label.strip().lower()


def _positive(value: float | None) -> float | None:
    return value if value is not None and value > 0 else None


def _income_to_price(price: float, income: float) -> CriterionScore:
    ratio = price / income
    points, status = _banded(ratio, _PRICE_BANDS, "poor")
    detail = f"Vehicle price is {round(ratio * 100)}% of annual income"
    return CriterionScore(points, MAX_POINTS[INCOME_TO_PRICE], status, detail)


def _credit(label: str) -> CriterionScore:
    tier = CreditTier.from_label(label)
    if tier is None:
        return CriterionScore(5, MAX_POINTS[CREDIT], "unrecognized", f"Credit tier: {label}")
    points = _CREDIT_POINTS.get(tier, 5)
    status = tier.value
    return CriterionScore(points, MAX_POINTS[CREDIT], status, f"Credit tier: {label}")


def _employment(label: str) -> CriterionScore:
    status = label.replace("_", "-").replace(" ", "-")
    points = _EMPLOYMENT_POINTS.get(status, 5)
    return CriterionScore(points, MAX_POINTS[EMPLOYMENT], status, f"Employment: {status.replace('-', ' ')}")


def _payment_to_income(payment: float, annual_income: float) -> CriterionScore:
    ratio = payment / (annual_income / 12.0)
    points, status = _banded(ratio, _PAYMENT_BANDS, "warning")
    detail = f"Monthly payment is {round(ratio * 100)}% of monthly income"
    return CriterionScore(points, MAX_POINTS[PAYMENT_TO_INCOME], status, detail)


def rating_for(score: int) -> str:
    for floor, rating in _RATINGS:
        if score >= floor:
            return rating
    return "High Risk"


def score_affordability(
    *,
    vehicle_price: Any = None,
    monthly_payment: Any = None,
    annual_income: Any = None,
    credit_tier: Any = None,
    employment_status: Any = None,
) -> AffordabilityScore:
    """
    Weighted 0-100 fit score for a specific vehicle against a buyer's profile.

    Each criterion is scored independently against its own cap. A criterion
    whose inputs are missing or unusable is skipped: it contributes
    neither points nor its cap, so a thin profile is judged only on what is known.
    Prices may be strings such as "$26,420 - $28,500"; the first bound is used.
    With nothing scorable the result is 0 / "High Risk" with an empty breakdown.
    """
    price = _positive(parse_money(vehicle_price))
    payment = parse_money(monthly_payment)
    if payment is not None and payment < 0:
        payment = None
    income = _positive(parse_money(annual_income))

    breakdown: dict[str, CriterionScore] = {}
    if price is not None and income is not None:
        breakdown[INCOME_TO_PRICE] = _income_to_price(price, income)
    if payment is not None and income is not None:
        breakdown[PAYMENT_TO_INCOME] = _payment_to_income(payment, income)

    credit_label = _present(credit_tier)
    if credit_label is not None:
        breakdown[CREDIT] = _credit(credit_label)
    employment_label = _present(employment_status)
    if employment_label is not None:
        breakdown[EMPLOYMENT] = _employment(employment_label)

    skipped = sorted(set(MAX_POINTS) - set(breakdown))
    if skipped:
        logger.info("affordability criteria skipped for missing inputs", extra={"skipped": skipped})

    earned = sum(c.score for c in breakdown.values())
    possible = sum(c.max_score for c in breakdown.values())
    score = round(earned / possible * 100) if possible else 0
    score = min(100, max(0, int(score)))

    return AffordabilityScore(
        score=score,
        rating=rating_for(score),
        earned=earned,
        possible=possible,
        breakdown={k: breakdown[k] for k in MAX_POINTS if k in breakdown},
    )
