from __future__ import annotations

import pytest

from vehicle_scenarios.config import EngineAssumptions
from vehicle_scenarios.credit.tiers import (
    CreditTier,
    VehicleType,
    apr_for_credit_score,
    resolve_credit_tier,
)


@pytest.mark.parametrize(
    "score,tier",
    [
        (850, CreditTier.EXCELLENT),
        (750, CreditTier.EXCELLENT),
        (749, CreditTier.GOOD),
        (700, CreditTier.GOOD),
        (699, CreditTier.FAIR),
        (650, CreditTier.FAIR),
        (649, CreditTier.POOR),
        (600, CreditTier.POOR),
        (599, CreditTier.BAD),
        (300, CreditTier.BAD),
    ],
)
def test_tier_boundaries(score, tier):
    assert resolve_credit_tier(score) is tier


def test_good_credit_new_vehicle_rate():
    assert abs(apr_for_credit_score(720) - 0.055) < 1e-12


def test_used_vehicle_adds_one_point():
    for score in (800, 720, 660, 610, 500):
        new = apr_for_credit_score(score, "new")
        used = apr_for_credit_score(score, "used")
        assert abs((used - new) - 0.01) < 1e-9


def test_apr_non_increasing_in_score():
    aprs = [apr_for_credit_score(s) for s in range(300, 851)]
    assert all(a >= b for a, b in zip(aprs, aprs[1:]))


@pytest.mark.parametrize("score", [None, float("nan"), "not-provided", "", [], True])
def test_unusable_scores_degrade_to_worst_tier(score):
    assert resolve_credit_tier(score) is CreditTier.BAD
    assert abs(apr_for_credit_score(score) - 0.185) < 1e-12


def test_numeric_strings_and_out_of_range_scores():
    assert resolve_credit_tier("720") is CreditTier.GOOD
    assert resolve_credit_tier(900) is CreditTier.EXCELLENT
    assert resolve_credit_tier(120) is CreditTier.BAD


def test_premium_comes_from_assumptions():
    a = EngineAssumptions(used_vehicle_apr_premium=0.02)
    assert abs(apr_for_credit_score(760, "used", assumptions=a) - 0.055) < 1e-9


def test_tier_labels():
    assert CreditTier.from_label(" Excellent ") is CreditTier.EXCELLENT
    assert CreditTier.from_label("fair") is CreditTier.FAIR
    assert CreditTier.from_label("not-provided") is None
    assert CreditTier.from_label(None) is None


def test_vehicle_type_parse():
    assert VehicleType.parse("USED") is VehicleType.USED
    assert VehicleType.parse(None) is VehicleType.NEW
    assert VehicleType.parse("truck") is VehicleType.NEW
