from __future__ import annotations

import pytest

from vehicle_scenarios.cash.lump_sum import analyze_lump_sum, future_value, reference_financing
from vehicle_scenarios.cash.ownership import ownership_costs
from vehicle_scenarios.config import EngineAssumptions
from vehicle_scenarios.errors import ScenarioInputError


def test_cash_needed_and_health():
    a = analyze_lump_sum(vehicle_price=30_000, current_cash=50_000, monthly_expenses=3_000)
    assert a.taxes_and_fees == 2_400
    assert a.total_cash_needed == 32_400
    assert a.remaining_cash == 17_600
    assert a.emergency_fund_needed == 18_000
    assert a.financial_health_score == "good"


def test_health_classification_edges():
    excellent = analyze_lump_sum(vehicle_price=10_000, current_cash=30_800, monthly_expenses=3_000)
    assert excellent.financial_health_score == "excellent"
    concerning = analyze_lump_sum(vehicle_price=10_000, current_cash=15_000, monthly_expenses=3_000)
    assert concerning.financial_health_score == "concerning"


def test_reference_financing_uses_720_score_and_20_percent_down():
    ref = reference_financing(30_000)
    assert ref.term_months == 48
    assert ref.down_payment == 6_000
    assert ref.loan_amount == 24_000
    assert ref.apr == 0.055


def test_opportunity_cost_against_reference_loan():
    a = analyze_lump_sum(vehicle_price=30_000, current_cash=50_000, monthly_expenses=3_000)
    oc = a.opportunity_cost
    ref = reference_financing(30_000)

    assert oc.cash_to_invest == 26_400
    projected = future_value(26_400, annual_return=0.07, months=48)
    assert abs(oc.projected_value - projected) < 0.01
    assert abs(oc.opportunity_loss - (projected - 26_400)) < 0.01
    assert oc.interest_saved == ref.total_interest
    assert abs(oc.net_benefit - (ref.total_interest - (projected - 26_400))) < 0.02
    assert oc.is_lump_sum_better is False


def test_zero_expected_return_favors_cash():
    a = analyze_lump_sum(vehicle_price=30_000, current_cash=50_000, monthly_expenses=3_000, expected_return=0.0)
    assert a.opportunity_cost.opportunity_loss == 0
    assert a.opportunity_cost.net_benefit == a.opportunity_cost.interest_saved
    assert a.opportunity_cost.is_lump_sum_better is True


def test_reference_score_is_overridable():
    base = analyze_lump_sum(vehicle_price=30_000, current_cash=50_000, monthly_expenses=3_000)
    better_credit = analyze_lump_sum(
        vehicle_price=30_000,
        current_cash=50_000,
        monthly_expenses=3_000,
        assumptions=EngineAssumptions(reference_credit_score=780),
    )
    assert better_credit.opportunity_cost.interest_saved < base.opportunity_cost.interest_saved


def test_missing_cash_and_expenses_default_from_income():
    a = analyze_lump_sum(vehicle_price=30_000, monthly_income="$5,000")
    assert a.remaining_cash == 60_000 - 32_400
    assert a.emergency_fund_needed == 21_000
    assert a.financial_health_score == "excellent"


def test_nothing_known_about_finances_is_concerning():
    a = analyze_lump_sum(vehicle_price=30_000)
    assert a.remaining_cash == -32_400
    assert a.emergency_fund_needed == 0
    assert a.financial_health_score == "concerning"


def test_lump_sum_contract_violations():
    with pytest.raises(ScenarioInputError):
        analyze_lump_sum(vehicle_price=0)
    with pytest.raises(ScenarioInputError):
        analyze_lump_sum(vehicle_price=30_000, current_cash=-1)
    with pytest.raises(ScenarioInputError, match="current_cash"):
        analyze_lump_sum(vehicle_price=30_000, current_cash="-5,000")
    with pytest.raises(ScenarioInputError, match="monthly_income"):
        analyze_lump_sum(vehicle_price=30_000, monthly_income="($4,000)")
    with pytest.raises(ScenarioInputError):
        analyze_lump_sum(vehicle_price=30_000, expected_return=float("inf"))


def test_ownership_costs_schedule():
    rows = ownership_costs(30_000)
    assert [r.year for r in rows] == [0, 1, 2, 3, 4, 5]
    assert rows[0].purchase_cost == 30_000
    assert rows[0].total == 30_000 + 500 + 1_200 + 150
    assert rows[2].maintenance == 1_200
    assert rows[2].insurance == 1_272
    assert rows[4].maintenance == 1_800
    assert rows[5].maintenance == 2_100
    assert rows[5].insurance == 1_380
    assert all(r.purchase_cost == 0 for r in rows[1:])


def test_ownership_costs_rejects_bad_price():
    with pytest.raises(ScenarioInputError):
        ownership_costs(-100)
