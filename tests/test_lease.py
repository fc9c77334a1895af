from __future__ import annotations

import pytest

from vehicle_scenarios.config import EngineAssumptions
from vehicle_scenarios.errors import ScenarioInputError
from vehicle_scenarios.financing.loan import financing_option, remaining_balance
from vehicle_scenarios.lease.comparison import BalanceMethod, compare_lease_vs_buy
from vehicle_scenarios.lease.options import lease_option, lease_options, money_factor_from_apr


def test_residual_for_36_month_lease():
    opt = lease_option(vehicle_price=30_000, apr=0.055, term_months=36)
    assert opt.residual_value == 16_500


def test_lease_payment_formula():
    opt = lease_option(vehicle_price=30_000, apr=0.055, term_months=36)
    expected = (30_000 - 16_500) / 36 + (30_000 + 16_500) * (0.055 / 24)
    assert abs(opt.monthly_payment - expected) < 0.01
    assert abs(opt.upfront_costs - (expected + 750)) < 0.01
    assert abs(opt.total_payments - expected * 36) < 0.01
    assert opt.money_factor == 0.00229
    assert opt.apr_equivalent == 0.055
    assert opt.mileage_allowance == 12_000
    assert opt.excess_mileage_fee == 0.25


def test_lease_options_cover_all_terms():
    opts = lease_options(vehicle_price=40_000, apr=0.085)
    assert [o.term_months for o in opts] == [24, 36, 48]
    assert [o.residual_value for o in opts] == [26_000, 22_000, 18_000]
    for o in opts:
        assert 0 < o.residual_value < o.vehicle_price


def test_zero_apr_lease_is_pure_depreciation():
    opt = lease_option(vehicle_price=24_000, apr=0.0, term_months=24)
    assert opt.money_factor == 0.0
    assert abs(opt.monthly_payment - (24_000 * 0.35) / 24) < 0.01


def test_money_factor_is_apr_over_24():
    assert abs(money_factor_from_apr(0.06) - 0.0025) < 1e-12


def test_lease_contract_violations():
    with pytest.raises(ScenarioInputError):
        lease_option(vehicle_price=-1, apr=0.05, term_months=36)
    with pytest.raises(ScenarioInputError):
        lease_option(vehicle_price=30_000, apr=0.05, term_months=30)


def test_residuals_follow_assumptions():
    a = EngineAssumptions(lease_terms=(36,), residual_fractions={36: 0.6})
    (opt,) = lease_options(vehicle_price=30_000, apr=0.05, assumptions=a)
    assert opt.residual_value == 18_000


def test_same_term_comparison_has_no_remaining_balance():
    lease = lease_option(vehicle_price=30_000, apr=0.055, term_months=36)
    loan = financing_option(loan_amount=27_000, apr=0.055, term_months=36, down_payment=3_000)
    cmp = compare_lease_vs_buy(lease, loan)

    assert cmp.term_months == 36
    assert cmp.remaining_balance == 0.0
    assert cmp.equity_built == 16_500
    assert cmp.vehicle_value_at_end == 16_500
    assert abs(cmp.lease_cost - (lease.total_payments + lease.upfront_costs)) < 0.01
    assert abs(cmp.finance_cost - (loan.monthly_payment * 36 + 3_000)) < 0.01
    assert abs(cmp.lease_advantage - (cmp.finance_cost - cmp.lease_cost)) < 0.01
    assert cmp.cheaper_path == ("lease" if cmp.lease_advantage > 0 else "finance")

    legacy = compare_lease_vs_buy(lease, loan, balance_method=BalanceMethod.LEGACY_APPROXIMATION)
    assert legacy.remaining_balance < 1.0


def test_longer_loan_leaves_balance_at_lease_end():
    lease = lease_option(vehicle_price=30_000, apr=0.055, term_months=36)
    loan = financing_option(loan_amount=30_000, apr=0.055, term_months=60)

    exact = compare_lease_vs_buy(lease, loan)
    expected = remaining_balance(principal=30_000, apr=0.055, term_months=60, payments_made=36)
    assert abs(exact.remaining_balance - expected) < 0.01
    assert abs(exact.equity_built - max(0.0, 16_500 - expected)) < 0.02
    assert abs(exact.finance_cost - loan.monthly_payment * 36) < 0.01

    legacy = compare_lease_vs_buy(lease, loan, balance_method=BalanceMethod.LEGACY_APPROXIMATION)
    assert legacy.remaining_balance > 0
    assert legacy.remaining_balance != exact.remaining_balance
