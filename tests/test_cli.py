from __future__ import annotations

import json
import logging

import pandas as pd
import pytest

from vehicle_scenarios.cli import main


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _run(capsys, argv: list[str]) -> dict:
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


def test_finance_command(capsys):
    out = _run(capsys, ["finance", "--vehicle-price", "30000", "--down-payment", "3000", "--credit-score", "720"])
    assert out["credit_tier"] == "good"
    assert out["apr"] == 0.055
    assert [o["term_months"] for o in out["options"]] == [36, 48, 60, 72]
    assert out["options"][1]["loan_amount"] == 27_000


def test_lease_command_includes_mileage(capsys):
    out = _run(
        capsys,
        ["lease", "--vehicle-price", "30000", "--credit-score", "720", "--annual-miles", "18000"],
    )
    by_term = {o["term_months"]: o for o in out["options"]}
    assert by_term[36]["residual_value"] == 16_500
    assert by_term[36]["mileage"]["excess_miles"] == 18_000


def test_scenario_command_writes_csv(capsys, tmp_path):
    equity_csv = tmp_path / "out" / "equity.csv"
    breakdown_csv = tmp_path / "out" / "breakdown.csv"
    out = _run(
        capsys,
        [
            "scenario",
            "--vehicle-price",
            "30000",
            "--down-payment",
            "3000",
            "--credit-score",
            "720",
            "--annual-income",
            "90000",
            "--equity-csv",
            str(equity_csv),
            "--breakdown-csv",
            str(breakdown_csv),
        ],
    )
    assert "equity_timeline" not in out
    assert out["equity_csv"]["n_rows"] == 49
    assert out["breakdown_csv"]["n_rows"] == 24

    df = pd.read_csv(equity_csv)
    assert list(df.columns) == ["month", "vehicle_value", "remaining_balance", "equity", "is_breakeven"]
    assert df["month"].tolist() == list(range(49))
    assert len(pd.read_csv(breakdown_csv)) == 24


def test_lump_sum_command(capsys):
    out = _run(
        capsys,
        ["lump-sum", "--vehicle-price", "30000", "--current-cash", "50000", "--monthly-expenses", "3000"],
    )
    assert out["analysis"]["financial_health_score"] == "good"
    assert len(out["ownership_costs"]) == 6


def test_afford_command(capsys):
    out = _run(
        capsys,
        [
            "afford",
            "--vehicle-price",
            "$26,420 - $28,500",
            "--monthly-payment",
            "$450",
            "--annual-income",
            "90000",
            "--credit-tier",
            "excellent",
            "--employment-status",
            "full-time",
        ],
    )
    assert out["affordability"]["score"] == 100
    assert out["affordability"]["rating"] == "Excellent Fit"
    assert out["budget"]["max_monthly_car_expenses"] == 750


def test_assumptions_override(capsys, tmp_path):
    path = tmp_path / "assumptions.json"
    path.write_text(json.dumps({"used_vehicle_apr_premium": 0.02}), encoding="utf-8")
    out = _run(
        capsys,
        [
            "finance",
            "--vehicle-price",
            "30000",
            "--credit-score",
            "760",
            "--vehicle-type",
            "used",
            "--assumptions-json",
            str(path),
        ],
    )
    assert out["apr"] == 0.055


def test_invalid_input_exits():
    with pytest.raises(SystemExit, match="vehicle_price"):
        main(["finance", "--vehicle-price", "-5"])


def test_unknown_assumption_exits(tmp_path):
    path = tmp_path / "assumptions.json"
    path.write_text(json.dumps({"nope": 1}), encoding="utf-8")
    with pytest.raises(SystemExit, match="nope"):
        main(["finance", "--vehicle-price", "30000", "--assumptions-json", str(path)])


@pytest.mark.parametrize(
    "overrides",
    [{"loan_terms": ["abc"]}, {"expected_return": "0.05"}, {"residual_fractions": [1]}],
)
def test_mistyped_assumption_exits(tmp_path, overrides):
    path = tmp_path / "assumptions.json"
    path.write_text(json.dumps(overrides), encoding="utf-8")
    with pytest.raises(SystemExit, match="invalid input"):
        main(["finance", "--vehicle-price", "30000", "--assumptions-json", str(path)])


def test_unknown_log_level_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--log-level", "LOUD", "finance", "--vehicle-price", "30000"])
    assert exc.value.code == 2
    assert "--log-level" in capsys.readouterr().err
