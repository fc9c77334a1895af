from __future__ import annotations

import argparse
import json
import os
from dataclasses import asdict
from typing import Any, Iterable

import pandas as pd

from vehicle_scenarios.affordability.budget import recommend_price_range
from vehicle_scenarios.affordability.score import score_affordability
from vehicle_scenarios.cash.lump_sum import analyze_lump_sum
from vehicle_scenarios.cash.ownership import ownership_costs
from vehicle_scenarios.config import DEFAULT_ASSUMPTIONS, EngineAssumptions
from vehicle_scenarios.credit.tiers import apr_for_tier, resolve_credit_tier
from vehicle_scenarios.errors import ScenarioInputError
from vehicle_scenarios.financing.loan import financing_options
from vehicle_scenarios.lease.comparison import BalanceMethod
from vehicle_scenarios.lease.mileage import analyze_mileage
from vehicle_scenarios.lease.options import lease_options
from vehicle_scenarios.observability.logging import setup_logging
from vehicle_scenarios.scenario import ScenarioInput, build_scenario_report


def _mkdirp(path: str) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)


def _emit(out: dict[str, Any]) -> None:
    print(json.dumps(out, indent=2, sort_keys=True))


def _write_csv(rows: Iterable[Any], path: str) -> int:
    df = pd.DataFrame([asdict(r) for r in rows])
    _mkdirp(path)
    df.to_csv(path, index=False)
    return int(len(df))


def _load_assumptions(path: str | None) -> EngineAssumptions:
    if not path:
        return DEFAULT_ASSUMPTIONS
    try:
        with open(path, encoding="utf-8") as fh:
            d = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise SystemExit(f"--assumptions-json could not be read: {e}") from e
    if not isinstance(d, dict):
        raise SystemExit("--assumptions-json must decode to an object/dict")
    return EngineAssumptions.from_mapping(d)


def _scenario(args: argparse.Namespace) -> ScenarioInput:
    return ScenarioInput(
        vehicle_price=args.vehicle_price,
        down_payment=args.down_payment,
        credit_score=args.credit_score,
        annual_income=getattr(args, "annual_income", None),
        vehicle_type=args.vehicle_type,
    )


def cmd_scenario(args: argparse.Namespace) -> int:
    assumptions = _load_assumptions(args.assumptions_json)
    report = build_scenario_report(
        _scenario(args),
        loan_term_months=args.loan_term,
        lease_term_months=args.lease_term,
        estimated_annual_miles=args.annual_miles,
        balance_method=BalanceMethod(args.balance_method),
        assumptions=assumptions,
    )
    out = asdict(report)
    if args.equity_csv:
        out["equity_csv"] = {"path": args.equity_csv, "n_rows": _write_csv(report.equity_timeline, args.equity_csv)}
        del out["equity_timeline"]
    if args.breakdown_csv:
        out["breakdown_csv"] = {
            "path": args.breakdown_csv,
            "n_rows": _write_csv(report.payment_breakdown, args.breakdown_csv),
        }
        del out["payment_breakdown"]
    _emit(out)
    return 0


def cmd_finance(args: argparse.Namespace) -> int:
    assumptions = _load_assumptions(args.assumptions_json)
    scenario = _scenario(args)
    tier = resolve_credit_tier(scenario.credit_score)
    apr = apr_for_tier(tier, scenario.vehicle_type, assumptions=assumptions)
    options = financing_options(
        loan_amount=scenario.loan_amount,
        apr=apr,
        down_payment=scenario.down_payment,
        assumptions=assumptions,
    )
    _emit({"credit_tier": tier.value, "apr": apr, "options": [asdict(o) for o in options]})
    return 0


def cmd_lease(args: argparse.Namespace) -> int:
    assumptions = _load_assumptions(args.assumptions_json)
    scenario = _scenario(args)
    tier = resolve_credit_tier(scenario.credit_score)
    apr = apr_for_tier(tier, scenario.vehicle_type, assumptions=assumptions)
    options = lease_options(vehicle_price=scenario.vehicle_price, apr=apr, assumptions=assumptions)
    _emit(
        {
            "credit_tier": tier.value,
            "apr": apr,
            "options": [
                {**asdict(o), "mileage": asdict(analyze_mileage(args.annual_miles, o))} for o in options
            ],
        }
    )
    return 0


def cmd_lump_sum(args: argparse.Namespace) -> int:
    assumptions = _load_assumptions(args.assumptions_json)
    analysis = analyze_lump_sum(
        vehicle_price=args.vehicle_price,
        current_cash=args.current_cash,
        monthly_income=args.monthly_income,
        monthly_expenses=args.monthly_expenses,
        expected_return=args.expected_return,
        assumptions=assumptions,
    )
    costs = ownership_costs(args.vehicle_price, years=args.ownership_years)
    _emit({"analysis": asdict(analysis), "ownership_costs": [asdict(c) for c in costs]})
    return 0


def cmd_afford(args: argparse.Namespace) -> int:
    score = score_affordability(
        vehicle_price=args.vehicle_price,
        monthly_payment=args.monthly_payment,
        annual_income=args.annual_income,
        credit_tier=args.credit_tier,
        employment_status=args.employment_status,
    )
    budget = recommend_price_range(args.annual_income)
    _emit({"affordability": asdict(score), "budget": asdict(budget) if budget else None})
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--assumptions-json", default=None, help="JSON file overriding engine assumptions.")


def _add_vehicle(p: argparse.ArgumentParser) -> None:
    p.add_argument("--vehicle-price", type=float, required=True)
    p.add_argument("--down-payment", type=float, default=0.0)
    p.add_argument("--credit-score", default=None, help="Bureau score (300-850); missing means worst tier.")
    p.add_argument("--vehicle-type", choices=["new", "used"], default="new")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vehicle-scenarios")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sc = sub.add_parser("scenario", help="Full finance + lease report for one vehicle.")
    _add_vehicle(sc)
    _add_common(sc)
    sc.add_argument("--annual-income", default=None)
    sc.add_argument("--loan-term", type=int, default=None)
    sc.add_argument("--lease-term", type=int, default=None)
    sc.add_argument("--annual-miles", default=None)
    sc.add_argument("--balance-method", choices=[m.value for m in BalanceMethod], default=BalanceMethod.EXACT.value)
    sc.add_argument("--equity-csv", default=None, help="Write the equity timeline here instead of inline.")
    sc.add_argument("--breakdown-csv", default=None, help="Write the payment breakdown here instead of inline.")
    sc.set_defaults(func=cmd_scenario)

    fi = sub.add_parser("finance", help="Loan options across terms.")
    _add_vehicle(fi)
    _add_common(fi)
    fi.set_defaults(func=cmd_finance)

    le = sub.add_parser("lease", help="Lease options across terms with mileage exposure.")
    _add_vehicle(le)
    _add_common(le)
    le.add_argument("--annual-miles", default=None)
    le.set_defaults(func=cmd_lease)

    ls = sub.add_parser("lump-sum", help="Cash purchase analysis and ownership costs.")
    ls.add_argument("--vehicle-price", type=float, required=True)
    ls.add_argument("--current-cash", default=None)
    ls.add_argument("--monthly-income", default=None)
    ls.add_argument("--monthly-expenses", default=None)
    ls.add_argument("--expected-return", type=float, default=None)
    ls.add_argument("--ownership-years", type=int, default=5)
    _add_common(ls)
    ls.set_defaults(func=cmd_lump_sum)

    af = sub.add_parser("afford", help="Affordability fit score and 10%% rule budget.")
    af.add_argument("--vehicle-price", default=None, help='Price or range, e.g. "$26,420 - $28,500".')
    af.add_argument("--monthly-payment", default=None)
    af.add_argument("--annual-income", default=None)
    af.add_argument("--credit-tier", default=None)
    af.add_argument("--employment-status", default=None)
    af.set_defaults(func=cmd_afford)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    setup_logging(args.log_level)
    try:
        return int(args.func(args))
    except ScenarioInputError as e:
        raise SystemExit(f"invalid input: {e}") from e


if __name__ == "__main__":
    raise SystemExit(main())
