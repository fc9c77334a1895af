from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Mapping

from vehicle_scenarios.errors import ScenarioInputError
from vehicle_scenarios.parsing import is_finite_number


def _default_residuals() -> dict[int, float]:
    return {24: 0.65, 36: 0.55, 48: 0.45}


_INT_FIELDS = (
    "breakdown_horizon_months",
    "mileage_allowance",
    "reference_credit_score",
    "reference_term_months",
    "emergency_fund_months",
)
_FLOAT_FIELDS = (
    "used_vehicle_apr_premium",
    "security_deposit",
    "lease_fees",
    "excess_mileage_fee",
    "expected_return",
    "reference_down_payment_pct",
    "taxes_and_fees_pct",
    "assumed_expense_ratio",
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class EngineAssumptions:
    # Financing
    loan_terms: tuple[int, ...] = (36, 48, 60, 72)
    used_vehicle_apr_premium: float = 0.01  # flat +1pp on every tier
    breakdown_horizon_months: int = 24

    # Leasing
    lease_terms: tuple[int, ...] = (24, 36, 48)
    residual_fractions: Mapping[int, float] = field(default_factory=_default_residuals, hash=False)
    security_deposit: float = 500.0
    lease_fees: float = 250.0
    mileage_allowance: int = 12_000  # miles per year
    excess_mileage_fee: float = 0.25  # per mile

    # Cash purchase / opportunity cost
    expected_return: float = 0.07  # annual, compounded monthly
    reference_credit_score: int = 720
    reference_down_payment_pct: float = 0.20
    reference_term_months: int = 48
    taxes_and_fees_pct: float = 0.08
    emergency_fund_months: int = 6
    assumed_expense_ratio: float = 0.70  # of monthly income, when expenses are unknown

    def __post_init__(self) -> None:
        for name in _INT_FIELDS:
            if not _is_int(getattr(self, name)):
                raise ScenarioInputError(f"{name} must be an integer")
        for name in _FLOAT_FIELDS:
            if not is_finite_number(getattr(self, name)):
                raise ScenarioInputError(f"{name} must be a finite number")
        for name in ("loan_terms", "lease_terms"):
            terms = getattr(self, name)
            if not isinstance(terms, (tuple, list)) or not all(_is_int(t) for t in terms):
                raise ScenarioInputError(f"{name} must be a sequence of integers")
            object.__setattr__(self, name, tuple(terms))
        if not isinstance(self.residual_fractions, Mapping):
            raise ScenarioInputError("residual_fractions must map lease term to fraction")
        for term, frac in self.residual_fractions.items():
            if not _is_int(term) or not is_finite_number(frac):
                raise ScenarioInputError("residual_fractions must map integer terms to numbers")
        object.__setattr__(self, "residual_fractions", MappingProxyType(dict(self.residual_fractions)))

        if not self.loan_terms or any(t <= 0 for t in self.loan_terms):
            raise ScenarioInputError("loan_terms must be non-empty and > 0")
        if not self.lease_terms or any(t <= 0 for t in self.lease_terms):
            raise ScenarioInputError("lease_terms must be non-empty and > 0")
        missing = [t for t in self.lease_terms if t not in self.residual_fractions]
        if missing:
            raise ScenarioInputError(f"residual_fractions missing lease terms {missing}")
        for term, frac in self.residual_fractions.items():
            if not (0.0 < frac < 1.0):
                raise ScenarioInputError(f"residual fraction for {term} months must be in (0, 1)")
        if self.breakdown_horizon_months <= 0:
            raise ScenarioInputError("breakdown_horizon_months must be > 0")
        if self.reference_term_months not in self.loan_terms:
            raise ScenarioInputError("reference_term_months must be one of loan_terms")
        if not (0.0 <= self.reference_down_payment_pct <= 1.0):
            raise ScenarioInputError("reference_down_payment_pct must be in [0, 1]")
        if self.mileage_allowance < 0 or self.excess_mileage_fee < 0:
            raise ScenarioInputError("mileage_allowance and excess_mileage_fee must be >= 0")
        if self.expected_return <= -1.0:
            raise ScenarioInputError("expected_return too small")

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any]) -> EngineAssumptions:
        """
        Build assumptions from a (typically JSON-decoded) mapping of overrides.

        Unknown keys are rejected. List values for the term sets are converted to
        tuples and residual fraction keys to ints, since JSON object keys are strings.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ScenarioInputError(f"unknown assumption(s): {', '.join(unknown)}")

        values = dict(overrides)
        residuals = values.get("residual_fractions")
        if residuals is not None and not isinstance(residuals, Mapping):
            raise ScenarioInputError("residual_fractions must be an object of term -> fraction")
        try:
            if residuals is not None:
                values["residual_fractions"] = {int(k): v for k, v in residuals.items()}
        except (TypeError, ValueError) as e:
            raise ScenarioInputError(f"residual_fractions keys must be month counts: {e}") from e
        return replace(DEFAULT_ASSUMPTIONS, **values)


DEFAULT_ASSUMPTIONS = EngineAssumptions()
