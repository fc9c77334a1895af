from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

# A leading "-" (not a range dash between two numbers) or accounting parentheses
# mark a negative amount.
_NUMBER = re.compile(r"(?P<sign>(?<![\w.])-\$?|\(\$?)?(?P<num>\d[\d,]*(?:\.\d+)?|\.\d+)(?P<close>\))?")


@dataclass(frozen=True)
class ParseResult:
    raw: Any
    ok: bool
    low: float | None = None
    high: float | None = None
    error: str | None = None

    @classmethod
    def success(cls, raw: Any, low: float, high: float | None = None) -> ParseResult:
        return cls(raw=raw, ok=True, low=float(low), high=float(low if high is None else high))

    @classmethod
    def failure(cls, raw: Any, error: str) -> ParseResult:
        return cls(raw=raw, ok=False, error=error)

    @property
    def value(self) -> float | None:
        """First bound of the range; None for failed parses."""
        return self.low if self.ok else None

    @property
    def midpoint(self) -> float | None:
        if not self.ok:
            return None
        return (self.low + self.high) / 2.0


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)


def parse_money_range(raw: Any) -> ParseResult:
    """
    Extract a numeric range from a money-like value.

    Intake flows hand over prices like "$26,420 - $28,500", incomes like
    "85,000" and monthly prices like "$389/mo". Plain numbers parse to a
    degenerate range. Strings yield the first numeric token as the low bound
    and the second (if any) as the high bound; thousands separators and
    currency symbols are ignored. A sign on the first token is kept, so
    "-5,000" and "($5,000)" parse to -5000 and callers can reject them.
    """
    if raw is None:
        return ParseResult.failure(raw, "missing value")
    if isinstance(raw, bool):
        return ParseResult.failure(raw, "boolean is not a money value")
    if isinstance(raw, (int, float)):
        if not math.isfinite(raw):
            return ParseResult.failure(raw, "non-finite number")
        return ParseResult.success(raw, raw)
    if not isinstance(raw, str):
        return ParseResult.failure(raw, f"unsupported type {type(raw).__name__}")

    matches = list(_NUMBER.finditer(raw))[:2]
    if not matches:
        return ParseResult.failure(raw, "no numeric token found")
    bounds = [float(m.group("num").replace(",", "")) for m in matches]
    sign = matches[0].group("sign") or ""
    if sign.startswith("-") or (sign.startswith("(") and matches[0].group("close")):
        bounds[0] = -bounds[0]
    low = bounds[0]
    high = bounds[1] if len(bounds) > 1 and bounds[1] >= low else low
    return ParseResult.success(raw, low, high)


def parse_money(raw: Any) -> float | None:
    """First numeric bound of `raw`, or None when nothing usable is present."""
    return parse_money_range(raw).value
