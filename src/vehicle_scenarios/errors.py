from __future__ import annotations


class ScenarioInputError(ValueError):
    """Caller contract violation: negative price, non-positive term, bad overrides."""
