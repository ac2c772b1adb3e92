"""
Abstract base class for all screen calculators.

Input: raw screen inputs (dict of whatever the form sent)
Output: plain dict of derived figures

Inputs are advisory — anything that does not parse as a finite number
becomes 0 (or the field's documented default). Calculators never raise
on bad numbers and never return NaN or Infinity.
"""

import math
from abc import ABC, abstractmethod


def to_number(value, default: float = 0.0) -> float:
    """Parse a numeric value from user input. NaN, Infinity and garbage fall back to default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(str(value).strip())
    except (ValueError, TypeError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def is_blank(value) -> bool:
    """True for None and whitespace-only strings — the form's "not filled in" state."""
    return value is None or (isinstance(value, str) and not value.strip())


def safe_divide(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def round_half_up(value: float) -> int:
    """Integer rounding with .5 going up, the way score rings are rounded on screen."""
    return int(math.floor(value + 0.5))


class BaseCalculator(ABC):
    """All screen calculators inherit from this."""

    name = ""

    @abstractmethod
    def calculate(self, fields: dict) -> dict:
        """
        Takes the raw inputs of one screen.
        Returns a dict of derived figures.
        """
        pass

    # --- Helper methods for all calculators ---

    def parse_number(self, value, default: float = 0.0) -> float:
        return to_number(value, default)

    def parse_optional(self, value, default: float) -> float:
        """Parse a field that has a non-zero default when left unset (blank or missing)."""
        if is_blank(value):
            return default
        return to_number(value, default)

    def parse_int(self, value, default: int = 0) -> int:
        """Parse an integer count from user input, truncating any fraction."""
        return int(to_number(value, default))
