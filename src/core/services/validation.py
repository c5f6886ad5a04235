"""Numeric input checks shared by the costing services."""

import math
from typing import Any

from src.core.exceptions import ValidationError


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def require_positive(field: str, value: Any) -> float:
    """Return ``value`` as float if it is a finite number > 0."""
    if not _is_number(value) or value <= 0:
        raise ValidationError(field, "must be a positive number", value)
    return float(value)


def require_non_negative(field: str, value: Any) -> float:
    """Return ``value`` as float if it is a finite number >= 0."""
    if not _is_number(value) or value < 0:
        raise ValidationError(field, "must be a non-negative number", value)
    return float(value)
