"""
Validation functions.

Two families live here: lenient coercing validators used for configuration
values (a TOML ``"60"`` is accepted as ``60``), and strict type checks used
when parsing the persisted state file and externally pushed payloads, where
anything that is not already the right type is rejected.
"""

import math
from typing import Any, Optional

from .exceptions import ValidationError


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is a positive integer.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a positive float.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated float value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if not math.isfinite(float_value):
        raise ValidationError(
            f"{field_name} must be finite, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_optional_string(value: Any, field_name: str = "value") -> Optional[str]:
    """
    Validate an optional string setting.

    Empty and whitespace-only strings are treated as "not set".

    Raises:
        ValidationError: If the value is neither None nor a string
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(
            f"{field_name} must be a string, got {value!r}",
            field_name=field_name,
            value=value
        )
    stripped = value.strip()
    return stripped or None


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """Validate that a value is a real boolean."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value


def require_non_negative_int(value: Any, field_name: str = "value") -> int:
    """
    Strictly validate a non-negative integer.

    Unlike ``validate_positive_integer`` nothing is coerced: booleans,
    strings and floats are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{field_name} must be an integer, got {value!r}",
            field_name=field_name,
            value=value
        )
    if value < 0:
        raise ValidationError(
            f"{field_name} must be >= 0, got {value}",
            field_name=field_name,
            value=value
        )
    return value


def require_number(value: Any, field_name: str = "value", allow_none: bool = False) -> Optional[float]:
    """
    Strictly validate a finite number (int or float, never bool).

    Args:
        value: Value to validate
        field_name: Name of the field being validated
        allow_none: Accept None and return it unchanged

    Raises:
        ValidationError: If validation fails
    """
    if value is None and allow_none:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"{field_name} must be a number, got {value!r}",
            field_name=field_name,
            value=value
        )
    if not math.isfinite(value):
        raise ValidationError(
            f"{field_name} must be finite, got {value}",
            field_name=field_name,
            value=value
        )
    return value


def require_string(value: Any, field_name: str = "value") -> str:
    """Strictly validate a string."""
    if not isinstance(value, str):
        raise ValidationError(
            f"{field_name} must be a string, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value
