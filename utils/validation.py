"""
Input validation helpers for the OS Concepts Simulator.

Engines validate their own inputs (not the UI), so every vector, size and
time that enters an engine goes through one of these functions.
"""

import math
from typing import Iterable, List, Optional

from utils.errors import ValidationError


def validate_int(value, name: str, minimum: Optional[int] = 0) -> int:
    """
    Coerce a value to int, rejecting NaN, non-numeric and out-of-range input.

    Args:
        value: Raw value (int, float with integral value, or numeric string)
        name: Field name used in error messages
        minimum: Smallest accepted value (None disables the check)

    Returns:
        The validated integer

    Raises:
        ValidationError: If value is not an integer or is below minimum
    """
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer, got {value!r}")

    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            raise ValidationError(f"{name} must be an integer, got {text!r}")

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value) or not value.is_integer():
            raise ValidationError(f"{name} must be an integer, got {value!r}")
        value = int(value)

    # numpy integers and other Integral types
    try:
        as_int = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if as_int != value:
        raise ValidationError(f"{name} must be an integer, got {value!r}")

    if minimum is not None and as_int < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {as_int}")

    return as_int


def validate_vector(
    values: Iterable,
    name: str,
    length: Optional[int] = None
) -> List[int]:
    """
    Validate a resource vector of non-negative integers.

    Args:
        values: Sequence of raw values
        name: Vector name used in error messages
        length: Required length (None accepts any length)

    Returns:
        List of validated integers

    Raises:
        ValidationError: On non-numeric/negative entries or length mismatch
    """
    if isinstance(values, (str, bytes)):
        raise ValidationError(f"{name} must be a sequence of integers")
    try:
        items = list(values)
    except TypeError:
        raise ValidationError(f"{name} must be a sequence of integers")

    vector = [validate_int(v, f"{name}[{i}]") for i, v in enumerate(items)]

    if length is not None and len(vector) != length:
        raise ValidationError(
            f"{name} has length {len(vector)}, expected {length} resource types"
        )
    return vector


def parse_vector(text: str, name: str = "vector", length: Optional[int] = None) -> List[int]:
    """
    Parse free-form comma-separated input such as "3, 3, 2".

    Empty input parses to an empty vector.
    """
    if text is None:
        raise ValidationError(f"{name} is missing")
    stripped = text.strip()
    if not stripped:
        parts = []
    else:
        parts = [part.strip() for part in stripped.split(",")]
    if any(part == "" for part in parts):
        raise ValidationError(f"{name} contains an empty entry: {text!r}")
    return validate_vector(parts, name, length)
