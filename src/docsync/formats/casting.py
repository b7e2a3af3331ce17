"""
Value casting applied to text fields at parse time.

Numeric-looking strings become numbers. Everything else, boolean-looking
strings included, stays a string so legitimate text such as "true" in a
title column is not reinterpreted.
"""

import math
import re
from collections.abc import Container

from docsync.core.models import FieldValue

_INT_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def cast_value(value: str) -> FieldValue:
    """
    Cast one trimmed field value.

    Args:
        value: Field text

    Returns:
        int or float for numeric forms, otherwise the original string
    """
    if _INT_PATTERN.fullmatch(value):
        return int(value)
    if _FLOAT_PATTERN.fullmatch(value):
        number = float(value)
        # Overflowing exponents stay text; inf is not JSON-serializable
        if math.isfinite(number):
            return number
    return value


def cast_row(row: dict[str, str], literal_fields: Container[str] = ()) -> dict[str, FieldValue]:
    """
    Cast every field of a row except those in ``literal_fields``.
    """
    return {
        key: value if key in literal_fields else cast_value(value)
        for key, value in row.items()
    }
