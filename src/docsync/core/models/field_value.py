"""
Value types carried by parsed records.
"""

from typing import Any, Union

# Scalars produced by parsing plus JSON containers for structured fields
FieldValue = Union[str, int, float, bool, None, dict[str, Any], list[Any]]

# One parsed input row: field name -> value
Record = dict[str, FieldValue]
