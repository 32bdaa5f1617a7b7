"""
JSON-safety helpers for values produced by nodes
"""
from datetime import date, datetime
from typing import Any


def make_serializable(value: Any, max_depth: int = 20) -> Any:
    """
    Convert a value to be JSON-serializable.
    Filters out complex objects that can't be serialized.

    Args:
        value: Any Python value
        max_depth: Maximum recursion depth

    Returns:
        JSON-serializable version of the value
    """
    if max_depth <= 0:
        return "<max depth reached>"

    # Basic types are already serializable
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, (datetime, date)):
        return value.isoformat()

    # Handle lists, tuples and sets
    if isinstance(value, (list, tuple, set, frozenset)):
        return [make_serializable(item, max_depth - 1) for item in value]

    # Handle dicts
    if isinstance(value, dict):
        return {
            str(k): make_serializable(v, max_depth - 1)
            for k, v in value.items()
        }

    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')

    # For complex objects, return a placeholder with type info
    type_name = type(value).__name__
    module = type(value).__module__

    # Check if it has a string representation that's useful
    try:
        str_repr = str(value)
        if len(str_repr) < 200 and not str_repr.startswith('<'):
            return f"<{type_name}: {str_repr}>"
    except Exception:
        pass

    return f"<{module}.{type_name}>"
