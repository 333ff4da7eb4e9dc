"""
Generic serialization helpers.
No business rules here, only formatting.
"""
import json


def serialize_date(value):
    """Convert a date or datetime to an ISO string for JSON"""
    if value is None:
        return None
    return value.isoformat()


def dump_json_list(value):
    """Serialize a list column (credit line items, server names) to JSON text."""
    if value is None:
        return "[]"
    if isinstance(value, str):
        return value
    return json.dumps(value)


def load_json_list(text):
    """
    Parse a JSON list column.

    Raises ``ValueError`` when the text is not JSON or not a list; callers
    decide whether that is fatal.
    """
    if text is None or text == "":
        return []
    parsed = json.loads(text)
    if not isinstance(parsed, list):
        raise ValueError(f"expected a JSON list, got {type(parsed).__name__}")
    return parsed
