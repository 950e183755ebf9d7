"""
Canonical JSON serialization

The signed JSON text has to match the one mosparo builds on its side byte
for byte: compact separators, non-ASCII characters and slashes escaped,
and every empty list rendered as an empty object.
"""

import json
from collections.abc import Mapping
from decimal import Decimal
from typing import Any


EMPTY_LIST_TOKEN = '[]'
EMPTY_OBJECT_TOKEN = '{}'


def _jsonable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {_jsonable_key(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, bytes):
        return value.decode('utf-8', 'replace')
    if isinstance(value, Decimal):
        return int(value) if value.is_finite() and value == value.to_integral_value() else float(value)
    return value


def _jsonable_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bytes):
        return key.decode('utf-8', 'replace')
    if isinstance(key, bool):
        return '1' if key else ''
    return str(key)


def to_json(data: Any) -> str:
    """
    Convert the given data into the canonical JSON string.

    Object keys keep the order they have in ``data``; use the cleaned or
    prepared form data to get sorted keys.

    Args:
        data: Dictionary (or list) to serialize

    Returns:
        str: Compact JSON with empty lists rewritten to empty objects

    Raises:
        ValueError: If data contains values that cannot be represented
            in JSON (NaN or infinite floats)
    """
    json_string = json.dumps(
        _jsonable(data),
        separators=(',', ':'),
        ensure_ascii=True,
        allow_nan=False,
    )
    json_string = json_string.replace('/', '\\/')

    # Replace the empty JSON arrays with JSON objects
    return json_string.replace(EMPTY_LIST_TOKEN, EMPTY_OBJECT_TOKEN)


def to_json_bytes(data: Any) -> bytes:
    """Canonical JSON of ``data`` encoded as UTF-8."""
    return to_json(data).encode('utf-8')


__all__ = ['to_json', 'to_json_bytes']
