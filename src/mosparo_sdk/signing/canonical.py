"""
Canonical form data construction

This module turns arbitrary nested form data into the canonical structure
mosparo signs: control fields removed, line breaks normalized, keys
lowercased, list markers stripped and keys sorted at every level. The
prepared variant replaces every value with its SHA-256 hash.

The functions never raise on unexpected shapes; unknown values degrade
to empty text so the signature chain always completes.
"""

import math
from collections.abc import Mapping
from decimal import Decimal
from numbers import Number
import re
from typing import Any, Dict

from .hashing import sha256_hex
from .types import FormData, RESERVED_KEYS, LIST_MARKER


_ASCII_LOWER = str.maketrans('ABCDEFGHIJKLMNOPQRSTUVWXYZ', 'abcdefghijklmnopqrstuvwxyz')
_LINE_BREAK = re.compile(r'\r+\n')

# Deeper nesting degrades to empty text, matching PHP's max_input_nesting_level
MAX_NESTING_DEPTH = 64

# Floats switch to exponent notation outside this decimal exponent range
_MIN_POSITIONAL_EXPONENT = -4
_MAX_POSITIONAL_EXPONENT = 15


def scrub_text(value: str) -> str:
    """Replace characters that cannot be encoded as UTF-8, such as lone surrogates."""
    try:
        value.encode('utf-8')
    except UnicodeEncodeError:
        return value.encode('utf-8', 'replace').decode('utf-8')
    return value


def normalize_key(key: Any) -> str:
    """
    Normalize a form field key.

    The key is converted to text, lowercased (ASCII only) and stripped
    of any trailing list markers, so ``Email[]`` becomes ``email``.

    Args:
        key: Field key as submitted

    Returns:
        str: Canonical field key
    """
    if isinstance(key, bytes):
        key = key.decode('utf-8', 'replace')
    elif not isinstance(key, str):
        key = scalar_to_text(key)
    key = scrub_text(key).translate(_ASCII_LOWER)
    while key.endswith(LIST_MARKER):
        key = key[:-len(LIST_MARKER)]
    return key


def normalize_line_breaks(value: str) -> str:
    """
    Convert all Windows line breaks to ``\\n``.

    Runs of ``\\r`` before ``\\n`` collapse as a whole so the conversion is
    idempotent. This deliberately differs from mosparo, which replaces each
    ``\\r\\n`` once: ``"\\r\\r\\n"`` hashes differently on both sides.
    Browsers never submit a bare ``\\r`` in front of a line break.
    """
    return _LINE_BREAK.sub('\n', value)


def scalar_to_text(value: Any) -> str:
    """
    Convert a scalar form value to the text form that gets hashed.

    Booleans follow the usual web form convention (``True`` is ``"1"``,
    ``False`` is empty), numbers use their plain decimal form so ``123``
    and ``"123"`` hash the same.
    """
    if value is None or value is False:
        return ''
    if value is True:
        return '1'
    if isinstance(value, str):
        return scrub_text(value)
    if isinstance(value, bytes):
        return value.decode('utf-8', 'replace')
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_to_text(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return str(int(value))
    if isinstance(value, Number):
        return _float_to_text(float(value))
    return ''


def _float_to_text(value: float) -> str:
    if math.isnan(value):
        return 'NAN'
    if math.isinf(value):
        return 'INF' if value > 0 else '-INF'
    if value == 0:
        return '-0' if math.copysign(1.0, value) < 0 else '0'
    if value.is_integer() and abs(value) < 10 ** _MAX_POSITIONAL_EXPONENT:
        return str(int(value))

    # repr() yields the shortest round-trip digits
    sign, digits, exponent = Decimal(repr(value)).as_tuple()
    leading_exponent = len(digits) - 1 + exponent
    if _MIN_POSITIONAL_EXPONENT <= leading_exponent < _MAX_POSITIONAL_EXPONENT:
        return format(Decimal(repr(value)), 'f')

    text_digits = ''.join(str(d) for d in digits).rstrip('0') or '0'
    mantissa = text_digits[0] + '.' + (text_digits[1:] or '0')
    exponent_sign = '+' if leading_exponent >= 0 else '-'
    return f"{'-' if sign else ''}{mantissa}E{exponent_sign}{abs(leading_exponent)}"


def _cleanup_value(value: Any, depth: int) -> Any:
    if isinstance(value, Mapping):
        return _cleanup_mapping(value, depth + 1)
    if isinstance(value, (list, tuple)):
        if depth >= MAX_NESTING_DEPTH:
            return ''
        return [_cleanup_value(item, depth + 1) for item in value]
    if value is None:
        return ''
    if isinstance(value, bytes):
        value = value.decode('utf-8', 'replace')
    if isinstance(value, str):
        return normalize_line_breaks(scrub_text(value))
    if isinstance(value, (bool, Number)):
        return value
    return ''


def _cleanup_mapping(form_data: Mapping, depth: int) -> Any:
    if depth > MAX_NESTING_DEPTH:
        return ''

    data = {}
    for key, value in form_data.items():
        if key in RESERVED_KEYS:
            continue
        data[normalize_key(key)] = _cleanup_value(value, depth)

    return {key: data[key] for key in sorted(data)}


def cleanup_form_data(form_data: FormData) -> Dict[str, Any]:
    """
    Clean up the given form data.

    Removes the mosparo control fields, converts all line breaks, strips
    list markers from keys, lowercases the keys and sorts them. Nested
    dictionaries and lists are cleaned recursively; containers nested
    deeper than ``MAX_NESTING_DEPTH`` become empty text.

    Args:
        form_data: Mapping of field names to values

    Returns:
        dict: Cleaned form data with sorted keys
    """
    if not isinstance(form_data, Mapping):
        return {}
    return _cleanup_mapping(form_data, 0)


def _hash_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _hash_mapping(value)
    if isinstance(value, list):
        return [_hash_value(item) for item in value]
    return sha256_hex(scalar_to_text(value))


def _hash_mapping(data: Mapping) -> Dict[str, Any]:
    hashed = {key: _hash_value(value) for key, value in data.items()}
    return {key: hashed[key] for key in sorted(hashed)}


def prepare_form_data(form_data: FormData) -> Dict[str, Any]:
    """
    Generate the hash for all form values and prepare the form data
    to submit it to the verification API.

    Args:
        form_data: Mapping of field names to values

    Returns:
        dict: Cleaned form data with every value replaced by its SHA-256 hash
    """
    return _hash_mapping(cleanup_form_data(form_data))


__all__ = [
    'cleanup_form_data',
    'prepare_form_data',
    'normalize_key',
    'normalize_line_breaks',
    'scrub_text',
    'MAX_NESTING_DEPTH',
    'scalar_to_text',
]
