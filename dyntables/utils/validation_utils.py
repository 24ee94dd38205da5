"""
Validation utilities for the record engine.
Provides the primitive checks used when coercing untyped input into field values.
"""

import math
import re
from typing import Any, Optional, Union
from urllib.parse import urlparse

# Regular expressions for common validations
PATTERNS = {
    'email': r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$',
    'slug': r'^[a-z0-9]+(?:-[a-z0-9]+)*$',
    'number': r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$',
    'integer': r'^[+-]?\d+$',
}

_NUMBER_RE = re.compile(PATTERNS['number'])
_INTEGER_RE = re.compile(PATTERNS['integer'])
_EMAIL_RE = re.compile(PATTERNS['email'])
_SLUG_RE = re.compile(PATTERNS['slug'])

# Tokens accepted for boolean fields on record writes
BOOLEAN_TOKENS = {
    "true": True,
    "1": True,
    "false": False,
    "0": False,
}

# Wider vocabulary accepted when coercing spreadsheet cells
IMPORT_BOOLEAN_TOKENS = {
    **BOOLEAN_TOKENS,
    "si": True,
    "sí": True,
    "yes": True,
    "y": True,
    "no": False,
    "n": False,
}

URI_SCHEMES = ("http", "https", "ftp", "s3", "gs", "file", "data")


def is_blank(value: Any) -> bool:
    """
    Check whether a value counts as missing.

    None, empty or whitespace-only strings, NaN and empty lists are blank.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def parse_number(value: Any) -> Optional[Union[int, float]]:
    """
    Parse a number or numeric string.

    Booleans, NaN and infinities are rejected. Integral strings become ints.

    Returns:
        Parsed number or None if the value is not numeric
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return value if math.isfinite(value) else None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not _NUMBER_RE.match(text):
        return None

    if _INTEGER_RE.match(text):
        return int(text)

    number = float(text)
    return number if math.isfinite(number) else None


def is_number(value: Any) -> bool:
    return parse_number(value) is not None


def parse_boolean(value: Any, tokens: Optional[dict] = None) -> Optional[bool]:
    """
    Parse a boolean, a 0/1 integer or a boolean token.

    Args:
        value: Value to parse
        tokens: Accepted string tokens, defaults to BOOLEAN_TOKENS

    Returns:
        Parsed boolean or None if the value is not boolean-like
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        return {1: True, 0: False}.get(value)

    if isinstance(value, float) and value in (0.0, 1.0):
        return value == 1.0

    if isinstance(value, str):
        return (tokens or BOOLEAN_TOKENS).get(value.strip().lower())

    return None


def is_boolean_token(value: Any) -> bool:
    return parse_boolean(value) is not None


def is_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))


def is_slug(value: str) -> bool:
    return bool(_SLUG_RE.match(value))


def is_uri(value: Any) -> bool:
    """
    Check whether a string is a URI with a scheme and a location.

    Relative paths starting with ``/`` are accepted as storage keys.
    """
    if not isinstance(value, str) or not value.strip():
        return False

    text = value.strip()
    if text.startswith("/"):
        return True

    parsed = urlparse(text)
    if parsed.scheme not in URI_SCHEMES:
        return False
    if parsed.scheme == "data":
        return bool(parsed.path)
    return bool(parsed.netloc or parsed.path)
