"""
Sanitization of engine values for transport.

Everything that leaves the evaluation adapter goes through sanitize_value():
numbers, strings and booleans pass through, empty reads become ``""`` and any
structured engine error is flattened to one of seven error codes.
"""

import datetime
import math
import re
from typing import Any, Dict, Mapping, Union

EvaluatedValue = Union[int, float, str, bool]

ERROR_CODES = ("#REF!", "#DIV/0!", "#VALUE!", "#NAME?", "#N/A", "#NUM!", "#ERROR!")
GENERIC_ERROR = "#ERROR!"

# Keyed by the code with everything but letters and digits removed, lower-cased.
_ERROR_ALIASES: Dict[str, str] = {
    "ref": "#REF!",
    "div0": "#DIV/0!",
    "div": "#DIV/0!",
    "divzero": "#DIV/0!",
    "divbyzero": "#DIV/0!",
    "value": "#VALUE!",
    "name": "#NAME?",
    "na": "#N/A",
    "num": "#NUM!",
    "error": "#ERROR!",
}

# Looked up in this order; "type" and "message" are deliberately absent.
_CODE_FIELDS = ("code", "kind", "value", "error")


def to_error_code(raw: Any) -> str:
    """Flatten an engine error code to the closed calcvault taxonomy.

    Accepts the code itself (``"#DIV/0!"``), an engine kind name (``"Div"``,
    ``"DivZero"``) or a structured error carrying either in one of the fields
    ``code``, ``kind``, ``value`` or ``error`` (mapping keys or attributes).
    Anything unrecognised becomes ``#ERROR!``.
    """
    code = _extract_code(raw)
    if code is None:
        return GENERIC_ERROR
    if code in ERROR_CODES:
        return code
    key = re.sub(r"[^a-z0-9]", "", code.lower())
    return _ERROR_ALIASES.get(key, GENERIC_ERROR)


def _extract_code(raw: Any) -> Union[str, None]:
    if isinstance(raw, str):
        return raw.strip()
    for name in _CODE_FIELDS:
        if isinstance(raw, Mapping):
            candidate = raw.get(name)
        else:
            candidate = getattr(raw, name, None)
        if candidate is None or callable(candidate):
            continue
        if isinstance(candidate, str):
            return candidate.strip()
        # Enum-like kinds
        inner = getattr(candidate, "name", None)
        if isinstance(inner, str):
            return inner
        return str(candidate)
    return None


def is_error_code(value: Any) -> bool:
    """True if *value* is one of the seven error codes.

    Text that merely starts with "#" (a "#hashtag" label) is not an error.
    """
    return isinstance(value, str) and value in ERROR_CODES


def sanitize_value(raw: Any) -> EvaluatedValue:
    """Convert an engine read into a transport-safe value.

    * ``None`` and NaN -> ``""``
    * bool, int, float, str -> as-is
    * dates and times -> ISO-8601 string
    * single-element arrays (spill anchors) -> their first element, sanitized
    * anything else is a structured error -> flattened error code
    """
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and math.isnan(raw):
            return ""
        return raw
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (datetime.date, datetime.time)):
        return raw.isoformat()
    if isinstance(raw, (list, tuple)):
        if not raw:
            return ""
        return sanitize_value(raw[0])
    return to_error_code(raw)
