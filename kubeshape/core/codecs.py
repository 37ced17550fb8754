"""Scalar codecs shared by all flatten/expand functions.

The dynamic tree only carries strings and booleans as scalars, so typed
integers travel as text:

- File modes are rendered as octal text with a leading zero
  (``0o644 -> "0644"``) and parsed back as octal.
- Counters such as ``toleration_seconds`` are rendered as decimal text.
- Booleans pass through unchanged.

Encoders never fail. Decoders raise DecodeError with the field name so the
calling expander can attach the entity it was working on.
"""

import re
from typing import Any, Dict, Optional

from kubeshape.core.errors import DecodeError

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_DECIMAL_RE = re.compile(r"^[+-]?[0-9]+$")
_OCTAL_RE = re.compile(r"^[+-]?[0-7]+$")


def format_mode(mode: int) -> str:
    """Render a file mode as octal text with a leading zero.

    Args:
        mode: Stored integer value (e.g., 420, usually written ``0o644``)

    Returns:
        Octal string such as ``"0644"``

    Example:
        >>> format_mode(0o600)
        '0600'
    """
    if mode < 0:
        return "-0" + format(-mode, "o")
    return "0" + format(mode, "o")


def parse_mode(value: Any, field: str) -> int:
    """Parse an octal mode string into a 32-bit integer.

    Accepts ``"0644"`` and ``"644"`` alike. An int passes through when it is
    in range, since callers sometimes hand over already-decoded values.

    Raises:
        DecodeError: If the value is not octal text or overflows 32 bits
    """
    if isinstance(value, bool):
        raise DecodeError("expected an octal mode string, got a boolean", field=field, value=value)
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _OCTAL_RE.match(value):
        number = int(value, 8)
    else:
        raise DecodeError(f"invalid octal mode {value!r}", field=field, value=value)

    if not INT32_MIN <= number <= INT32_MAX:
        raise DecodeError(f"mode {value!r} is out of range", field=field, value=value)
    return number


def format_int(number: int) -> str:
    """Render an integer as decimal text."""
    return str(number)


def parse_int(value: Any, field: str, bits: int = 64) -> int:
    """Parse decimal text into a signed integer of the given width.

    Args:
        value: Decimal string (an int is accepted as-is)
        field: Field name reported on failure
        bits: Integer width, 32 or 64

    Returns:
        Parsed integer

    Raises:
        DecodeError: If the value is not a base-10 integer in range
    """
    if isinstance(value, bool):
        raise DecodeError("expected a decimal integer string, got a boolean", field=field, value=value)
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _DECIMAL_RE.match(value):
        number = int(value, 10)
    else:
        raise DecodeError(f"invalid integer {value!r}", field=field, value=value)

    low, high = (INT32_MIN, INT32_MAX) if bits == 32 else (INT64_MIN, INT64_MAX)
    if not low <= number <= high:
        raise DecodeError(f"integer {value!r} overflows {bits} bits", field=field, value=value)
    return number


def parse_bool(value: Any, field: str) -> bool:
    """Pass a boolean through, rejecting anything else.

    Raises:
        DecodeError: If the value is not a bool
    """
    if not isinstance(value, bool):
        raise DecodeError(f"expected a boolean, got {value!r}", field=field, value=value)
    return value


def parse_str(value: Any, field: str) -> str:
    """Pass a string through, rejecting anything else."""
    if not isinstance(value, str):
        raise DecodeError(f"expected a string, got {value!r}", field=field, value=value)
    return value


def get_str(m: Dict[str, Any], key: str) -> Optional[str]:
    """Read an optional string field, treating ``""`` as unset.

    Args:
        m: Dynamic mapping
        key: Key to read

    Returns:
        The string, or None when the key is missing, None or empty
    """
    value = m.get(key)
    if value is None or value == "":
        return None
    return parse_str(value, key)


def get_bool(m: Dict[str, Any], key: str) -> Optional[bool]:
    """Read an optional boolean field; ``False`` is a value, not unset."""
    value = m.get(key)
    if value is None:
        return None
    return parse_bool(value, key)


def get_mode(m: Dict[str, Any], key: str) -> Optional[int]:
    """Read an optional octal mode field; ``""`` counts as unset."""
    value = m.get(key)
    if value is None or value == "":
        return None
    return parse_mode(value, key)


def get_int(m: Dict[str, Any], key: str, bits: int = 64) -> Optional[int]:
    """Read an optional decimal integer field; ``""`` counts as unset."""
    value = m.get(key)
    if value is None or value == "":
        return None
    return parse_int(value, key, bits=bits)


def get_string_map(m: Dict[str, Any], key: str) -> Optional[Dict[str, str]]:
    """Read a string-to-string mapping verbatim.

    Values are not reinterpreted: multi-line or structured text is copied as
    given. An empty mapping counts as unset.

    Raises:
        DecodeError: If the value is not a mapping of strings
    """
    value = m.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise DecodeError(f"expected a mapping, got {value!r}", field=key, value=value)
    if not value:
        return None

    result = {}
    for k, v in value.items():
        if not isinstance(v, str):
            raise DecodeError(f"expected a string value for {k!r}, got {v!r}", field=key, value=v)
        result[str(k)] = v
    return result


def get_required_str(m: Dict[str, Any], key: str) -> str:
    """Read a string the typed model requires; a missing key gives ``""``."""
    value = m.get(key)
    if value is None:
        return ""
    return parse_str(value, key)
