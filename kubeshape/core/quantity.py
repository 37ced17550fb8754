"""Kubernetes quantity codec.

Quantities such as ``size_limit: 64Mi`` travel through the dynamic tree as
text. Expanders validate them against the API grammar and store their
canonical form, so that a quantity read back from a cluster compares equal to
the one the user declared (``1024Mi`` and ``1Gi`` both become ``1Gi``).

Canonical form follows the API server:

- Binary suffixes (``Ki`` .. ``Ei``) keep a binary suffix when the value is an
  integer of magnitude 1024 or more; otherwise they fall back to decimal SI.
- Decimal SI (``n u m "" k M G T P E``) and decimal exponents (``e3``) use the
  largest power of 1000 that leaves an integer mantissa.
- Values are rounded up to nano precision.
"""

import re
from decimal import ROUND_UP, Decimal, DecimalException, localcontext
from typing import Any, Tuple

from kubernetes.utils.quantity import parse_quantity

from kubeshape.core.errors import DecodeError

_QUANTITY_RE = re.compile(
    r"^(?P<number>[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+))"
    r"(?P<suffix>Ki|Mi|Gi|Ti|Pi|Ei|[numkMGTPE]|[eE][+-]?[0-9]+)?$"
)

BINARY_SI = "BinarySI"
DECIMAL_SI = "DecimalSI"
DECIMAL_EXPONENT = "DecimalExponent"

_BINARY_SUFFIXES = ["", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei"]
_DECIMAL_SUFFIXES = {
    -9: "n",
    -6: "u",
    -3: "m",
    0: "",
    3: "k",
    6: "M",
    9: "G",
    12: "T",
    15: "P",
    18: "E",
}
_NANO_PER_UNIT = 10**9
# Working precision for Decimal arithmetic; exa-scale values in nano units
# need 29 digits, more than the default context holds.
_PRECISION = 100
# Largest decimal exponent that still fits _PRECISION once scaled to nano units.
_MAX_EXPONENT = _PRECISION - 10


def parse(text: Any) -> Tuple[Decimal, str]:
    """Parse quantity text into its value and suffix format.

    Args:
        text: Quantity string such as ``"64Mi"``, ``"500m"`` or ``"1e3"``

    Returns:
        Tuple of (value, format) where format is one of BINARY_SI,
        DECIMAL_SI or DECIMAL_EXPONENT

    Raises:
        DecodeError: If the text is not a valid quantity
    """
    if not isinstance(text, str):
        raise DecodeError(f"expected a quantity string, got {text!r}", value=text)

    match = _QUANTITY_RE.match(text)
    if match is None:
        raise DecodeError(f"quantities must match the regular expression {_QUANTITY_RE.pattern!r}", value=text)

    try:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            value = parse_quantity(text)
    except (ValueError, DecimalException) as e:
        raise DecodeError(f"invalid quantity {text!r}: {e}", value=text) from e
    if value.adjusted() > _MAX_EXPONENT:
        raise DecodeError(f"quantity {text!r} is too large", value=text)

    suffix = match.group("suffix") or ""
    if suffix.endswith("i"):
        fmt = BINARY_SI
    elif len(suffix) > 1:
        fmt = DECIMAL_EXPONENT
    else:
        fmt = DECIMAL_SI
    return value, fmt


def canonicalize(text: Any) -> str:
    """Return the canonical text of a quantity.

    Example:
        >>> canonicalize("1024Mi")
        '1Gi'
        >>> canonicalize("0.5")
        '500m'

    Raises:
        DecodeError: If the text is not a valid quantity
    """
    value, fmt = parse(text)
    return format_quantity(value, fmt)


def format_quantity(value: Decimal, fmt: str = DECIMAL_SI) -> str:
    """Render a quantity value in canonical form for the given format.

    The value is rounded up to a whole number of nano units once; the
    rest of the formatting is integer arithmetic.
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        nanos = int(value.scaleb(9).to_integral_value(rounding=ROUND_UP))
    if nanos == 0:
        return "0"

    if fmt == BINARY_SI:
        if nanos % _NANO_PER_UNIT == 0 and abs(nanos) >= 1024 * _NANO_PER_UNIT:
            return _format_binary(nanos // _NANO_PER_UNIT)
        fmt = DECIMAL_SI

    mantissa = nanos
    exponent = -9
    while mantissa % 1000 == 0 and exponent < 18:
        mantissa //= 1000
        exponent += 3

    if fmt == DECIMAL_EXPONENT:
        return f"{mantissa}e{exponent}" if exponent else str(mantissa)
    return f"{mantissa}{_DECIMAL_SUFFIXES[exponent]}"


def _format_binary(number: int) -> str:
    power = 0
    while number % 1024 == 0 and power < len(_BINARY_SUFFIXES) - 1:
        number //= 1024
        power += 1
    return f"{number}{_BINARY_SUFFIXES[power]}"
