"""Utilities: logging, numeric coercion, validation helpers.

to_int_if_int and format_number are exact inverses on every string that
to_int_if_int turns into a number; parser, writer and decoders all go
through them so numbers survive a parse/write cycle unchanged.
"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal
from typing import Any, List, Tuple, Union

from .exceptions import SDPValidationError

logger = logging.getLogger("sdper")
logger.addHandler(logging.NullHandler())

Number = Union[int, float]

_NUMERIC_RE = re.compile(r"-?\d+(?:\.\d+)?(?:e[+-]\d+)?", re.ASCII)
_TAG_RE = re.compile(r"[a-z]")


def _shortest_digits(number: float) -> Tuple[str, int]:
    """Return (digits, n) with ``number == 0.<digits> * 10**n``.

    *number* must be positive and finite. repr() already yields the shortest
    digit string that round-trips, Decimal just splits it up.
    """
    sign, digits, exponent = Decimal(repr(number)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    return text, exponent + len(text)


def format_number(number: Number) -> str:
    """Render a number as it appears in SDP text.

    Integral floats lose their ``.0``; plain notation is used from 1e-6 up
    to 1e21 and exponent notation (``1e+21``) outside that range.
    """
    if isinstance(number, bool) or not isinstance(number, float):
        return str(number)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    digits, n = _shortest_digits(abs(number))
    k = len(digits)
    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        body = "0." + "0" * -n + digits
    else:
        mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
        exp = n - 1
        body = f"{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"
    return sign + body


def to_int_if_int(value: Any) -> Any:
    """Coerce a captured substring to a number when it is one verbatim.

    A string converts only if format_number() of the converted value gives
    back the exact same string, so ``"20518"`` becomes ``20518`` while
    ``"007"``, ``"1.50"`` and integers too large for a double stay strings.
    Anything that is not a string is returned unchanged.
    """
    if not isinstance(value, str) or not _NUMERIC_RE.fullmatch(value):
        return value
    number = float(value)
    if math.isinf(number) or format_number(number) != value:
        return value
    if value.lstrip("-").isdigit():
        return int(value)
    return number


def render_value(value: Any) -> str:
    """Stringify a field value for a formatted line."""
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def split_lines(text: str) -> List[str]:
    """Split on any of the line terminators SDP producers use."""
    return re.split(r"\r\n|\r|\n", text)


def validate_tag(tag: Any) -> bool:
    """True if *tag* looks like an SDP line type (one lowercase letter)."""
    return isinstance(tag, str) and bool(_TAG_RE.fullmatch(tag))


def validate_order(name: str, order: Any) -> Tuple[str, ...]:
    """Validate a writer tag order override and return it as a tuple."""
    if not isinstance(order, (list, tuple)):
        raise SDPValidationError(f"{name} must be a sequence of line tags")
    for tag in order:
        if not validate_tag(tag):
            raise SDPValidationError(f"Invalid line tag in {name}: {tag!r}")
    return tuple(order)
