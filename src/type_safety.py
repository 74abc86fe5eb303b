"""Type safety utilities for numeric text handling.

This module provides the conversion functions that sit between free-form form
input and the surebet/calculator math. Parsing, rounding and formatting follow
browser number semantics so that results match what users already see in the
web calculators (leading-prefix parsing, half-up rounding, shortest
round-trip number strings).
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional
import logging
import math
import re

logger = logging.getLogger('surebet')

_NUMBER_PREFIX = re.compile(
    r'^[\s]*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))'
)
_NUMBER_LITERAL = re.compile(
    r'[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)'
)
_RADIX_LITERAL = re.compile(r'0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+')


def parse_number(value: Any) -> float:
    """Parse a value into a float using leading-prefix semantics.

    Text is parsed from its longest numeric prefix, so trailing garbage is
    ignored. Anything without a numeric prefix yields NaN rather than raising;
    callers decide what an unparseable field means.

    Args:
        value: Text, int or float

    Returns:
        Parsed float, or NaN if no number can be read

    Examples:
        >>> parse_number("2.5")
        2.5
        >>> parse_number(" 1.85 odds")
        1.85
        >>> parse_number(".5")
        0.5
        >>> parse_number("abc")
        nan
        >>> parse_number("")
        nan
    """
    if isinstance(value, bool):
        return math.nan

    if isinstance(value, (int, float)):
        return float(value)

    if isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if match is None:
            logger.debug(f"Cannot parse number from: {value!r}")
            return math.nan
        return float(match.group(1).replace("Infinity", "inf"))

    logger.debug(f"Unexpected type for number parsing: {type(value)}: {value}")
    return math.nan


def to_number(value: Any) -> float:
    """Convert a whole value to a float, the way query parameters are read.

    Unlike :func:`parse_number` the entire text (after trimming whitespace)
    must be a number literal: decimal, ``Infinity`` or a ``0x``/``0o``/``0b``
    integer. Blank text is 0.

    Examples:
        >>> to_number(" 12.5 ")
        12.5
        >>> to_number("0x10")
        16.0
        >>> to_number("12abc")
        nan
        >>> to_number("")
        0.0
    """
    if isinstance(value, bool):
        return float(value)

    if isinstance(value, (int, float)):
        return float(value)

    if not isinstance(value, str):
        logger.debug(f"Unexpected type for number conversion: {type(value)}: {value}")
        return math.nan

    text = value.strip()
    if text == "":
        return 0.0

    if _NUMBER_LITERAL.fullmatch(text):
        return float(text.replace("Infinity", "inf"))

    if _RADIX_LITERAL.fullmatch(text):
        return float(int(text, 0))

    logger.debug(f"Not a number literal: {value!r}")
    return math.nan


def round_half_up(value: float) -> float:
    """Round to the nearest integer, ties toward positive infinity.

    NaN and infinities pass through unchanged.

    Examples:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(-2.5)
        -2.0
        >>> round_half_up(33.333)
        33.0
    """
    if math.isnan(value) or math.isinf(value):
        return value

    floored = math.floor(value)
    if value - floored >= 0.5:
        floored += 1
    return float(floored)


def divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE-754 results instead of ZeroDivisionError.

    Examples:
        >>> divide(1.0, 0.0)
        inf
        >>> divide(-1.0, 0.0)
        -inf
        >>> divide(0.0, 0.0)
        nan
    """
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def format_fixed(value: float, digits: int = 0) -> str:
    """Format a number with a fixed count of decimals.

    Halves round away from zero on the exact binary value. Non-finite values
    render as ``NaN``, ``Infinity`` or ``-Infinity``; magnitudes of 1e21 and
    above fall back to :func:`format_number`.

    Examples:
        >>> format_fixed(100.0)
        '100'
        >>> format_fixed(-2.8, 2)
        '-2.80'
        >>> format_fixed(float("nan"))
        'NaN'
    """
    if math.isnan(value) or math.isinf(value) or abs(value) >= 1e21:
        return format_number(value)

    if value == 0:
        return "0" if digits == 0 else "0." + "0" * digits

    exponent = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))


def format_whole(value: float) -> str:
    """Format a number as a whole-unit string (no decimals)."""
    return format_fixed(value, 0)


def format_number(value: float) -> str:
    """Convert a float to its shortest round-trip string.

    Integers print without a trailing ``.0``. Exponent notation is used only
    for magnitudes below 1e-6 or at/above 1e21.

    Examples:
        >>> format_number(5.0)
        '5'
        >>> format_number(0.1 + 0.2)
        '0.30000000000000004'
        >>> format_number(1e21)
        '1e+21'
        >>> format_number(1.5e-7)
        '1.5e-7'
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    parsed = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in parsed.digits)
    exponent = parsed.exponent

    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped

    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits

    e = n - 1
    mantissa = digits[0] if k == 1 else digits[0] + "." + digits[1:]
    return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def safe_dict_get(
    data: Dict[str, Any],
    key: str,
    default: Any = None,
    expected_type: Optional[type] = None
) -> Any:
    """Safely get dictionary value with type checking.

    Args:
        data: Source dictionary
        key: Key to retrieve
        default: Default value if key missing or type mismatch
        expected_type: Optional type to validate against

    Returns:
        Value from dictionary or default

    Examples:
        >>> safe_dict_get({"a": 1}, "a")
        1
        >>> safe_dict_get({"a": 1}, "b", default=0)
        0
        >>> safe_dict_get({"a": "text"}, "a", expected_type=int, default=0)
        0
    """
    if not isinstance(data, dict):
        logger.warning(f"Expected dict, got {type(data)}")
        return default

    value = data.get(key, default)

    if expected_type is not None and value is not None:
        if not isinstance(value, expected_type):
            logger.warning(
                f"Key '{key}': expected {expected_type.__name__}, "
                f"got {type(value).__name__}. Using default."
            )
            return default

    return value


def validate_outcome_count(value: int, name: str = "outcome count") -> int:
    """Validate the number of outcomes in a market.

    Raises:
        ValueError: If fewer than two outcomes are requested

    Examples:
        >>> validate_outcome_count(3)
        3
        >>> validate_outcome_count(1)
        Traceback (most recent call last):
        ...
        ValueError: outcome count must be at least 2, got 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")

    if value < 2:
        raise ValueError(f"{name} must be at least 2, got {value}")

    return value
