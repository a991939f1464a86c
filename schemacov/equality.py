"""JSON value helpers: kind detection, strict equality and string length."""

from __future__ import annotations

import re
from decimal import Decimal
from fractions import Fraction
from typing import Any

_SURROGATE_PAIR = re.compile("[\ud800-\udbff][\udc00-\udfff]")


def detect_kind(value: Any) -> str:
    """Draft-4 primitive type name of a decoded JSON value.

    Floats with a zero fractional part are reported as ``integer``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "integer" if value.is_integer() else "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def json_equal(a: Any, b: Any) -> bool:
    """Deep equality that never conflates kinds (``1 != "1"``, ``True != 1``)."""
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(json_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(json_equal(a[key], b[key]) for key in a)
    if type(a) is not type(b):
        return False
    return a == b


def code_point_length(value: str) -> int:
    """Length in characters, counting a UTF-16 surrogate pair as one."""
    return len(value) - len(_SURROGATE_PAIR.findall(value))


def is_multiple_of(value: int | float, divisor: int | float) -> bool:
    if divisor == 0:
        # A zero divisor never matches: the quotient is not a finite integer.
        return False
    # repr() gives the shortest round-tripping form, so 0.0075 / 0.0001 stays exact.
    quotient = Fraction(Decimal(repr(value))) / Fraction(Decimal(repr(divisor)))
    return quotient.denominator == 1
