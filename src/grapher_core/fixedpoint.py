"""Fixed-point convention shared by every kernel.

Scoreboards only hold whole numbers, so a real value ``v`` is stored as
``to_fixed(v, R)``. A product of two values at scale ``R`` is at scale ``R**2``
and must be divided back before it is mixed with scale ``R`` values.
"""
from __future__ import annotations

import math
from decimal import Decimal, localcontext
from fractions import Fraction

from .protocol import DEFAULT_REGISTER_WIDTH


def to_fixed(value: float | Fraction, scale: int | Fraction = 1) -> int:
    """Scale a real value and round half up, as scaled literals always were."""
    scaled = Fraction(value) * Fraction(scale)
    return math.floor(scaled + Fraction(1, 2))


def floor_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("register division by zero")
    return a // b


def floor_mod(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("register modulo by zero")
    return a % b


def trunc_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("register division by zero")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def trunc_mod(a: int, b: int) -> int:
    return a - b * trunc_div(a, b)


def int_bounds(width: int = DEFAULT_REGISTER_WIDTH) -> tuple[int, int]:
    """Inclusive range of a signed register of ``width`` bits."""
    return -(1 << (width - 1)), (1 << (width - 1)) - 1


def fits(value: int, width: int = DEFAULT_REGISTER_WIDTH) -> bool:
    lo, hi = int_bounds(width)
    return lo <= value <= hi


def wrap(value: int, width: int = DEFAULT_REGISTER_WIDTH) -> int:
    """Two's complement wrap-around, what the game does on overflow."""
    span = 1 << width
    value &= span - 1
    if value >= span >> 1:
        value -= span
    return value


def format_decimal(value: float | int | Fraction) -> str:
    """Positional decimal text. The command parser rejects exponent notation."""
    if isinstance(value, Fraction):
        with localcontext() as ctx:
            ctx.prec = 30
            d = Decimal(value.numerator) / Decimal(value.denominator)
    elif isinstance(value, int):
        return str(value)
    else:
        d = Decimal(repr(float(value)))
    text = format(d, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        text = "0"
    return text


def format_coordinate(value: float) -> str:
    """Coordinates always carry a decimal point, otherwise x/z snap to block centres."""
    text = format_decimal(value)
    return text if "." in text else text + ".0"
