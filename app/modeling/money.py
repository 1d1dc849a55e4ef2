"""Fixed-point conversions for money, percentages and opportunity counts.

Values at rest are integers:

- money in cents
- percentages and rates in basis points (1/10000)
- opportunity counts scaled by 100

Everything that crosses into display units goes through this module.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

BP_SCALE = 10000
CENTS_PER_DOLLAR = 100
OPP_SCALE = 100

Number = Union[int, float, Decimal]


def div_round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounding halves away from zero."""
    if denominator == 0:
        raise ZeroDivisionError("denominator must be non-zero")
    q, r = divmod(abs(numerator), abs(denominator))
    if 2 * r >= abs(denominator):
        q += 1
    return q if (numerator >= 0) == (denominator > 0) else -q


def round_half_up(value: Number) -> int:
    d = Decimal(str(value))
    if not d.is_finite():
        raise ValueError(f"cannot round non-finite value {value}")
    return int(d.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def dollars_to_cents(dollars: Number) -> int:
    return round_half_up(Decimal(str(dollars)) * CENTS_PER_DOLLAR)


def cents_to_dollars(cents: int) -> float:
    return cents / CENTS_PER_DOLLAR


def percent_to_bp(percent: Number) -> int:
    # 5.8 (%) -> 580 bp
    return round_half_up(Decimal(str(percent)) * (BP_SCALE // 100))


def bp_to_percent(bp: int) -> float:
    return bp / (BP_SCALE // 100)


def multiplier_to_bp(multiplier: Number) -> int:
    return round_half_up(Decimal(str(multiplier)) * BP_SCALE)


def bp_to_multiplier(bp: int) -> float:
    return bp / BP_SCALE


def scale_bp(bp: int, multiplier: Number) -> int:
    """Multiply a basis-point value by a display multiplier, rounding half up."""
    return round_half_up(Decimal(bp) * Decimal(str(multiplier)))


def opps_to_scaled(opportunities: Number) -> int:
    return round_half_up(Decimal(str(opportunities)) * OPP_SCALE)


def scaled_to_opps(scaled: int) -> float:
    return scaled / OPP_SCALE


_TO_DISPLAY = {
    "cents": cents_to_dollars,
    "bp": bp_to_percent,
    "multiplier_bp": bp_to_multiplier,
    "opps": scaled_to_opps,
}

_FROM_DISPLAY = {
    "cents": dollars_to_cents,
    "bp": percent_to_bp,
    "multiplier_bp": multiplier_to_bp,
    "opps": opps_to_scaled,
}


def to_display(value: int, unit: str) -> float:
    convert = _TO_DISPLAY.get(unit)
    if convert is None:
        raise ValueError(f"unknown unit: {unit}")
    return convert(value)


def from_display(value: Number, unit: str) -> int:
    convert = _FROM_DISPLAY.get(unit)
    if convert is None:
        raise ValueError(f"unknown unit: {unit}")
    return convert(value)
