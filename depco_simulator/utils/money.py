"""Money and percentage helpers shared by the simulation core"""

import math
from decimal import Decimal, ROUND_HALF_UP
from numbers import Real
from typing import Optional


def round_half_up(value: float) -> int:
    """Round to the nearest whole currency unit, halves rounding up"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round1(value: float) -> float:
    """Round to one decimal place, halves rounding up (32.45 -> 32.5)"""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def percent_of(part: float, whole: Optional[float]) -> float:
    """
    Express part as a percentage of whole, rounded to one decimal.

    Absent, zero or negative `whole` resolves to 0.0. This is the only
    place a DTI-style ratio is divided, so the zero-income policy is
    applied identically everywhere.
    """
    if whole is None or whole <= 0:
        return 0.0
    ratio = Decimal(str(part)) * 100 / Decimal(str(whole))
    return float(ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def or_zero(value: Optional[float]) -> float:
    """Default policy for optional numeric fields: absent means 0"""
    return 0 if value is None else value


def is_number(value) -> bool:
    """True for finite real numbers (bools excluded)"""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def format_currency(amount: float) -> str:
    """Format as whole Rand: 12500 -> 'R12,500', -2500 -> '-R2,500'"""
    whole = round_half_up(amount)
    sign = "-" if whole < 0 else ""
    return f"{sign}R{abs(whole):,}"


def format_signed_currency(amount: float) -> str:
    """Like format_currency but prefixes '+' for positive deltas"""
    text = format_currency(amount)
    return f"+{text}" if round_half_up(amount) > 0 else text


def format_percent(value: float) -> str:
    return f"{round1(value):g}%"
