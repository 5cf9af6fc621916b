"""Type normalisation at the storage boundary.

Numeric columns come back as ``Decimal`` (PostgreSQL), as floats or text
(SQLite) depending on the driver, and dates may arrive as ``YYYY-MM-DD`` text.
Everything downstream works on ``Decimal`` and ``date``; conversion to
``float`` only happens when a value is handed to a response model.
"""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

NumberLike = Union[Decimal, float, int, str]

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def to_decimal(val: Optional[NumberLike]) -> Decimal:
    if val is None:
        return _ZERO
    # str() first so floats keep their shortest repr instead of the binary expansion
    return val if isinstance(val, Decimal) else Decimal(str(val))


def to_float(val: Optional[NumberLike]) -> float:
    return float(to_decimal(val))


def utc_today() -> date:
    """The calendar date in UTC; every "today" default and dashboard window uses this clock."""
    return datetime.now(timezone.utc).date()


def to_date(val: Union[date, datetime, str]) -> date:
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    return date.fromisoformat(str(val)[:10])


def mean(total: Optional[NumberLike], count: Optional[int]) -> Decimal:
    """Average of ``count`` values summing to ``total``; zero when there are none."""
    if not count:
        return _ZERO
    return to_decimal(total) / Decimal(count)


def percentage(part: Optional[NumberLike], whole: Optional[NumberLike]) -> Decimal:
    whole_dec = to_decimal(whole)
    if whole_dec == _ZERO:
        return _ZERO
    return to_decimal(part) / whole_dec * _HUNDRED


def round_half_up(val: Optional[NumberLike], places: int = 2) -> float:
    """Round half away from zero (2.345 -> 2.35, -2.345 -> -2.35)."""
    quantum = Decimal(1).scaleb(-places)
    return float(to_decimal(val).quantize(quantum, rounding=ROUND_HALF_UP))


def full_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}"
