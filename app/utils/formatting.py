"""
Display formatting for booking fields (en-US).

Every helper here is total: bad or missing input degrades to a placeholder
or to the original value, never to an exception.
"""

from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

PLACEHOLDER = "TBD"
ZERO_CURRENCY = "$0.00"
# Integer digits beyond this are treated as junk input
MAX_CURRENCY_DIGITS = 100

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a money-ish value to a finite Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    # Digit separators ("1_000") are not valid amounts
    if "_" in text:
        return None
    try:
        amount = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def currency(value: Any) -> str:
    """
    Format a dollar amount, e.g. 1234.5 -> "$1,234.50".

    None, booleans, anything non-numeric and absurd magnitudes render as "$0.00".
    """
    amount = to_decimal(value)
    if amount is None or amount.adjusted() >= MAX_CURRENCY_DIGITS:
        return ZERO_CURRENCY
    with localcontext() as ctx:
        # Enough digits for every integer place plus cents
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        sign = "-" if amount < 0 else ""
        return f"{sign}${abs(amount):,.2f}"


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def _parse_time(value: Any) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value).strip())


def format_date(date_str: Any) -> str:
    """
    Format a calendar date as "Sun, Jun 1, 2025".

    Returns "TBD" when empty and the input unchanged when it can't be parsed.
    """
    if not date_str:
        return PLACEHOLDER
    try:
        d = _parse_date(date_str)
    except (TypeError, ValueError):
        return date_str
    return f"{_WEEKDAYS[d.weekday()]}, {_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_time(time_str: Any, date_str: Any = None) -> str:
    """
    Format a time of day as "2:00 PM".

    When a date is given it must parse too; otherwise the original time
    string is returned unchanged.
    """
    if not time_str:
        return PLACEHOLDER
    try:
        if date_str:
            _parse_date(date_str)
        t = _parse_time(time_str)
    except (TypeError, ValueError):
        return time_str
    hour = t.hour % 12 or 12
    suffix = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {suffix}"


def format_duration(hours: Any) -> str:
    """Render a duration in hours without a trailing ".0"."""
    amount = to_decimal(hours)
    if amount is None:
        return PLACEHOLDER
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")
