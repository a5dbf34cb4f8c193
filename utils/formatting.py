"""
utils/formatting.py
-------------------
Display helpers shared by services and handlers: currency, plain numbers
and clock times.
"""

from datetime import datetime
from decimal import Decimal
from typing import Union

_CURRENCY_SYMBOLS = {"INR": "₹", "EUR": "€", "USD": "$", "GBP": "£"}

Number = Union[int, float, Decimal]


def _group_indian(digits: str) -> str:
    """Group an integer digit string the en-IN way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(value: Number, currency: str = "INR") -> str:
    """
    Format an amount with its currency symbol, 0 to 2 fraction digits and
    Indian digit grouping.

    Examples:
        format_currency(1500000)  -> '₹15,00,000'
        format_currency(99.5)     -> '₹99.5'
    """
    symbol = _CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    amount = Decimal(str(value)).quantize(Decimal("0.01"))
    sign = "-" if amount < 0 else ""
    whole, _, frac = f"{abs(amount):.2f}".partition(".")
    frac = frac.rstrip("0")
    text = _group_indian(whole)
    if frac:
        text += "." + frac
    return f"{sign}{symbol}{text}"


def format_number(value: Number) -> str:
    """
    Shortest plain representation of a number: integral values lose their
    fraction ('100', not '100.0'), others keep full precision ('12.5').
    """
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return str(value.quantize(Decimal(1)))
        return format(value.normalize(), "f")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def format_clock_time(moment: datetime) -> str:
    """Render a time of day as 'h:mm:ss AM' in the moment's own timezone."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}"
