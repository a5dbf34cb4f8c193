"""
services/annualization.py
-------------------------
Normalizes periodic amounts to a yearly figure, e.g. for the
"Annual Premium" total on the plans overview. Display only, never persisted.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Union

from models.frequency import CUSTOM, HALF_YEARLY, MONTHLY, QUARTERLY, YEARLY, Frequency
from models.plan import InsurancePlan
from services.recurrence_engine import is_expired

_PERIODS_PER_YEAR = {
    MONTHLY: Decimal(12),
    QUARTERLY: Decimal(4),
    HALF_YEARLY: Decimal(2),
    YEARLY: Decimal(1),
}

DAYS_PER_YEAR = Decimal(365)


def annualize(amount: Union[Decimal, int, float, str], frequency: Frequency) -> Decimal:
    """
    Convert a per-period amount into its annual equivalent.

    custom(n) uses 365 / n periods per year, so 100 every 10 days is 3650.
    """
    amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if frequency.kind == CUSTOM:
        return amount * DAYS_PER_YEAR / Decimal(frequency.days)
    return amount * _PERIODS_PER_YEAR[frequency.kind]


def total_annual_premium(plans: Iterable[InsurancePlan], today: date) -> Decimal:
    """Sum of annualized premiums over plans that have not expired."""
    total = Decimal(0)
    for plan in plans:
        if is_expired(plan.expiry_date, today):
            continue
        frequency = plan.frequency
        if frequency is None:
            continue
        total += annualize(plan.premium_amount, frequency)
    return total
