"""
services/recurrence_engine.py
-----------------------------
Date arithmetic and due-status derivation for recurring obligations
(bucket contributions and insurance premiums).

Every function here is pure: no I/O, no clock access. Callers pass "today".

Month/year overflow policy: results are clamped to the end of the target
month (Jan 31 + 1 month = Feb 28/29, Feb 29 + 1 year = Feb 28), which is
how dateutil's relativedelta normalizes.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from models.frequency import CUSTOM, HALF_YEARLY, MONTHLY, QUARTERLY, YEARLY, Frequency
from models.obligation import DueStatus, RecurringObligation

_STEPS = {
    MONTHLY: relativedelta(months=1),
    QUARTERLY: relativedelta(months=3),
    HALF_YEARLY: relativedelta(months=6),
    YEARLY: relativedelta(years=1),
}

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    """Truncate a datetime to its calendar day; dates pass through."""
    return value.date() if isinstance(value, datetime) else value


def next_occurrence(anchor: DateLike, frequency: Frequency) -> date:
    """
    Advance an anchor date by one period of the frequency.

    Args:
        anchor: Current scheduled date.
        frequency: Period to add.

    Returns:
        The next scheduled date.
    """
    anchor = _as_date(anchor)
    if frequency.kind == CUSTOM:
        return anchor + timedelta(days=frequency.days)
    return anchor + _STEPS[frequency.kind]


def days_until(target: Optional[DateLike], today: DateLike) -> Optional[int]:
    """
    Whole calendar days from today to target.

    Returns:
        None if target is absent, 0 for today, 1 for tomorrow, negative
        values for past dates.
    """
    if target is None:
        return None
    return (_as_date(target) - _as_date(today)).days


def is_expired(expiry: Optional[DateLike], today: DateLike) -> bool:
    """True if an expiry date is set and strictly before today."""
    days = days_until(expiry, today)
    return days is not None and days < 0


def is_expiring_soon(expiry: Optional[DateLike], today: DateLike, threshold_days: int = 60) -> bool:
    """True if the expiry falls between today and today + threshold_days (inclusive)."""
    days = days_until(expiry, today)
    return days is not None and 0 <= days <= threshold_days


def classify(
    anchor: Optional[DateLike],
    expiry: Optional[DateLike],
    today: DateLike,
    due_soon_threshold_days: int,
) -> DueStatus:
    """
    Derive the due status of an obligation.

    Policy, in order:
        1. An expiry strictly before today suppresses everything -> none.
        2. No anchor date -> none.
        3. Anchor in the past -> overdue(days late); within the threshold
           (today included) -> due_soon(days remaining); otherwise none.
    """
    if is_expired(expiry, today):
        return DueStatus.none()
    days = days_until(anchor, today)
    if days is None:
        return DueStatus.none()
    if days < 0:
        return DueStatus.overdue(-days)
    if days <= due_soon_threshold_days:
        return DueStatus.due_soon(days)
    return DueStatus.none()


def classify_obligation(
    obligation: Optional[RecurringObligation],
    today: DateLike,
    due_soon_threshold_days: int,
) -> DueStatus:
    """classify() for a RecurringObligation; no obligation means no status."""
    if obligation is None:
        return DueStatus.none()
    return classify(obligation.anchor_date, obligation.expiry_date, today, due_soon_threshold_days)
