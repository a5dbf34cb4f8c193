"""
models/obligation.py
--------------------
Recurring obligations (a bucket's contribution schedule or a plan's premium
schedule) and the due status derived from them.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from models.frequency import Frequency

NONE = "none"
DUE_SOON = "due_soon"
OVERDUE = "overdue"


@dataclass(frozen=True)
class RecurringObligation:
    """
    Attributes:
        frequency: How often the obligation recurs.
        anchor_date: Next scheduled occurrence, if one is set.
        expiry_date: Plans only. Once passed, the obligation is dormant for good.
    """
    frequency: Frequency
    anchor_date: Optional[date] = None
    expiry_date: Optional[date] = None


@dataclass(frozen=True)
class DueStatus:
    """
    Derived status of an obligation on a given day. Never persisted.

    Attributes:
        kind: 'none', 'due_soon' or 'overdue'.
        days: Days remaining for due_soon, days late for overdue, 0 for none.
    """
    kind: str = NONE
    days: int = 0

    @classmethod
    def none(cls) -> "DueStatus":
        return cls(NONE, 0)

    @classmethod
    def due_soon(cls, days_remaining: int) -> "DueStatus":
        return cls(DUE_SOON, days_remaining)

    @classmethod
    def overdue(cls, days_late: int) -> "DueStatus":
        return cls(OVERDUE, days_late)

    @property
    def is_overdue(self) -> bool:
        return self.kind == OVERDUE

    @property
    def needs_action(self) -> bool:
        return self.kind != NONE

    def describe(self) -> str:
        if self.kind == OVERDUE:
            return f"overdue by {self.days} day{'s' if self.days != 1 else ''}"
        if self.kind == DUE_SOON:
            return "due today" if self.days == 0 else f"due in {self.days}d"
        return ""
