"""
models/bucket.py
----------------
Domain models for Life XP buckets (savings goals) and their contribution history.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from models.frequency import BUCKET_KINDS, Frequency
from models.obligation import RecurringObligation
from utils.dates import parse_optional_date
from utils.errors import InvalidFrequencyError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LifeXpBucket:
    """
    A savings goal, optionally with a recurring contribution schedule.

    Attributes:
        id: Backend primary key.
        name: Display name (e.g. 'Japan trip').
        target_amount: Amount the user wants to save.
        saved_amount: Amount saved so far.
        is_repetitive: Whether contributions recur.
        contribution_frequency: Raw frequency kind from the backend.
        custom_frequency_days: Day count for the 'custom' kind.
        next_contribution_date: Next scheduled contribution (the anchor date).
        status: 'active' or 'achieved'.
        notes: Free text.
    """
    id: int
    name: str
    target_amount: float
    saved_amount: float = 0.0
    is_repetitive: bool = False
    contribution_frequency: Optional[str] = None
    custom_frequency_days: Optional[int] = None
    next_contribution_date: Optional[date] = None
    status: str = "active"
    notes: Optional[str] = None

    @property
    def frequency(self) -> Optional[Frequency]:
        """Parsed contribution frequency, or None when unset or invalid."""
        if not self.contribution_frequency:
            return None
        try:
            return Frequency.parse(
                self.contribution_frequency, self.custom_frequency_days, allowed=BUCKET_KINDS
            )
        except InvalidFrequencyError as e:
            logger.warning(f"Bucket #{self.id} has an invalid frequency: {e}")
            return None

    @property
    def obligation(self) -> Optional[RecurringObligation]:
        """The contribution schedule, if recurrence is enabled and valid."""
        if not self.is_repetitive:
            return None
        frequency = self.frequency
        if frequency is None:
            return None
        return RecurringObligation(frequency=frequency, anchor_date=self.next_contribution_date)

    @property
    def progress(self) -> float:
        """Saved share of the target in percent, capped at 100."""
        if self.target_amount <= 0:
            return 0.0
        return min(self.saved_amount / self.target_amount * 100, 100.0)

    @classmethod
    def from_api(cls, data: dict) -> "LifeXpBucket":
        """Build a bucket from the backend's JSON representation."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            target_amount=float(data.get("target_amount") or 0),
            saved_amount=float(data.get("saved_amount") or 0),
            is_repetitive=bool(data.get("is_repetitive")),
            contribution_frequency=data.get("contribution_frequency"),
            custom_frequency_days=data.get("custom_frequency_days"),
            next_contribution_date=parse_optional_date(data.get("next_contribution_date")),
            status=data.get("status") or "active",
            notes=data.get("notes"),
        )

    def __str__(self) -> str:
        return f"#{self.id} {self.name}: {self.saved_amount:.2f}/{self.target_amount:.2f} ({self.status})"


@dataclass
class LifeXpHistory:
    """One contribution row of a bucket."""
    id: int
    bucket_id: int
    date: date
    amount: float
    total_saved: float
    notes: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "LifeXpHistory":
        return cls(
            id=int(data["id"]),
            bucket_id=int(data["bucket_id"]),
            date=parse_optional_date(data["date"]),
            amount=float(data.get("amount") or 0),
            total_saved=float(data.get("total_saved") or 0),
            notes=data.get("notes"),
        )
