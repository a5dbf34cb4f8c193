"""
models/plan.py
--------------
Domain models for insurance plans and their premium/cover history.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from models.frequency import PLAN_KINDS, Frequency
from models.obligation import RecurringObligation
from utils.dates import parse_optional_date
from utils.errors import InvalidFrequencyError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class InsurancePlan:
    """
    An insurance policy with a recurring premium.

    Attributes:
        id: Backend primary key.
        name: Policy name.
        cover_amount: Sum assured.
        premium_amount: Premium paid per period.
        premium_frequency: Raw frequency kind from the backend.
        custom_frequency_days: Day count for the 'custom' kind.
        expiry_date: Policy end; after it no premium is ever due.
        next_premium_date: Next premium due date (the anchor date).
        notes: Free text.
    """
    id: int
    name: str
    cover_amount: float
    premium_amount: float
    premium_frequency: str = "yearly"
    custom_frequency_days: Optional[int] = None
    expiry_date: Optional[date] = None
    next_premium_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def frequency(self) -> Optional[Frequency]:
        """Parsed premium frequency, or None when invalid."""
        try:
            return Frequency.parse(
                self.premium_frequency, self.custom_frequency_days, allowed=PLAN_KINDS
            )
        except InvalidFrequencyError as e:
            logger.warning(f"Plan #{self.id} has an invalid frequency: {e}")
            return None

    @property
    def obligation(self) -> Optional[RecurringObligation]:
        frequency = self.frequency
        if frequency is None:
            return None
        return RecurringObligation(
            frequency=frequency,
            anchor_date=self.next_premium_date,
            expiry_date=self.expiry_date,
        )

    @property
    def frequency_label(self) -> str:
        frequency = self.frequency
        return frequency.label if frequency else self.premium_frequency

    @classmethod
    def from_api(cls, data: dict) -> "InsurancePlan":
        """Build a plan from the backend's JSON representation."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            cover_amount=float(data.get("cover_amount") or 0),
            premium_amount=float(data.get("premium_amount") or 0),
            premium_frequency=data.get("premium_frequency") or "yearly",
            custom_frequency_days=data.get("custom_frequency_days"),
            expiry_date=parse_optional_date(data.get("expiry_date")),
            next_premium_date=parse_optional_date(data.get("next_premium_date")),
            notes=data.get("notes"),
        )

    def __str__(self) -> str:
        return f"#{self.id} {self.name}: {self.premium_amount:.2f} ({self.frequency_label})"


@dataclass
class PlanHistory:
    """A dated snapshot of a plan's cover and premium (one row per payment or edit)."""
    id: int
    plan_id: int
    date: date
    cover_amount: float
    premium_amount: float
    notes: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "PlanHistory":
        return cls(
            id=int(data["id"]),
            plan_id=int(data["plan_id"]),
            date=parse_optional_date(data["date"]),
            cover_amount=float(data.get("cover_amount") or 0),
            premium_amount=float(data.get("premium_amount") or 0),
            notes=data.get("notes"),
        )
