"""
models/activity.py
------------------
Domain model for activity log entries (the local audit trail of user actions).
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

# Older logs were written per domain with their own subject keys.
_LEGACY_NAME_KEYS = ("subjectName", "bucketName", "planName")
_LEGACY_ID_KEYS = ("subjectId", "bucketId", "planId")


@dataclass
class NewActivityLogEntry:
    """
    An action to record, before the log assigns it an id and timestamp.

    Attributes:
        date: Calendar date of the action.
        subject_name: Display name of the bucket/plan at the time.
        subject_id: Backend id of the bucket/plan (may outlive the entity).
        action: Action tag from the domain's vocabulary (e.g. 'premium_paid').
        amount: Optional monetary value.
        details: Optional free-text summary.
    """
    date: date
    subject_name: str
    subject_id: int
    action: str
    amount: Optional[float] = None
    details: Optional[str] = None


@dataclass
class ActivityLogEntry:
    """A recorded action. Entries are never updated in place."""
    id: str
    date: date
    timestamp: str  # ISO-8601 instant, UTC, e.g. 2026-10-18T09:15:02.123Z
    subject_name: str
    subject_id: int
    action: str
    amount: Optional[float] = None
    details: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys used by the persisted log."""
        data = {
            "id": self.id,
            "date": self.date.isoformat(),
            "timestamp": self.timestamp,
            "subjectName": self.subject_name,
            "subjectId": self.subject_id,
            "action": self.action,
        }
        if self.amount is not None:
            data["amount"] = self.amount
        if self.details is not None:
            data["details"] = self.details
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ActivityLogEntry":
        """
        Rebuild an entry from its stored form.

        Raises:
            KeyError, ValueError, TypeError: If the stored object is malformed.
        """
        name = next((data[k] for k in _LEGACY_NAME_KEYS if k in data), None)
        subject_id = next((data[k] for k in _LEGACY_ID_KEYS if k in data), None)
        if name is None or subject_id is None:
            raise KeyError("subject name/id")
        amount = data.get("amount")
        return cls(
            id=str(data["id"]),
            date=date.fromisoformat(data["date"]),
            timestamp=str(data.get("timestamp") or ""),
            subject_name=str(name),
            subject_id=int(subject_id),
            action=str(data["action"]),
            amount=float(amount) if amount is not None else None,
            details=data.get("details"),
        )

    def __str__(self) -> str:
        amount = f" {self.amount:.2f}" if self.amount else ""
        return f"{self.date} | {self.subject_name} | {self.action}{amount}"
