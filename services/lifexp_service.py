"""
services/lifexp_service.py
--------------------------
Business logic for Life XP buckets (savings goals with optional recurring
contributions).

Workflow for every mutation:
    1. Call the backend.
    2. On success only, append an entry to the Life XP activity log.
    3. Return the updated bucket.
A BackendError propagates untouched and nothing is logged.
"""

from datetime import date
from typing import Optional

from models.activity import NewActivityLogEntry
from models.bucket import LifeXpBucket, LifeXpHistory
from models.frequency import BUCKET_KINDS, Frequency
from models.obligation import DueStatus
from repositories.api_client import ApiClient
from services.activity_log import ActivityLog
from services.recurrence_engine import classify_obligation, next_occurrence
from utils.errors import InvalidFrequencyError
from utils.formatting import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DUE_SOON_DAYS = 7


def _frequency_fields(frequency: Optional[Frequency]) -> dict:
    if frequency is None:
        return {"is_repetitive": False, "contribution_frequency": None, "custom_frequency_days": None}
    if frequency.kind not in BUCKET_KINDS:
        raise InvalidFrequencyError(f"Buckets cannot recur {frequency.label.lower()}")
    return {
        "is_repetitive": True,
        "contribution_frequency": frequency.kind,
        "custom_frequency_days": frequency.days,
    }


class LifeXpService:
    """
    Handles bucket alerts and bucket mutations.

    Args:
        api: Backend client.
        activity_log: The Life XP activity log.
        due_soon_days: A contribution within this many days counts as due soon.
        currency: Currency code used in log details.
    """

    def __init__(
        self,
        api: ApiClient,
        activity_log: ActivityLog,
        due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
        currency: str = "INR",
    ):
        self.api = api
        self.log = activity_log
        self.due_soon_days = due_soon_days
        self.currency = currency

    def _money(self, value: float) -> str:
        return format_currency(value, self.currency)

    def _record(
        self,
        bucket: LifeXpBucket,
        action: str,
        amount: Optional[float],
        details: str,
        today: Optional[date],
    ) -> None:
        self.log.append(
            NewActivityLogEntry(
                date=today or date.today(),
                subject_name=bucket.name,
                subject_id=bucket.id,
                action=action,
                amount=amount,
                details=details,
            )
        )

    # ── STATUS ────────────────────────────────────────────

    def list_buckets(self) -> list[LifeXpBucket]:
        return self.api.list_buckets()

    def status_for(self, bucket: LifeXpBucket, today: date) -> DueStatus:
        """Due status of the bucket's next contribution (none if not repetitive)."""
        return classify_obligation(bucket.obligation, today, self.due_soon_days)

    def due_buckets(
        self, buckets: list[LifeXpBucket], today: date
    ) -> list[tuple[LifeXpBucket, DueStatus]]:
        """Active buckets whose contribution is due soon or overdue, most urgent first."""
        result = []
        for bucket in buckets:
            if bucket.status != "active":
                continue
            status = self.status_for(bucket, today)
            if status.needs_action:
                result.append((bucket, status))
        result.sort(key=lambda item: -item[1].days if item[1].is_overdue else item[1].days)
        return result

    def next_contribution_date(self, bucket: LifeXpBucket, today: date) -> Optional[date]:
        """The anchor after the next recorded contribution, or None if not repetitive."""
        obligation = bucket.obligation
        if obligation is None:
            return None
        return next_occurrence(obligation.anchor_date or today, obligation.frequency)

    # ── CREATE / UPDATE / DELETE ──────────────────────────

    def create_bucket(
        self,
        name: str,
        target_amount: float,
        frequency: Optional[Frequency] = None,
        next_contribution_date: Optional[date] = None,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> LifeXpBucket:
        """Create a bucket; a frequency makes it repetitive."""
        payload = {
            "name": name,
            "target_amount": target_amount,
            **_frequency_fields(frequency),
            "next_contribution_date": (
                next_contribution_date.isoformat() if frequency and next_contribution_date else None
            ),
            "notes": notes,
        }
        created = self.api.create_bucket(payload)

        details = f"Target: {self._money(target_amount)}"
        if frequency is not None:
            details += f", Frequency: {frequency.label}"
        self._record(created, "bucket_created", target_amount, details, today)
        return created

    def update_bucket(
        self,
        bucket: LifeXpBucket,
        name: str,
        target_amount: float,
        frequency: Optional[Frequency] = None,
        next_contribution_date: Optional[date] = None,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> LifeXpBucket:
        """Replace a bucket's settings. The log lists the fields that changed."""
        payload = {
            "name": name,
            "target_amount": target_amount,
            **_frequency_fields(frequency),
            "next_contribution_date": (
                next_contribution_date.isoformat() if frequency and next_contribution_date else None
            ),
            "notes": notes,
        }
        updated = self.api.update_bucket(bucket.id, payload)

        changes = []
        if bucket.name != updated.name:
            changes.append(f"Name: {updated.name}")
        if bucket.target_amount != updated.target_amount:
            changes.append(f"Target: {self._money(updated.target_amount)}")
        if bucket.is_repetitive != updated.is_repetitive:
            changes.append(f"Repetitive: {str(updated.is_repetitive).lower()}")
        if bucket.contribution_frequency != updated.contribution_frequency:
            new_frequency = updated.frequency
            changes.append(f"Frequency: {new_frequency.label if new_frequency else 'None'}")
        details = ", ".join(changes) if changes else "Settings updated"
        self._record(updated, "bucket_updated", updated.target_amount, details, today)
        return updated

    def delete_bucket(self, bucket: LifeXpBucket, today: Optional[date] = None) -> None:
        self.api.delete_bucket(bucket.id)
        details = f"Target: {self._money(bucket.target_amount)}, Saved: {self._money(bucket.saved_amount)}"
        self._record(bucket, "bucket_deleted", bucket.target_amount, details, today)

    # ── CONTRIBUTIONS ─────────────────────────────────────

    def contribute(
        self,
        bucket: LifeXpBucket,
        amount: float,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> tuple[LifeXpBucket, LifeXpHistory]:
        """Add an ad-hoc contribution. Does not move the schedule."""
        if amount <= 0:
            raise ValueError("Contribution amount must be positive")
        updated, history = self.api.add_contribution(bucket.id, amount, notes)
        self._record(
            bucket, "contribution_added", amount,
            f"New total: {self._money(updated.saved_amount)}", today,
        )
        return updated, history

    def mark_done(
        self,
        bucket: LifeXpBucket,
        amount: Optional[float] = None,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> tuple[LifeXpBucket, LifeXpHistory]:
        """
        Record the scheduled contribution and advance the anchor by one period.

        Args:
            amount: Defaults to a twelfth of the target.
        """
        today = today or date.today()
        amount = amount if amount is not None else round(bucket.target_amount / 12, 2)
        next_date = self.next_contribution_date(bucket, today)
        updated, history = self.api.mark_contribution_done(bucket.id, amount, next_date, notes)
        self._record(
            bucket, "contribution_marked_done", amount,
            f"New total: {self._money(updated.saved_amount)}", today,
        )
        logger.info(f"Bucket #{bucket.id} next contribution moved to {updated.next_contribution_date}")
        return updated, history

    def mark_achieved(self, bucket: LifeXpBucket, today: Optional[date] = None) -> LifeXpBucket:
        updated = self.api.mark_bucket_achieved(bucket.id)
        details = f"Target: {self._money(bucket.target_amount)}, Saved: {self._money(bucket.saved_amount)}"
        self._record(bucket, "bucket_achieved", bucket.saved_amount, details, today)
        return updated

    def reactivate(self, bucket: LifeXpBucket, today: Optional[date] = None) -> LifeXpBucket:
        updated = self.api.reactivate_bucket(bucket.id)
        self._record(
            bucket, "bucket_reactivated", bucket.saved_amount,
            f"Target: {self._money(bucket.target_amount)}", today,
        )
        return updated

    # ── HISTORY ───────────────────────────────────────────

    def history(self, bucket: LifeXpBucket) -> list[LifeXpHistory]:
        return self.api.list_bucket_history(bucket.id)

    def update_history(
        self,
        bucket: LifeXpBucket,
        entry: LifeXpHistory,
        amount: float,
        notes: Optional[str] = None,
        entry_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> LifeXpHistory:
        """Edit a contribution row; the date is only sent when it changed."""
        date_changed = entry_date is not None and entry_date != entry.date
        updated = self.api.update_bucket_history(
            entry.id, amount, notes, entry_date if date_changed else None
        )
        changes = []
        if date_changed:
            changes.append(f"Date: {entry_date.isoformat()}")
        if entry.amount != updated.amount:
            changes.append(f"Amount: {self._money(updated.amount)}")
        details = ", ".join(changes) if changes else "Entry updated"
        self._record(bucket, "history_updated", updated.amount, details, today)
        return updated

    def delete_history(
        self, bucket: LifeXpBucket, entry: LifeXpHistory, today: Optional[date] = None
    ) -> None:
        self.api.delete_bucket_history(entry.id)
        self._record(
            bucket, "history_deleted", entry.amount,
            f"Deleted entry: {entry.date.isoformat()}", today,
        )
