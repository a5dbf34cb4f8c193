"""
services/activity_log.py
------------------------
Local activity log (audit trail) of user actions on buckets and plans.

One generic store serves every domain; a domain only contributes its storage
key, the label of its subject column and its action vocabulary. The log is
newest-first, capped (500 entries by default) and persisted as a single JSON
array through the storage port.

Writes are read-modify-write with no locking: two processes writing the same
key follow last-write-wins.
"""

import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Iterable, Mapping, Optional, Sequence

import pandas as pd

from models.activity import ActivityLogEntry, NewActivityLogEntry
from repositories.storage import StoragePort, load_json, save_json
from utils.formatting import format_clock_time, format_number
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES = 500


@dataclass(frozen=True)
class ActivityDomain:
    """
    Describes one independent activity log.

    Attributes:
        name: Short domain tag, used in export file names ('lifexp', 'plans').
        storage_key: Key the log is persisted under.
        subject_label: Header of the subject column in exports.
        action_labels: Action tag -> display phrase.
        legacy_keys: Older keys to migrate from when storage_key is empty.
    """
    name: str
    storage_key: str
    subject_label: str = "Subject"
    action_labels: Mapping[str, str] = field(default_factory=dict)
    legacy_keys: tuple[str, ...] = ()


LIFEXP_DOMAIN = ActivityDomain(
    name="lifexp",
    storage_key="lifexp_activity_log",
    subject_label="Bucket",
    action_labels={
        "bucket_created": "Bucket Created",
        "bucket_updated": "Bucket Updated",
        "bucket_deleted": "Bucket Deleted",
        "bucket_achieved": "Bucket Achieved",
        "bucket_reactivated": "Bucket Reactivated",
        "contribution_added": "Contribution Added",
        "contribution_marked_done": "Contribution Marked Done",
        "history_updated": "History Updated",
        "history_deleted": "History Deleted",
    },
)

PLANS_DOMAIN = ActivityDomain(
    name="plans",
    storage_key="planActivityLog",
    subject_label="Plan",
    action_labels={
        "premium_paid": "Premium Paid",
        "plan_created": "Plan Created",
        "plan_updated": "Plan Updated",
        "plan_deleted": "Plan Deleted",
        "plan_expired_ack": "Expired Acknowledged",
        "history_added": "History Added",
        "history_updated": "History Updated",
        "history_deleted": "History Deleted",
    },
    legacy_keys=("planPaymentLog",),
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso_instant(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a 'Z' suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class ActivityLog:
    """
    Append-only, capped activity log for one domain.

    Args:
        storage: Where the serialized log lives.
        domain: Which log (key, labels, vocabulary).
        max_entries: Capacity; older entries are dropped on append.
        clock: Returns the current instant (timezone-aware). Injectable for tests.
        local_tz: Timezone for the 'Time' export column; None means the
            machine's local zone.
    """

    def __init__(
        self,
        storage: StoragePort,
        domain: ActivityDomain,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] = _utc_now,
        local_tz: Optional[tzinfo] = None,
    ):
        self.storage = storage
        self.domain = domain
        self.max_entries = max_entries
        self.clock = clock
        self.local_tz = local_tz

    # ── READ ──────────────────────────────────────────────

    def _load_raw(self) -> list:
        raw = load_json(self.storage, self.domain.storage_key, list, None)
        if raw is not None:
            return raw
        for legacy_key in self.domain.legacy_keys:
            legacy = load_json(self.storage, legacy_key, list, None)
            if legacy is not None:
                logger.info(f"Migrating activity log from '{legacy_key}' to '{self.domain.storage_key}'")
                save_json(self.storage, self.domain.storage_key, legacy)
                return legacy
        return []

    def entries(self) -> list[ActivityLogEntry]:
        """All entries, newest first. Malformed entries are left out."""
        result = []
        for item in self._load_raw():
            if not isinstance(item, dict):
                continue
            try:
                result.append(ActivityLogEntry.from_dict(item))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed {self.domain.name} log entry: {e}")
        return result

    def recent(self, limit: int = 10) -> list[ActivityLogEntry]:
        return self.entries()[:limit]

    def for_subject(self, subject_id: int) -> list[ActivityLogEntry]:
        return [e for e in self.entries() if e.subject_id == subject_id]

    # ── WRITE ─────────────────────────────────────────────

    def _next_id(self, now: datetime, current: Sequence[ActivityLogEntry]) -> str:
        millis = int(now.timestamp() * 1000)
        if current and current[0].id.isdigit():
            millis = max(millis, int(current[0].id) + 1)
        return str(millis)

    def _save(self, entries: Sequence[ActivityLogEntry]) -> None:
        save_json(self.storage, self.domain.storage_key, [e.to_dict() for e in entries])

    def append(self, new_entry: NewActivityLogEntry) -> ActivityLogEntry:
        """
        Record an action. Call only after the backend confirmed the mutation.

        Returns:
            The stored entry with its generated id and timestamp.
        """
        current = self.entries()
        now = self.clock()
        entry = ActivityLogEntry(
            id=self._next_id(now, current),
            date=new_entry.date,
            timestamp=_iso_instant(now),
            subject_name=new_entry.subject_name,
            subject_id=new_entry.subject_id,
            action=new_entry.action,
            amount=new_entry.amount,
            details=new_entry.details,
        )
        current.insert(0, entry)
        del current[self.max_entries:]
        self._save(current)
        logger.info(f"[{self.domain.name}] {entry.action} logged for '{entry.subject_name}' #{entry.subject_id}")
        return entry

    def remove(self, entry_id: str) -> bool:
        """
        Delete the entry with this id. Unknown ids are ignored.

        Returns:
            True if an entry was removed.
        """
        current = self.entries()
        kept = [e for e in current if e.id != entry_id]
        if len(kept) == len(current):
            return False
        self._save(kept)
        logger.info(f"[{self.domain.name}] Removed log entry {entry_id}")
        return True

    # ── PRESENTATION ──────────────────────────────────────

    def action_label(self, action: str) -> str:
        """Display phrase for an action tag; unknown tags are shown as-is."""
        return self.domain.action_labels.get(action, action)

    def _local_time(self, timestamp: str) -> str:
        if not timestamp:
            return ""
        try:
            moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        except ValueError:
            return ""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return format_clock_time(moment.astimezone(self.local_tz))

    def _headers(self) -> list[str]:
        return ["Date", "Time", self.domain.subject_label, "Action", "Amount", "Details"]

    def export_csv(self, entries: Optional[Iterable[ActivityLogEntry]] = None) -> bytes:
        """
        Serialize entries as CSV: every cell quoted (header included), inner
        quotes doubled, rows joined by '\\n', UTF-8 without BOM.
        Defaults to the whole log.
        """
        entries = self.entries() if entries is None else list(entries)
        rows = [
            [
                e.date.isoformat(),
                self._local_time(e.timestamp),
                e.subject_name,
                self.action_label(e.action),
                format_number(e.amount) if e.amount else "",
                e.details or "",
            ]
            for e in entries
        ]
        df = pd.DataFrame(rows, columns=self._headers(), dtype=str)
        buffer = io.StringIO()
        df.to_csv(buffer, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
        logger.info(f"[{self.domain.name}] Exported {len(rows)} log entries as CSV")
        return buffer.getvalue().rstrip("\n").encode("utf-8")

    def export_excel(self, entries: Optional[Iterable[ActivityLogEntry]] = None) -> io.BytesIO:
        """
        Export entries as an .xlsx workbook with an 'Activity' sheet and a
        'Summary' sheet (count and total amount per action).
        """
        entries = self.entries() if entries is None else list(entries)
        data = [
            {
                "Date": e.date.isoformat(),
                "Time": self._local_time(e.timestamp),
                self.domain.subject_label: e.subject_name,
                "Action": self.action_label(e.action),
                "Amount": e.amount if e.amount else None,
                "Details": e.details or "",
            }
            for e in entries
        ]
        df = pd.DataFrame(data, columns=self._headers())
        df["Amount"] = pd.to_numeric(df["Amount"], errors="coerce")

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Activity", index=False)
            if data:
                summary = (
                    df.groupby("Action")
                    .agg(Count=("Action", "size"), Total=("Amount", "sum"))
                    .reset_index()
                )
                summary.to_excel(writer, sheet_name="Summary", index=False)

        buffer.seek(0)
        logger.info(f"[{self.domain.name}] Exported {len(data)} log entries as Excel")
        return buffer

    def export_filename(self, today: date, extension: str = "csv") -> str:
        """e.g. 'plans_activity_log_2026-10-18.csv'."""
        return f"{self.domain.name}_activity_log_{today.isoformat()}.{extension}"
