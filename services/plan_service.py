"""
services/plan_service.py
------------------------
Business logic for insurance plans: premium alerts, marking premiums paid,
expiry handling and plan/history mutations.

Responsibilities:
    - Derive premium due/overdue status (expired plans never nag).
    - Refuse to schedule a premium past the policy's expiry (final payment).
    - Keep the list of acknowledged expired plans in local storage.
    - Append to the plans activity log after every confirmed mutation.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from models.activity import NewActivityLogEntry
from models.frequency import Frequency
from models.obligation import DueStatus
from models.plan import InsurancePlan, PlanHistory
from repositories.api_client import ApiClient
from repositories.storage import StoragePort, load_json, save_json
from services import annualization
from services.activity_log import ActivityLog
from services.history_csv import ImportResult, export_history_csv, parse_history_csv
from services.recurrence_engine import (
    classify_obligation,
    is_expired,
    is_expiring_soon,
    next_occurrence,
)
from utils.errors import BackendError, FinalPaymentError, InvalidFrequencyError, PlanExpiredError
from utils.formatting import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)

ACKNOWLEDGED_EXPIRED_KEY = "acknowledgedExpiredPlans"
DEFAULT_DUE_SOON_DAYS = 15
DEFAULT_EXPIRING_SOON_DAYS = 60
PLAN_HISTORY_HEADERS = ("Date", "Cover", "Premium", "Notes")


@dataclass
class PlanAlert:
    """Why a plan needs the user's attention today."""
    plan: InsurancePlan
    status: DueStatus
    expired: bool = False
    expiring_soon: bool = False

    def describe(self) -> str:
        if self.expired:
            return f"expired on {self.plan.expiry_date}"
        parts = []
        if self.status.needs_action:
            parts.append(f"premium {self.status.describe()}")
        if self.expiring_soon:
            parts.append(f"expires {self.plan.expiry_date}")
        return ", ".join(parts)


@dataclass
class MarkPaidResult:
    """
    Outcome of marking a premium paid.

    Attributes:
        plan: The plan as updated by the backend.
        history: The payment's history row, None if creating it failed.
        warning: Message for the user when the history row is missing.
    """
    plan: InsurancePlan
    history: Optional[PlanHistory] = None
    warning: Optional[str] = None


class PlanService:
    """
    Args:
        api: Backend client.
        activity_log: The plans activity log.
        storage: Local storage for the acknowledged-expired id list.
        due_soon_days: A premium within this many days counts as due soon.
        expiring_soon_days: An expiry within this many days is flagged.
        currency: Currency code used in log details.
    """

    def __init__(
        self,
        api: ApiClient,
        activity_log: ActivityLog,
        storage: StoragePort,
        due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
        expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS,
        currency: str = "INR",
    ):
        self.api = api
        self.log = activity_log
        self.storage = storage
        self.due_soon_days = due_soon_days
        self.expiring_soon_days = expiring_soon_days
        self.currency = currency

    def _money(self, value: float) -> str:
        return format_currency(value, self.currency)

    def _record(
        self,
        plan: InsurancePlan,
        action: str,
        amount: Optional[float],
        details: str,
        today: Optional[date],
    ) -> None:
        self.log.append(
            NewActivityLogEntry(
                date=today or date.today(),
                subject_name=plan.name,
                subject_id=plan.id,
                action=action,
                amount=amount,
                details=details,
            )
        )

    @staticmethod
    def _payload(
        name: str,
        cover_amount: float,
        premium_amount: float,
        frequency: Frequency,
        expiry_date: Optional[date],
        next_premium_date: Optional[date],
        notes: Optional[str],
    ) -> dict:
        return {
            "name": name,
            "cover_amount": cover_amount,
            "premium_amount": premium_amount,
            "premium_frequency": frequency.kind,
            "custom_frequency_days": frequency.days,
            "expiry_date": expiry_date.isoformat() if expiry_date else None,
            "next_premium_date": next_premium_date.isoformat() if next_premium_date else None,
            "notes": notes,
        }

    # ── STATUS ────────────────────────────────────────────

    def list_plans(self) -> list[InsurancePlan]:
        return self.api.list_plans()

    def status_for(self, plan: InsurancePlan, today: date) -> DueStatus:
        """Premium due status; always none once the plan has expired."""
        return classify_obligation(plan.obligation, today, self.due_soon_days)

    def next_premium_date(self, plan: InsurancePlan, today: date) -> date:
        """
        Due date after the next payment: the current due date (or today when
        none is set) advanced one period.

        Raises:
            InvalidFrequencyError: The plan's frequency is not usable.
        """
        frequency = plan.frequency
        if frequency is None:
            raise InvalidFrequencyError(f"Plan #{plan.id} has no valid premium frequency")
        return next_occurrence(plan.next_premium_date or today, frequency)

    def is_final_payment(self, plan: InsurancePlan, today: date) -> bool:
        """True when the next due date would fall after the plan's expiry."""
        if plan.expiry_date is None:
            return False
        return self.next_premium_date(plan, today) > plan.expiry_date

    def awaiting_final_payment(self, plan: InsurancePlan, today: date) -> bool:
        """
        Whether a live plan's next premium is its last one. Shown instead of
        offering /paid; False for expired plans and unusable frequencies.
        """
        if is_expired(plan.expiry_date, today):
            return False
        try:
            return self.is_final_payment(plan, today)
        except InvalidFrequencyError:
            return False

    def active_plans(self, plans: list[InsurancePlan], today: date) -> list[InsurancePlan]:
        return [p for p in plans if not is_expired(p.expiry_date, today)]

    def expired_plans(self, plans: list[InsurancePlan], today: date) -> list[InsurancePlan]:
        return [p for p in plans if is_expired(p.expiry_date, today)]

    def action_needed(self, plans: list[InsurancePlan], today: date) -> list[PlanAlert]:
        """
        Plans to flag: premium due soon or overdue, expiring soon, or expired
        and not yet acknowledged.
        """
        acknowledged = set(self.acknowledged_ids())
        alerts = []
        for plan in plans:
            expired = is_expired(plan.expiry_date, today)
            if expired:
                if plan.id not in acknowledged:
                    alerts.append(PlanAlert(plan, DueStatus.none(), expired=True))
                continue
            status = self.status_for(plan, today)
            expiring = is_expiring_soon(plan.expiry_date, today, self.expiring_soon_days)
            if status.needs_action or expiring:
                alerts.append(PlanAlert(plan, status, expiring_soon=expiring))
        return alerts

    def total_annual_premium(self, plans: list[InsurancePlan], today: date) -> Decimal:
        return annualization.total_annual_premium(plans, today)

    def premium_total(self, plan: InsurancePlan) -> float:
        """Sum of premiums recorded in the plan's history."""
        return sum(h.premium_amount for h in self.api.list_plan_history(plan.id))

    # ── PREMIUM PAYMENT ───────────────────────────────────

    def mark_paid(self, plan: InsurancePlan, today: Optional[date] = None) -> MarkPaidResult:
        """
        Record today's premium payment and move the due date one period ahead.

        Raises:
            PlanExpiredError: The plan has already expired.
            FinalPaymentError: The next due date would pass the plan's expiry.
            BackendError: The plan update failed (nothing is logged).
        """
        today = today or date.today()
        if is_expired(plan.expiry_date, today):
            raise PlanExpiredError(f"'{plan.name}' expired on {plan.expiry_date}")
        if self.is_final_payment(plan, today):
            raise FinalPaymentError(
                f"'{plan.name}' expires on {plan.expiry_date}; this is the final payment"
            )
        frequency = plan.frequency
        next_date = self.next_premium_date(plan, today)

        updated = self.api.update_plan(
            plan.id,
            self._payload(
                plan.name, plan.cover_amount, plan.premium_amount, frequency,
                plan.expiry_date, next_date, plan.notes,
            ),
        )

        result = MarkPaidResult(plan=updated)
        try:
            result.history = self.api.create_plan_history(
                plan.id, today, plan.cover_amount, plan.premium_amount,
                f"Premium paid ({frequency.label})",
            )
        except BackendError as e:
            logger.warning(f"Plan #{plan.id} updated but history entry failed: {e}")
            result.warning = "Plan updated but failed to add history entry. Please add it manually."

        self._record(
            plan, "premium_paid", plan.premium_amount,
            f"Premium: {self._money(plan.premium_amount)} ({frequency.label}). "
            f"Next due: {next_date.isoformat()}",
            today,
        )
        return result

    # ── EXPIRY ACKNOWLEDGEMENT ────────────────────────────

    def acknowledged_ids(self) -> list[int]:
        ids = load_json(self.storage, ACKNOWLEDGED_EXPIRED_KEY, list, [])
        return [i for i in ids if isinstance(i, int) and not isinstance(i, bool)]

    def _save_acknowledged(self, ids: list[int]) -> None:
        save_json(self.storage, ACKNOWLEDGED_EXPIRED_KEY, ids)

    def acknowledge_expired(self, plan: InsurancePlan, today: Optional[date] = None) -> bool:
        """
        Silence the expiry alert for a plan.

        Returns:
            False if the plan was already acknowledged.

        Raises:
            ValueError: The plan has not expired.
        """
        today = today or date.today()
        if not is_expired(plan.expiry_date, today):
            raise ValueError(f"'{plan.name}' has not expired")
        ids = self.acknowledged_ids()
        if plan.id in ids:
            return False
        ids.append(plan.id)
        self._save_acknowledged(ids)
        self._record(
            plan, "plan_expired_ack", 0,
            f"Expired on: {plan.expiry_date.isoformat() if plan.expiry_date else 'N/A'}", today,
        )
        return True

    # ── CREATE / UPDATE / DELETE ──────────────────────────

    def create_plan(
        self,
        name: str,
        cover_amount: float,
        premium_amount: float,
        frequency: Frequency,
        expiry_date: Optional[date] = None,
        next_premium_date: Optional[date] = None,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> InsurancePlan:
        created = self.api.create_plan(
            self._payload(name, cover_amount, premium_amount, frequency,
                          expiry_date, next_premium_date, notes)
        )
        self._record(
            created, "plan_created", cover_amount,
            f"Cover: {self._money(cover_amount)}, "
            f"Premium: {self._money(premium_amount)}/{frequency.label}",
            today,
        )
        return created

    def update_plan(
        self,
        plan: InsurancePlan,
        name: str,
        cover_amount: float,
        premium_amount: float,
        frequency: Frequency,
        expiry_date: Optional[date] = None,
        next_premium_date: Optional[date] = None,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> InsurancePlan:
        """Replace a plan's settings. The log lists the fields that changed."""
        updated = self.api.update_plan(
            plan.id,
            self._payload(name, cover_amount, premium_amount, frequency,
                          expiry_date, next_premium_date, notes),
        )
        changes = []
        if plan.name != updated.name:
            changes.append(f"Name: {updated.name}")
        if plan.cover_amount != updated.cover_amount:
            changes.append(f"Cover: {self._money(updated.cover_amount)}")
        if plan.premium_amount != updated.premium_amount:
            changes.append(f"Premium: {self._money(updated.premium_amount)}")
        if (plan.premium_frequency, plan.custom_frequency_days) != (
            updated.premium_frequency, updated.custom_frequency_days
        ):
            changes.append(f"Freq: {updated.frequency_label}")
        if plan.expiry_date != updated.expiry_date:
            changes.append(f"Expiry: {updated.expiry_date or 'None'}")
        if plan.next_premium_date != updated.next_premium_date:
            changes.append(f"Next: {updated.next_premium_date or 'None'}")
        details = ", ".join(changes) if changes else "Settings updated"
        self._record(updated, "plan_updated", updated.cover_amount, details, today)
        return updated

    def delete_plan(self, plan: InsurancePlan, today: Optional[date] = None) -> None:
        """Delete a plan and forget its expiry acknowledgement."""
        today = today or date.today()
        self.api.delete_plan(plan.id)

        ids = self.acknowledged_ids()
        if plan.id in ids:
            self._save_acknowledged([i for i in ids if i != plan.id])

        details = (
            f"Cover: {self._money(plan.cover_amount)}, Premium: {self._money(plan.premium_amount)}"
        )
        if is_expired(plan.expiry_date, today):
            details = "Expired plan deleted. " + details
        self._record(plan, "plan_deleted", plan.cover_amount, details, today)

    # ── HISTORY ───────────────────────────────────────────

    def history(self, plan: InsurancePlan) -> list[PlanHistory]:
        return self.api.list_plan_history(plan.id)

    def add_history(
        self,
        plan: InsurancePlan,
        entry_date: date,
        cover_amount: float,
        premium_amount: float,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> PlanHistory:
        created = self.api.create_plan_history(plan.id, entry_date, cover_amount, premium_amount, notes)
        self._record(
            plan, "history_added", premium_amount,
            f"Added entry: {entry_date.isoformat()}, Cover: {self._money(cover_amount)}", today,
        )
        return created

    def update_history(
        self,
        plan: InsurancePlan,
        entry: PlanHistory,
        cover_amount: float,
        premium_amount: float,
        notes: Optional[str] = None,
        entry_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> PlanHistory:
        """Edit a history row; the date is only sent when it changed."""
        date_changed = entry_date is not None and entry_date != entry.date
        updated = self.api.update_plan_history(
            entry.id, cover_amount, premium_amount, notes, entry_date if date_changed else None
        )
        changes = []
        if date_changed:
            changes.append(f"Date: {entry_date.isoformat()}")
        if entry.cover_amount != updated.cover_amount:
            changes.append(f"Cover: {self._money(updated.cover_amount)}")
        if entry.premium_amount != updated.premium_amount:
            changes.append(f"Premium: {self._money(updated.premium_amount)}")
        details = ", ".join(changes) if changes else "Entry updated"
        self._record(plan, "history_updated", updated.premium_amount, details, today)
        return updated

    def delete_history(
        self, plan: InsurancePlan, entry: PlanHistory, today: Optional[date] = None
    ) -> None:
        self.api.delete_plan_history(entry.id)
        self._record(
            plan, "history_deleted", entry.premium_amount,
            f"Deleted entry: {entry.date.isoformat()}, Cover: {self._money(entry.cover_amount)}",
            today,
        )

    def import_history_csv(self, plan: InsurancePlan, text: str) -> ImportResult:
        """Create one history row per valid ``Date,Cover,Premium,Notes`` line."""
        result = parse_history_csv(text, value_columns=2)
        for row in result.rows:
            cover, premium = row.values
            try:
                self.api.create_plan_history(plan.id, row.date, cover, premium, row.notes or None)
            except BackendError as e:
                logger.warning(f"Plan #{plan.id}: row {row.date} not imported: {e}")
                result.failed += 1
                continue
            result.imported += 1
        logger.info(f"Plan #{plan.id}: imported {result.imported}, skipped {result.skipped}")
        return result

    def export_history_csv(self, history: list[PlanHistory]) -> bytes:
        return export_history_csv(
            PLAN_HISTORY_HEADERS,
            [(h.date, h.cover_amount, h.premium_amount, h.notes) for h in history],
        )
