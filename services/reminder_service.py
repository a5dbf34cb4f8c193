"""
services/reminder_service.py
----------------------------
Builds the daily reminder digest: buckets with a contribution due and plans
that need attention (premium due, expiring soon, expired and unacknowledged).
"""

from datetime import date
from typing import Optional

from services.lifexp_service import LifeXpService
from services.plan_service import PlanService
from utils.logger import get_logger

logger = get_logger(__name__)


def build_digest(lifexp: LifeXpService, plans: PlanService, today: date) -> Optional[str]:
    """
    Returns:
        The reminder text, or None when nothing needs attention.
    """
    lines = []

    due = lifexp.due_buckets(lifexp.list_buckets(), today)
    if due:
        lines.append("🎯 Life XP contributions")
        for bucket, status in due:
            lines.append(f"• #{bucket.id} {bucket.name}: {status.describe()}")

    alerts = plans.action_needed(plans.list_plans(), today)
    if alerts:
        if lines:
            lines.append("")
        lines.append("🛡️ Insurance plans")
        for alert in alerts:
            lines.append(f"• #{alert.plan.id} {alert.plan.name}: {alert.describe()}")

    if not lines:
        return None
    logger.info(f"Reminder digest: {len(due)} buckets, {len(alerts)} plans")
    return "⏰ Reminders\n\n" + "\n".join(lines)
