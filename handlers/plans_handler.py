"""
handlers/plans_handler.py
-------------------------
Handles insurance plan commands: /plans, /paid, /ack_expired.
"""

from datetime import date
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import parse_int, reply_usage
from models.plan import InsurancePlan
from security.guards import guarded
from services.recurrence_engine import is_expired
from services.registry import get_services
from utils.errors import FinalPaymentError, PlanExpiredError, TrackerError
from utils.formatting import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)


def _find(plans: list[InsurancePlan], plan_id: Optional[int]) -> Optional[InsurancePlan]:
    return next((p for p in plans if p.id == plan_id), None)


@guarded
async def plans_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /plans - list plans, alerts and the total annual premium."""
    services = get_services()
    today = date.today()
    try:
        plans = services.plans.list_plans()
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    if not plans:
        await update.message.reply_text("🛡️ No insurance plans yet.")
        return

    currency = services.plans.currency
    lines = ["🛡️ Insurance plans", ""]
    for plan in plans:
        line = (
            f"#{plan.id} {plan.name}: cover {format_currency(plan.cover_amount, currency)}, "
            f"premium {format_currency(plan.premium_amount, currency)} ({plan.frequency_label})"
        )
        if is_expired(plan.expiry_date, today):
            line += f"\n    ⛔ expired {plan.expiry_date}"
        else:
            line += f"\n    📅 next premium {plan.next_premium_date or 'not set'}"
            if plan.expiry_date:
                line += f", expires {plan.expiry_date}"
            if services.plans.awaiting_final_payment(plan, today):
                line += "\n    🏁 final payment"
        lines.append(line)

    alerts = services.plans.action_needed(plans, today)
    if alerts:
        lines += ["", f"🔔 {len(alerts)} plan(s) need action"]
        lines += [f"• #{a.plan.id} {a.plan.name}: {a.describe()}" for a in alerts]

    total = services.plans.total_annual_premium(plans, today)
    lines += ["", f"💸 Annual premium: {format_currency(total, currency)}"]
    await update.message.reply_text("\n".join(lines))


@guarded
async def paid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /paid <plan id> - record today's premium payment."""
    plan_id = parse_int(context.args[0]) if context.args else None
    if plan_id is None:
        await reply_usage(update, "/paid <plan id>")
        return

    services = get_services()
    try:
        plan = _find(services.plans.list_plans(), plan_id)
        if plan is None:
            await update.message.reply_text(f"⚠️ Plan #{plan_id} not found.")
            return
        result = services.plans.mark_paid(plan)
    except FinalPaymentError as e:
        await update.message.reply_text(f"🏁 {e}. The due date was not moved.")
        return
    except PlanExpiredError as e:
        await update.message.reply_text(f"⛔ {e}. Nothing was recorded.")
        return
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    msg = (
        f"✅ Premium paid for {result.plan.name}.\n"
        f"📅 Next due: {result.plan.next_premium_date}"
    )
    if result.warning:
        msg += f"\n⚠️ {result.warning}"
    await update.message.reply_text(msg)


@guarded
async def ack_expired_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /ack_expired <plan id> - stop alerting about an expired plan."""
    plan_id = parse_int(context.args[0]) if context.args else None
    if plan_id is None:
        await reply_usage(update, "/ack_expired <plan id>")
        return

    services = get_services()
    try:
        plan = _find(services.plans.list_plans(), plan_id)
        if plan is None:
            await update.message.reply_text(f"⚠️ Plan #{plan_id} not found.")
            return
        changed = services.plans.acknowledge_expired(plan)
    except ValueError as e:
        await update.message.reply_text(f"⚠️ {e}.")
        return
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    if changed:
        await update.message.reply_text(f"👍 {plan.name} acknowledged.")
    else:
        await update.message.reply_text(f"ℹ️ {plan.name} was already acknowledged.")
