"""
handlers/lifexp_handler.py
--------------------------
Handles Life XP bucket commands: /buckets, /contribute, /bucket_done.
"""

from datetime import date
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import parse_amount, parse_int, reply_usage
from models.bucket import LifeXpBucket
from security.guards import guarded
from services.registry import get_services
from utils.errors import TrackerError
from utils.formatting import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)


def _find(buckets: list[LifeXpBucket], bucket_id: Optional[int]) -> Optional[LifeXpBucket]:
    return next((b for b in buckets if b.id == bucket_id), None)


def _bucket_line(bucket: LifeXpBucket, status_text: str, currency: str) -> str:
    line = (
        f"#{bucket.id} {bucket.name}: {format_currency(bucket.saved_amount, currency)}"
        f" / {format_currency(bucket.target_amount, currency)} ({bucket.progress:.0f}%)"
    )
    if bucket.status != "active":
        line += f" [{bucket.status}]"
    frequency = bucket.frequency if bucket.is_repetitive else None
    if frequency:
        line += f"\n    🔁 {frequency.label}, next {bucket.next_contribution_date or 'not set'}"
    if status_text:
        line += f" ⚠️ {status_text}"
    return line


@guarded
async def buckets_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /buckets - list buckets with their contribution status."""
    services = get_services()
    today = date.today()
    try:
        buckets = services.lifexp.list_buckets()
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    if not buckets:
        await update.message.reply_text("🎯 No buckets yet.")
        return

    currency = services.lifexp.currency
    lines = ["🎯 Life XP buckets", ""]
    for bucket in buckets:
        status = services.lifexp.status_for(bucket, today) if bucket.status == "active" else None
        lines.append(_bucket_line(bucket, status.describe() if status else "", currency))

    due = services.lifexp.due_buckets(buckets, today)
    if due:
        lines += ["", f"🔔 {len(due)} contribution(s) need action"]
    await update.message.reply_text("\n".join(lines))


@guarded
async def contribute_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /contribute <bucket id> <amount> [notes].
    Example: /contribute 3 2500 birthday money
    """
    usage = "/contribute <bucket id> <amount> [notes]"
    args = context.args or []
    if len(args) < 2:
        await reply_usage(update, usage)
        return
    bucket_id, amount = parse_int(args[0]), parse_amount(args[1])
    if bucket_id is None or amount is None or amount <= 0:
        await reply_usage(update, usage)
        return
    notes = " ".join(args[2:]) or None

    services = get_services()
    try:
        bucket = _find(services.lifexp.list_buckets(), bucket_id)
        if bucket is None:
            await update.message.reply_text(f"⚠️ Bucket #{bucket_id} not found.")
            return
        updated, _ = services.lifexp.contribute(bucket, amount, notes)
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    currency = services.lifexp.currency
    await update.message.reply_text(
        f"✅ Added {format_currency(amount, currency)} to {updated.name}.\n"
        f"💰 Saved: {format_currency(updated.saved_amount, currency)}"
        f" / {format_currency(updated.target_amount, currency)}"
    )


@guarded
async def bucket_done_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /bucket_done <bucket id> [amount] - record the scheduled
    contribution and move the next date one period ahead.
    Without an amount, a twelfth of the target is recorded.
    """
    usage = "/bucket_done <bucket id> [amount]"
    args = context.args or []
    bucket_id = parse_int(args[0]) if args else None
    amount = parse_amount(args[1]) if len(args) > 1 else None
    if bucket_id is None or (len(args) > 1 and (amount is None or amount <= 0)):
        await reply_usage(update, usage)
        return

    services = get_services()
    try:
        bucket = _find(services.lifexp.list_buckets(), bucket_id)
        if bucket is None:
            await update.message.reply_text(f"⚠️ Bucket #{bucket_id} not found.")
            return
        if bucket.obligation is None:
            await update.message.reply_text(f"⚠️ {bucket.name} has no recurring contribution.")
            return
        updated, history = services.lifexp.mark_done(bucket, amount)
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    currency = services.lifexp.currency
    await update.message.reply_text(
        f"✅ {updated.name}: contribution of {format_currency(history.amount, currency)} recorded.\n"
        f"📅 Next contribution: {updated.next_contribution_date or 'not set'}"
    )
