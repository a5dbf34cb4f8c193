"""
handlers/activity_handler.py
----------------------------
Handles the activity log commands: /activity, /activity_delete,
/export_activity, /export_activity_excel.
"""

from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import DOMAIN_NAMES, parse_int, reply_usage
from security.guards import guarded
from services.registry import get_services
from utils.formatting import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)

_DOMAIN_HINT = " | ".join(DOMAIN_NAMES)


@guarded
async def activity_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /activity [lifexp|plans] [count] - show the newest log entries.
    Defaults to the plans log and 10 entries.
    """
    args = context.args or []
    domain = args[0].lower() if args else "plans"
    limit = parse_int(args[1]) if len(args) > 1 else 10
    if domain not in DOMAIN_NAMES or not limit or limit < 1:
        await reply_usage(update, f"/activity [{_DOMAIN_HINT}] [count]")
        return

    services = get_services()
    log = services.logs[domain]
    entries = log.recent(limit)
    if not entries:
        await update.message.reply_text(f"📜 The {domain} activity log is empty.")
        return

    lines = [f"📜 {domain} activity (newest first)", ""]
    for e in entries:
        line = f"{e.date} · {log.action_label(e.action)} · {e.subject_name}"
        if e.amount:
            line += f" · {format_currency(e.amount, services.plans.currency)}"
        if e.details:
            line += f"\n    {e.details}"
        line += f"\n    id {e.id}"
        lines.append(line)
    await update.message.reply_text("\n".join(lines))


@guarded
async def activity_delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /activity_delete <lifexp|plans> <entry id>."""
    args = context.args or []
    if len(args) < 2 or args[0].lower() not in DOMAIN_NAMES:
        await reply_usage(update, f"/activity_delete <{_DOMAIN_HINT}> <entry id>")
        return

    log = get_services().logs[args[0].lower()]
    if log.remove(args[1]):
        await update.message.reply_text("🗑️ Log entry removed.")
    else:
        await update.message.reply_text("ℹ️ No log entry with that id.")


async def _send_export(update: Update, context: ContextTypes.DEFAULT_TYPE, excel: bool) -> None:
    command = "/export_activity_excel" if excel else "/export_activity"
    args = context.args or []
    domain = args[0].lower() if args else "plans"
    if domain not in DOMAIN_NAMES:
        await reply_usage(update, f"{command} [{_DOMAIN_HINT}]")
        return

    log = get_services().logs[domain]
    entries = log.entries()
    if not entries:
        await update.message.reply_text(f"📜 The {domain} activity log is empty, nothing to export.")
        return

    today = date.today()
    if excel:
        document = log.export_excel(entries)
        filename = log.export_filename(today, "xlsx")
    else:
        document = log.export_csv(entries)
        filename = log.export_filename(today, "csv")

    await update.message.reply_document(
        document=document,
        filename=filename,
        caption=f"📊 {len(entries)} {domain} log entries",
    )


@guarded
async def export_activity_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_activity [lifexp|plans] - send the log as CSV."""
    await _send_export(update, context, excel=False)


@guarded
async def export_activity_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_activity_excel [lifexp|plans] - send the log as .xlsx."""
    await _send_export(update, context, excel=True)
