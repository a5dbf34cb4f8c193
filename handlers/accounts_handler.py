"""
handlers/accounts_handler.py
----------------------------
Handles account balance history (/import_history, /export_history) and
/note (yearly free-text notes).
"""

from datetime import date
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import parse_int, reply_usage
from models.account import Account
from security.guards import guarded
from services.notes_service import NOTES_KEYS
from services.registry import get_services
from utils.errors import TrackerError
from utils.logger import get_logger

logger = get_logger(__name__)

IMPORT_USAGE = (
    "/import_history <account id>\n"
    "2024-01-31,150000,\"January salary\"\n"
    "2024-02-29,162000,\n"
    "(one Date,Balance,Notes row per line, dates as YYYY-MM-DD)"
)


def _find_account(accounts: list[Account], account_id: int) -> Optional[Account]:
    return next((a for a in accounts if a.id == account_id), None)


@guarded
async def import_history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /import_history <account id> followed by CSV lines in the same
    message.
    """
    text = update.message.text or ""
    first_line, _, csv_text = text.partition("\n")
    parts = first_line.split()
    account_id = parse_int(parts[1]) if len(parts) > 1 else None
    if account_id is None or not csv_text.strip():
        await reply_usage(update, IMPORT_USAGE)
        return

    accounts = get_services().accounts
    try:
        account = _find_account(accounts.list_accounts(), account_id)
        if account is None:
            await update.message.reply_text(f"⚠️ Account #{account_id} not found.")
            return
        result = accounts.import_history_csv(account_id, csv_text)
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    if not result.imported and not result.failed:
        await update.message.reply_text(
            "⚠️ No valid entries found. Format: Date,Balance,Notes (Date as YYYY-MM-DD)"
        )
        return

    msg = f"✅ Imported {result.imported} entries into {account.name}"
    if result.skipped:
        msg += f", skipped {result.skipped} malformed"
    if result.failed:
        msg += f", {result.failed} rejected by the backend"
    await update.message.reply_text(msg + ".")


@guarded
async def note_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /note <lifexp|plans|accounts> [year] [text | -].

    Without text the stored note is shown; '-' clears it.
    """
    sections = " | ".join(NOTES_KEYS)
    usage = f"/note <{sections}> [year] [text | -]"
    args = context.args or []
    if not args or args[0].lower() not in NOTES_KEYS:
        await reply_usage(update, usage)
        return

    notes = get_services().notes[args[0].lower()]
    year = date.today().year
    rest = args[1:]
    if rest and parse_int(rest[0]) is not None and len(rest[0]) == 4:
        year = int(rest[0])
        rest = rest[1:]

    if not rest:
        current = notes.get(year)
        await update.message.reply_text(f"📝 {year}: {current}" if current else f"📝 No note for {year}.")
        return

    text = "" if rest == ["-"] else " ".join(rest)
    notes.set(year, text)
    await update.message.reply_text(f"📝 Note for {year} {'saved' if text else 'cleared'}.")


@guarded
async def export_history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export_history <account id> - send the balance history as CSV."""
    account_id = parse_int(context.args[0]) if context.args else None
    if account_id is None:
        await reply_usage(update, "/export_history <account id>")
        return

    accounts = get_services().accounts
    try:
        account = _find_account(accounts.list_accounts(), account_id)
        if account is None:
            await update.message.reply_text(f"⚠️ Account #{account_id} not found.")
            return
        history = accounts.history(account_id)
    except TrackerError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    if not history:
        await update.message.reply_text(f"🏦 {account.name} has no history yet.")
        return

    await update.message.reply_document(
        document=accounts.export_history_csv(history),
        filename=f"{account.name}_history.csv",
        caption=f"🏦 {account.name}: {len(history)} entries",
    )
