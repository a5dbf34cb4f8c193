"""
handlers/start_handler.py
-------------------------
Handles /start, /help and /myid.
"""

from telegram import Update
from telegram.ext import ContextTypes

from security.guards import guarded
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = """
🤖 *LifeXP Tracker*
Savings goals, insurance premiums and your activity trail.

*🎯 Life XP buckets:*
/buckets - list buckets and due contributions
/contribute - add money: `/contribute 3 2500 [notes]`
/bucket\\_done - record the scheduled contribution: `/bucket_done 3 [amount]`

*🛡️ Insurance plans:*
/plans - list plans, alerts and annual premium
/paid - mark a premium paid: `/paid 2`
/ack\\_expired - silence an expired plan: `/ack_expired 2`

*📜 Activity log:*
/activity - recent entries: `/activity plans 20`
/activity\\_delete - remove an entry: `/activity_delete plans <id>`
/export\\_activity - CSV export: `/export_activity lifexp`
/export\\_activity\\_excel - Excel export with summary

*🏦 Accounts & notes:*
/import\\_history - `/import_history <account id>` then CSV lines
/export\\_history - `/export_history <account id>`
/note - `/note plans 2026 [text | -]`
/myid - show your Telegram ID
"""


@guarded
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start - greet the user."""
    user = update.effective_user
    logger.info(f"User {user.id} ({user.first_name}) started the bot.")
    await update.message.reply_text(
        f"Hi {user.first_name}! 👋\n"
        f"I keep an eye on your savings contributions and insurance premiums.\n\n"
        f"Send /help to see every command.",
    )


@guarded
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help - list all commands."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid - show the Telegram ID to put in ALLOWED_USER_IDS."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your ID: `{user.id}`\n"
        f"Add it to `ALLOWED_USER_IDS` in `.env` to lock the bot to you.",
        parse_mode="Markdown",
    )
