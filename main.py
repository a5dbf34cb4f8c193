"""
main.py
-------
Entry point for the LifeXP Tracker Telegram bot.

Responsibilities:
    - Build the local storage and backend client.
    - Configure and start the Telegram bot with all handlers.
    - Schedule the daily contribution/premium reminder.
"""

from datetime import date, time as dt_time

from telegram import BotCommand
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler

from config import ALLOWED_USER_IDS, REMINDER_HOUR, STORAGE_BACKEND, TELEGRAM_BOT_TOKEN
from handlers.accounts_handler import export_history_command, import_history_command, note_command
from handlers.activity_handler import (
    activity_command,
    activity_delete_command,
    export_activity_command,
    export_activity_excel_command,
)
from handlers.lifexp_handler import buckets_command, bucket_done_command, contribute_command
from handlers.plans_handler import ack_expired_command, paid_command, plans_command
from handlers.start_handler import help_command, myid_command, start_command
from services.registry import get_services
from services.reminder_service import build_digest
from utils.errors import TrackerError
from utils.logger import get_logger

logger = get_logger(__name__)


async def send_reminders(context) -> None:
    """
    Scheduled job: send due contributions and plan alerts to every
    whitelisted user. Runs daily at REMINDER_HOUR.
    """
    services = get_services()
    try:
        digest = build_digest(services.lifexp, services.plans, date.today())
    except TrackerError as e:
        logger.error(f"Skipping today's reminders: {e}")
        return

    if digest is None:
        logger.info("Nothing due today, no reminders sent.")
        return

    for user_id in ALLOWED_USER_IDS:
        try:
            await context.bot.send_message(chat_id=user_id, text=digest)
            logger.info(f"Sent reminders to user {user_id}")
        except TelegramError as e:
            logger.error(f"Failed to send reminders to {user_id}: {e}")


async def set_bot_commands(application: Application) -> None:
    """Register the bot command menu in Telegram on startup."""
    commands = [
        BotCommand("start", "🚀 Start the bot"),
        BotCommand("help", "📖 Show help"),
        BotCommand("buckets", "🎯 Life XP buckets"),
        BotCommand("contribute", "💰 Add to a bucket"),
        BotCommand("bucket_done", "✅ Record a scheduled contribution"),
        BotCommand("plans", "🛡️ Insurance plans"),
        BotCommand("paid", "💸 Mark a premium paid"),
        BotCommand("ack_expired", "👍 Acknowledge an expired plan"),
        BotCommand("activity", "📜 Recent activity"),
        BotCommand("activity_delete", "🗑️ Remove a log entry"),
        BotCommand("export_activity", "📄 Export activity CSV"),
        BotCommand("export_activity_excel", "📊 Export activity Excel"),
        BotCommand("import_history", "🏦 Import account history CSV"),
        BotCommand("export_history", "🏦 Export account history CSV"),
        BotCommand("note", "📝 Yearly notes"),
        BotCommand("myid", "🆔 Your Telegram ID"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Storage and backend client ─────────────────────
    logger.info(f"Initializing {STORAGE_BACKEND} storage...")
    services = get_services()

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()

    # ── 3. Register command handlers ──────────────────────
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("myid", myid_command))
    app.add_handler(CommandHandler("buckets", buckets_command))
    app.add_handler(CommandHandler("contribute", contribute_command))
    app.add_handler(CommandHandler("bucket_done", bucket_done_command))
    app.add_handler(CommandHandler("plans", plans_command))
    app.add_handler(CommandHandler("paid", paid_command))
    app.add_handler(CommandHandler("ack_expired", ack_expired_command))
    app.add_handler(CommandHandler("activity", activity_command))
    app.add_handler(CommandHandler("activity_delete", activity_delete_command))
    app.add_handler(CommandHandler("export_activity", export_activity_command))
    app.add_handler(CommandHandler("export_activity_excel", export_activity_excel_command))
    app.add_handler(CommandHandler("import_history", import_history_command))
    app.add_handler(CommandHandler("export_history", export_history_command))
    app.add_handler(CommandHandler("note", note_command))

    # ── 4. Schedule jobs ──────────────────────────────────
    job_queue = app.job_queue
    if job_queue:
        job_queue.run_daily(
            send_reminders,
            time=dt_time(hour=REMINDER_HOUR, minute=0),
            name="daily_reminders",
        )
        logger.info(f"Scheduled daily reminders ({REMINDER_HOUR:02d}:00)")

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 LifeXP Tracker is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 6. Cleanup on shutdown ────────────────────────────
    services.close()
    if STORAGE_BACKEND == "postgres":
        from db.connection import close_pool
        close_pool()
    logger.info("LifeXP Tracker stopped.")


if __name__ == "__main__":
    main()
