"""
handlers/common.py
------------------
Argument parsing shared by the command handlers.
"""

from typing import Optional

from telegram import Update

DOMAIN_NAMES = ("lifexp", "plans")


def parse_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except (TypeError, ValueError):
        return None


def parse_amount(text: str) -> Optional[float]:
    """Parse '2500', '2,500' or '99.5'; None when not a number."""
    try:
        return float(text.replace(",", ""))
    except (AttributeError, ValueError):
        return None


async def reply_usage(update: Update, usage: str) -> None:
    await update.message.reply_text(f"⚠️ Usage: {usage}")
