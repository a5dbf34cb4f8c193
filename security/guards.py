"""
security/guards.py
------------------
Access control for bot commands. Balances, premiums and notes are private
to the owner, so every command except /myid passes through `guarded`:
whitelist first, then a per-user command budget.
"""

import time
from collections import defaultdict, deque
from functools import wraps
from typing import Callable, Iterable

from telegram import Update
from telegram.ext import ContextTypes

from config import ALLOWED_USER_IDS, RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)


def is_allowed(user_id: int, allowed: Iterable[int]) -> bool:
    """An empty whitelist lets everyone through (local development)."""
    allowed = set(allowed)
    return not allowed or user_id in allowed


class CommandBudget:
    """
    Sliding window of accepted commands per user.

    Args:
        max_commands: Commands accepted inside one window.
        window_seconds: Window length.
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(self, max_commands: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_commands = max_commands
        self.window_seconds = window_seconds
        self.clock = clock
        self._accepted: dict[int, deque] = defaultdict(deque)

    def try_spend(self, user_id: int) -> bool:
        """Accept a command for `user_id` if the window has room for it."""
        now = self.clock()
        accepted = self._accepted[user_id]
        while accepted and accepted[0] <= now - self.window_seconds:
            accepted.popleft()
        if len(accepted) >= self.max_commands:
            return False
        accepted.append(now)
        return True


command_budget = CommandBudget(RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS)


def guarded(func: Callable):
    """Run the handler only for whitelisted users with commands left in their window."""
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not is_allowed(user.id, ALLOWED_USER_IDS):
            logger.warning(f"🚫 Unauthorized command from user_id={user.id}, username={user.username}")
            await update.message.reply_text("⛔ This bot is private.")
            return

        if not command_budget.try_spend(user.id):
            logger.warning(f"⚠️ Command budget exhausted for user {user.id}")
            await update.message.reply_text("⚠️ Too many commands. Wait a moment and try again.")
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
