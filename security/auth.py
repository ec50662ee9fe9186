"""
security/auth.py
-----------------
Whitelist gate for the Telegram bot.
Only Telegram accounts listed in ALLOWED_USER_IDS may use the ledger.
"""

from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

from config import ALLOWED_USER_IDS
from utils.logger import get_logger

logger = get_logger(__name__)


def is_allowed(user_id: int, allowed: list[int] | None = None) -> bool:
    """An empty whitelist admits everyone (local development)."""
    allowed = ALLOWED_USER_IDS if allowed is None else allowed
    return not allowed or user_id in allowed


def authorized_only(func: Callable):
    """
    Decorator that restricts a handler to whitelisted users only.

    Usage:
        @authorized_only
        async def wallets_command(update, context):
            ...
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not is_allowed(user.id):
            logger.warning(
                f"🚫 Unauthorized access attempt: user_id={user.id}, "
                f"username={user.username}"
            )
            await update.message.reply_text(
                f"⛔ This ledger is private. Ask the owner to add your ID `{user.id}`.",
                parse_mode="Markdown",
            )
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
