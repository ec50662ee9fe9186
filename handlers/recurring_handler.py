"""
handlers/recurring_handler.py
------------------------------
Recurring transaction commands. Templates are posted by the daily job in
main.py; these commands manage them.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import find_category, find_wallet, parse_amount, split_pipes
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.recurring_service import RecurringService
from utils.logger import get_logger

logger = get_logger(__name__)
recurring_service = RecurringService()

_TYPES = {"expense": "expense", "out": "expense", "income": "income", "in": "income"}

ADD_USAGE = (
    "📝 *Add a recurring transaction*\n\n"
    "*Format:*\n"
    "`/add_recurring expense | name | amount | day | wallet | category [| fee]`\n"
    "`/add_recurring income | name | amount | day | wallet [| fee]`\n\n"
    "*Examples:*\n"
    "• `/add_recurring expense | Netflix | 186k | 5 | BCA | Subscriptions`\n"
    "• `/add_recurring income | Salary | 8.5m | 25 | BCA | 6500`\n\n"
    "Day 29-31 falls on the last day of shorter months."
)


def parse_recurring(text_args: list[str]) -> dict | None:
    """
    Read the pipe-separated /add_recurring arguments.

    Returns:
        Keyword arguments for the service (wallet/category as given, not
        yet resolved), or None when the format is wrong.
    """
    parts = split_pipes(text_args)
    if len(parts) < 5:
        return None
    kind = _TYPES.get(parts[0].lower())
    amount = parse_amount(parts[2])
    try:
        day = int(parts[3])
    except ValueError:
        return None
    if kind is None or amount is None:
        return None

    parsed = {"type": kind, "name": parts[1], "base_amount": amount, "day_of_month": day, "wallet": parts[4]}
    extra = parts[5:]
    if kind == "expense":
        if not extra:
            return None
        parsed["category"] = extra.pop(0)
    if extra:
        fee = parse_amount(extra[0])
        if fee is None:
            return None
        parsed["admin_fee"] = fee
    return parsed


@authorized_only
@rate_limited
async def recurring_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /recurring - list all active recurring transactions."""
    user = update.effective_user
    await update.message.reply_text(recurring_service.list_active(user.id))


@authorized_only
@rate_limited
async def add_recurring_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add_recurring - see ADD_USAGE for the format."""
    user = update.effective_user
    parsed = parse_recurring(context.args or [])
    if parsed is None:
        await update.message.reply_text(ADD_USAGE, parse_mode="Markdown")
        return

    wallet = find_wallet(user.id, parsed.pop("wallet"))
    if wallet is None:
        await update.message.reply_text("⚠️ Unknown wallet. See /wallets.")
        return
    category_id = None
    if "category" in parsed:
        category = find_category(user.id, parsed.pop("category"))
        if category is None:
            await update.message.reply_text("⚠️ Unknown category. See /categories.")
            return
        category_id = category.id

    result = recurring_service.add_recurring(
        user.id, wallet_id=wallet.id, category_id=category_id, **parsed,
    )
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def delete_recurring_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /delete_recurring <id>.
    Usage: /delete_recurring 3
    """
    user = update.effective_user
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /delete_recurring <id>\nExample: /delete_recurring 3")
        return

    try:
        template_id = int(context.args[0].lstrip("#"))
    except ValueError:
        await update.message.reply_text("⚠️ The id must be a whole number.")
        return

    result = recurring_service.delete_recurring(user.id, template_id)
    await update.message.reply_text(result["message"])
