"""
handlers/transaction_handler.py
-------------------------------
Expense and income commands, plus the free-text handler that routes
plain messages through Gemini. Delegates to TransactionService.

Archived periods are addressed with an "@<id>" argument, e.g.
"/delete exp-1a2b3c @4".
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import find_category, find_wallet, parse_amount
from models.transaction import Split
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.transaction_service import MANUAL_ENTRY_HINT, TransactionService
from utils.logger import get_logger

logger = get_logger(__name__)
transaction_service = TransactionService()


def _period_ref(args: list[str]) -> tuple[list[str], str]:
    """Pull an "@<archive id>" argument out of `args`."""
    for arg in args:
        if arg.startswith("@") and len(arg) > 1:
            return [a for a in args if a is not arg], arg[1:]
    return args, "current"


def _amount_and_fee(args: list[str]) -> tuple[float | None, float, list[str]]:
    """Leading amount, optional fee, and the remaining words."""
    if not args:
        return None, 0.0, []
    amount = parse_amount(args[0])
    rest = args[1:]
    fee = parse_amount(rest[0]) if rest else None
    if fee is not None:
        rest = rest[1:]
    return amount, fee or 0.0, rest


def parse_edit_args(args: list[str]) -> tuple[str, float, float | None, str | None] | None:
    """
    Split /edit arguments into (id, amount, fee, notes).

    The fee is None unless the word after the amount is a number, so the
    stored fee is kept. Any remaining words replace the notes.
    """
    if len(args) < 2:
        return None
    amount = parse_amount(args[1])
    if amount is None:
        return None
    rest = args[2:]
    fee = parse_amount(rest[0]) if rest else None
    if fee is not None:
        rest = rest[1:]
    return args[0], amount, fee, " ".join(rest) or None


@authorized_only
@rate_limited
async def handle_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle any plain text message (not a command).
    Gemini parses it; if that fails nothing is saved and the user is
    pointed to manual entry.
    """
    user = update.effective_user
    text = update.message.text.strip()
    if not text:
        return

    result = transaction_service.add_from_text(user.id, text)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def expense_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /expense <wallet> <category> <amount> [fee] [notes].

    Examples:
        /expense Cash Food 45k lunch
        /expense BCA Bills 350000 2500 electricity
    """
    user = update.effective_user
    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text(f"⚠️ Usage:\n{MANUAL_ENTRY_HINT}")
        return

    wallet = find_wallet(user.id, args[0])
    if wallet is None:
        await update.message.reply_text(f"⚠️ No wallet called \"{args[0]}\". See /wallets.")
        return
    category = find_category(user.id, args[1])
    if category is None:
        await update.message.reply_text(f"⚠️ No category called \"{args[1]}\". See /categories.")
        return
    amount, fee, rest = _amount_and_fee(args[2:])
    if amount is None:
        await update.message.reply_text("⚠️ The amount must be a number.")
        return

    result = transaction_service.add_expense(
        user.id, wallet.id, amount, fee, category_id=category.id, notes=" ".join(rest),
    )
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def income_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /income <wallet> <amount> [fee] [notes].
    The fee is deducted from what reaches the wallet.
    """
    user = update.effective_user
    args = context.args or []
    if len(args) < 2:
        await update.message.reply_text(f"⚠️ Usage:\n{MANUAL_ENTRY_HINT}")
        return

    wallet = find_wallet(user.id, args[0])
    if wallet is None:
        await update.message.reply_text(f"⚠️ No wallet called \"{args[0]}\". See /wallets.")
        return
    amount, fee, rest = _amount_and_fee(args[1:])
    if amount is None:
        await update.message.reply_text("⚠️ The amount must be a number.")
        return

    result = transaction_service.add_income(user.id, wallet.id, amount, fee, notes=" ".join(rest))
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def split_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /split <wallet> <category>=<amount> <category>=<amount> ... [fee=<fee>] [notes].

    The shares are what each category carries and must add up to the
    total paid, fee included.

    Example:
        /split BCA Food=150k Household=80k fee=2500 groceries
    """
    user = update.effective_user
    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text(
            "⚠️ Usage: /split <wallet> <category>=<amount> <category>=<amount> [fee=<fee>] [notes]"
        )
        return

    wallet = find_wallet(user.id, args[0])
    if wallet is None:
        await update.message.reply_text(f"⚠️ No wallet called \"{args[0]}\". See /wallets.")
        return

    splits, fee, notes = [], 0.0, []
    for arg in args[1:]:
        key, sep, value = arg.partition("=")
        if not sep:
            notes.append(arg)
            continue
        amount = parse_amount(value)
        if amount is None:
            await update.message.reply_text(f"⚠️ \"{value}\" is not an amount.")
            return
        if key.lower() == "fee":
            fee = amount
            continue
        category = find_category(user.id, key)
        if category is None:
            await update.message.reply_text(f"⚠️ No category called \"{key}\". See /categories.")
            return
        splits.append(Split(category.id, amount))

    total = sum(s.amount for s in splits)
    result = transaction_service.add_expense(
        user.id, wallet.id, total - fee, fee, splits=splits, notes=" ".join(notes),
    )
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /edit <id> <amount> [fee] [notes] [@archive].

    Examples:
        /edit exp-1a2b3c 50k
        /edit inc-9f8e7d 8m 6500 @3
        /edit inc-9f8e7d 8m March salary
    """
    user = update.effective_user
    args, period_ref = _period_ref(context.args or [])
    if len(args) < 2:
        await update.message.reply_text("⚠️ Usage: /edit <id> <amount> [fee] [notes] [@archive]")
        return

    parsed = parse_edit_args(args)
    if parsed is None:
        await update.message.reply_text("⚠️ The amount must be a number.")
        return
    transaction_id, amount, admin_fee, notes = parsed

    result = transaction_service.edit_amount(user.id, period_ref, transaction_id, amount, admin_fee, notes)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /delete <id> [@archive].
    Usage: /delete exp-1a2b3c
    """
    user = update.effective_user
    args, period_ref = _period_ref(context.args or [])
    if not args:
        await update.message.reply_text("⚠️ Usage: /delete <id> [@archive]\nExample: /delete exp-1a2b3c")
        return

    result = transaction_service.delete_transaction(user.id, period_ref, args[0])
    await update.message.reply_text(result["message"])
