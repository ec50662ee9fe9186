"""
handlers/goal_handler.py
------------------------
Saving goal and debt commands. Delegates to GoalService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import find_wallet, parse_amount, split_pipes
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.goal_service import GoalService
from utils.logger import get_logger

logger = get_logger(__name__)
goal_service = GoalService()


@authorized_only
@rate_limited
async def goals_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    await update.message.reply_text(goal_service.report(user.id))


@authorized_only
@rate_limited
async def addgoal_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /addgoal <name> | <target>."""
    user = update.effective_user
    parts = split_pipes(context.args or [])
    target = parse_amount(parts[1]) if len(parts) == 2 else None
    if target is None:
        await update.message.reply_text("⚠️ Usage: /addgoal <name> | <target>\nExample: /addgoal Laptop | 15m")
        return

    result = goal_service.add_goal(user.id, parts[0], target)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def adddebt_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /adddebt <name> | <amount> [| <interest %> | <minimum payment>].
    Example: /adddebt Credit card | 4m | 2.5 | 400k
    """
    user = update.effective_user
    parts = split_pipes(context.args or [])
    amount = parse_amount(parts[1]) if len(parts) >= 2 else None
    if amount is None:
        await update.message.reply_text(
            "⚠️ Usage: /adddebt <name> | <amount> [| <interest %> | <minimum payment>]"
        )
        return

    interest = parse_amount(parts[2]) if len(parts) > 2 else 0.0
    minimum = parse_amount(parts[3]) if len(parts) > 3 else 0.0
    if interest is None or minimum is None:
        await update.message.reply_text("⚠️ Interest and minimum payment must be numbers.")
        return

    result = goal_service.add_debt(user.id, parts[0], amount, interest, minimum)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def paydebt_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /paydebt <debt id> <wallet> <amount> [fee]."""
    user = update.effective_user
    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text("⚠️ Usage: /paydebt <debt id> <wallet> <amount> [fee]")
        return

    wallet = find_wallet(user.id, args[1])
    if wallet is None:
        await update.message.reply_text(f"⚠️ No wallet called \"{args[1]}\". See /wallets.")
        return
    amount = parse_amount(args[2])
    fee = parse_amount(args[3]) if len(args) > 3 else 0.0
    if amount is None or fee is None:
        await update.message.reply_text("⚠️ Amount and fee must be numbers.")
        return

    result = goal_service.pay_debt(user.id, args[0], wallet.id, amount, fee)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def savegoal_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /savegoal <goal id> <wallet> <amount> [fee]."""
    user = update.effective_user
    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text(
            "⚠️ Usage: /savegoal <goal id> <wallet> <amount> [fee]\nExample: /savegoal goal-1a2b BCA 500k"
        )
        return

    wallet = find_wallet(user.id, args[1])
    if wallet is None:
        await update.message.reply_text(f"⚠️ No wallet called \"{args[1]}\". See /wallets.")
        return
    amount = parse_amount(args[2])
    fee = parse_amount(args[3]) if len(args) > 3 else 0.0
    if amount is None or fee is None:
        await update.message.reply_text("⚠️ Amount and fee must be numbers.")
        return

    result = goal_service.contribute(user.id, args[0], wallet.id, amount, fee)
    await update.message.reply_text(result["message"])
