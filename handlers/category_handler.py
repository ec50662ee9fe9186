"""
handlers/category_handler.py
----------------------------
Category and budget commands.
Delegates to CategoryService, PeriodService and BalanceService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import find_category, parse_amount
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.balance_service import BalanceService
from services.category_service import CategoryService
from services.period_service import PeriodService
from utils.logger import get_logger

logger = get_logger(__name__)
category_service = CategoryService()
period_service = PeriodService()
balance_service = BalanceService()


@authorized_only
@rate_limited
async def categories_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    await update.message.reply_text(category_service.list_categories(user.id))


@authorized_only
@rate_limited
async def addcategory_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /addcategory <name> [budget].

    Examples:
        /addcategory Food 1.5m
        /addcategory Eating Out
    """
    user = update.effective_user
    args = context.args or []
    if not args:
        await update.message.reply_text("⚠️ Usage: /addcategory <name> [budget]")
        return

    budget = parse_amount(args[-1]) if len(args) > 1 else None
    name_parts = args[:-1] if budget is not None else args
    result = category_service.save_category(user.id, " ".join(name_parts), budget or 0.0)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def delcategory_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /delcategory <category>")
        return

    ref = " ".join(context.args)
    category = find_category(user.id, ref)
    if category is None:
        await update.message.reply_text(f"⚠️ No category called \"{ref}\". See /categories.")
        return
    result = category_service.delete_category(user.id, category.id)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def budget_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /budget.

    Usage:
        /budget                  → budget vs spending this period
        /budget Food 2m          → set the Food budget
    """
    user = update.effective_user
    args = context.args or []
    if not args:
        await update.message.reply_text(balance_service.budget_report(user.id))
        return
    if len(args) < 2:
        await update.message.reply_text("⚠️ Usage: /budget <category> <amount>")
        return

    amount = parse_amount(args[-1])
    if amount is None:
        await update.message.reply_text("⚠️ The budget must be a number.")
        return
    ref = " ".join(args[:-1])
    category = find_category(user.id, ref)
    if category is None:
        await update.message.reply_text(f"⚠️ No category called \"{ref}\". See /categories.")
        return

    result = period_service.save_budget(user.id, {category.id: amount})
    await update.message.reply_text(result["message"])
