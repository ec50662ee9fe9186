"""
handlers/period_handler.py
--------------------------
Budget period commands: the current period, closing it, and browsing
archives. Delegates to PeriodService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.period_service import PeriodService
from utils.logger import get_logger

logger = get_logger(__name__)
period_service = PeriodService()


@authorized_only
@rate_limited
async def period_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /period - budgets and transactions of the current period."""
    user = update.effective_user
    await update.message.reply_text(period_service.current_period_report(user.id))


@authorized_only
@rate_limited
async def close_period_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /close_period - archive the current period and start a new one.
    Needs "/close_period confirm" so a stray tap does not close the month.
    """
    user = update.effective_user
    if not context.args or context.args[0].lower() != "confirm":
        await update.message.reply_text(
            "📦 Closing archives this period, carries wallet balances forward "
            "and starts a new period with the same budgets.\n\n"
            "Send /close_period confirm to go ahead."
        )
        return

    result = period_service.close_period(user.id)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    await update.message.reply_text(period_service.history_report(user.id))


@authorized_only
@rate_limited
async def archive_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /archive <id> - show one archived period."""
    user = update.effective_user
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /archive <id>\nSee /history for the ids.")
        return

    await update.message.reply_text(period_service.archive_report(user.id, context.args[0].lstrip("#@")))
