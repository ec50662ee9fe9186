"""
main.py
-------
Entry point for the Wallet Ledger Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Configure and start the Telegram bot with all handlers.
    - Schedule the daily job that posts due recurring transactions.
"""

from datetime import time as dt_time

from telegram import BotCommand
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    filters,
)

from config import RECURRING_CHECK_HOUR, TELEGRAM_BOT_TOKEN
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers.category_handler import (
    addcategory_command,
    budget_command,
    categories_command,
    delcategory_command,
)
from handlers.goal_handler import (
    adddebt_command, addgoal_command, goals_command, paydebt_command, savegoal_command,
)
from handlers.period_handler import archive_command, close_period_command, history_command, period_command
from handlers.recurring_handler import (
    add_recurring_command,
    delete_recurring_command,
    recurring_command,
)
from handlers.start_handler import help_command, myid_command, start_command
from handlers.transaction_handler import (
    delete_command,
    edit_command,
    expense_command,
    handle_text_message,
    income_command,
    split_command,
)
from handlers.wallet_handler import (
    addwallet_command,
    delwallet_command,
    editwallet_command,
    networth_command,
    transfer_command,
    wallets_command,
)
from services.recurring_service import RecurringService
from utils.logger import get_logger

logger = get_logger(__name__)

COMMANDS = {
    "start": (start_command, "🚀 Set up your ledger"),
    "help": (help_command, "📖 All commands"),
    "myid": (myid_command, "🆔 Your Telegram ID"),
    "wallets": (wallets_command, "👛 Wallet balances"),
    "networth": (networth_command, "💰 Net worth"),
    "addwallet": (addwallet_command, "➕ Add a wallet"),
    "editwallet": (editwallet_command, "✏️ Edit a wallet"),
    "delwallet": (delwallet_command, "🗑️ Delete a wallet"),
    "transfer": (transfer_command, "🔁 Move money between wallets"),
    "categories": (categories_command, "🏷️ Categories"),
    "addcategory": (addcategory_command, "➕ Add a category"),
    "delcategory": (delcategory_command, "🗑️ Delete a category"),
    "budget": (budget_command, "📊 Budget status / set a budget"),
    "expense": (expense_command, "💸 Record an expense"),
    "income": (income_command, "💵 Record an income"),
    "split": (split_command, "✂️ Split an expense"),
    "edit": (edit_command, "✏️ Edit a transaction"),
    "delete": (delete_command, "🗑️ Delete a transaction"),
    "period": (period_command, "📅 Current period"),
    "close_period": (close_period_command, "📦 Close the period"),
    "history": (history_command, "🗂️ Archived periods"),
    "archive": (archive_command, "🔎 Show an archive"),
    "recurring": (recurring_command, "🔁 Recurring transactions"),
    "add_recurring": (add_recurring_command, "➕ Add a recurring transaction"),
    "delete_recurring": (delete_recurring_command, "❌ Delete a recurring transaction"),
    "goals": (goals_command, "🎯 Goals and debts"),
    "addgoal": (addgoal_command, "🎯 Add a saving goal"),
    "adddebt": (adddebt_command, "🧾 Add a debt"),
    "paydebt": (paydebt_command, "💳 Pay toward a debt"),
    "savegoal": (savegoal_command, "🐷 Save toward a goal"),
}


async def post_recurring(context) -> None:
    """
    Scheduled job: post every due recurring transaction and tell each
    user what was added. Runs daily at RECURRING_CHECK_HOUR.
    """
    results = RecurringService().apply_due_for_all()

    for user_id, result in results.items():
        if not result["success"]:
            logger.error(f"Recurring posting failed for user {user_id}: {result['message']}")
            continue
        if not result.get("posted"):
            continue
        try:
            await context.bot.send_message(chat_id=user_id, text=result["message"])
        except Exception as e:
            logger.error(f"Failed to notify user {user_id} about recurring posts: {e}")


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    await application.bot.set_my_commands(
        [BotCommand(name, description) for name, (_, description) in COMMANDS.items()]
    )
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()

    # ── 3. Register command handlers ──────────────────────
    for name, (callback, _) in COMMANDS.items():
        app.add_handler(CommandHandler(name, callback))

    # ── 4. Register text message handler (catch-all) ──────
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text_message))

    # ── 5. Schedule jobs ──────────────────────────────────
    job_queue = app.job_queue
    if job_queue:
        job_queue.run_daily(
            post_recurring,
            time=dt_time(hour=RECURRING_CHECK_HOUR, minute=0),
            name="daily_recurring",
        )
        logger.info(f"Scheduled recurring posting daily at {RECURRING_CHECK_HOUR:02d}:00")
    else:
        logger.warning("JobQueue unavailable; install python-telegram-bot[job-queue] for recurring posting.")

    # ── 6. Start polling ──────────────────────────────────
    logger.info("🚀 Wallet Ledger is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 7. Cleanup on shutdown ────────────────────────────
    close_pool()
    logger.info("Wallet Ledger stopped.")


if __name__ == "__main__":
    main()
