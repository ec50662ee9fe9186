"""
handlers/start_handler.py
--------------------------
Handles /start, /help and /myid.
/start registers the user and sets up their ledger.
"""

from telegram import Update
from telegram.ext import ContextTypes

from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.onboarding_service import OnboardingService
from utils.logger import get_logger

logger = get_logger(__name__)
onboarding_service = OnboardingService()

HELP_TEXT = """
🤖 *Wallet Ledger*
Wallets, category budgets and monthly periods 💰

*📝 Recording:*
Type a sentence and I'll record it, e.g. "lunch 45k cash".
/expense <wallet> <category> <amount> [fee] [notes]
/income <wallet> <amount> [fee] [notes]
/split <wallet> <category>=<amount> ... [fee=<fee>]
/edit <id> <amount> [fee] [notes] [@archive]
/delete <id> [@archive]

*👛 Wallets:*
/wallets /networth
/addwallet <name> [balance]
/editwallet <wallet> <balance> [new name]
/delwallet <wallet>
/transfer <from> <to> <amount> [fee]

*🏷️ Budget:*
/categories /addcategory <name> [budget] /delcategory <category>
/budget, or /budget <category> <amount>

*📅 Periods:*
/period /close\\_period /history /archive <id>

*🔁 Recurring:*
/recurring /add\\_recurring /delete\\_recurring <id>

*🎯 Goals & debts:*
/goals /addgoal <name> | <target> /adddebt <name> | <amount>
/paydebt <debt id> <wallet> <amount> [fee]
/savegoal <goal id> <wallet> <amount> [fee]

/myid - your Telegram ID
"""


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start - register the user, create system categories and a period."""
    user = update.effective_user
    result = onboarding_service.register(user.id, user.first_name)
    logger.info(f"User {user.id} ({user.first_name}) started the bot.")

    if not result["success"]:
        await update.message.reply_text(result["message"])
        return
    await update.message.reply_text(
        f"{result['message']}\n"
        f"Add a wallet with /addwallet, set budgets with /budget, "
        f"then just type your spending.\n\n"
        f"Send /help for every command.",
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


@authorized_only
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid - show the Telegram ID for whitelisting."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your Telegram ID: `{user.id}`\n"
        f"Add it to `ALLOWED_USER_IDS` in `.env` to lock the bot down.",
        parse_mode="Markdown",
    )
