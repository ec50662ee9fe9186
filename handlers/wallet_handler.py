"""
handlers/wallet_handler.py
--------------------------
Wallet commands: listing, create/edit/delete, transfers and net worth.
Delegates all logic to WalletService and BalanceService.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import find_wallet, parse_amount
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.balance_service import BalanceService
from services.wallet_service import WalletService
from utils.logger import get_logger

logger = get_logger(__name__)
wallet_service = WalletService()
balance_service = BalanceService()


@authorized_only
@rate_limited
async def wallets_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /wallets - wallets with their live balances."""
    user = update.effective_user
    await update.message.reply_text(balance_service.wallet_report(user.id))


@authorized_only
@rate_limited
async def networth_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    await update.message.reply_text(balance_service.net_worth_report(user.id))


@authorized_only
@rate_limited
async def addwallet_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /addwallet <name> [balance].

    Examples:
        /addwallet Cash 250k
        /addwallet BCA Savings 12000000
    """
    user = update.effective_user
    args = context.args or []
    if not args:
        await update.message.reply_text("⚠️ Usage: /addwallet <name> [balance]\nExample: /addwallet Cash 250k")
        return

    balance = parse_amount(args[-1]) if len(args) > 1 else None
    name_parts = args[:-1] if balance is not None else args
    result = wallet_service.save_wallet(user.id, " ".join(name_parts), balance or 0.0)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def editwallet_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /editwallet <wallet> <balance> [new name].
    The balance is the wallet's balance at the start of the current period.
    """
    user = update.effective_user
    args = context.args or []
    if len(args) < 2:
        await update.message.reply_text("⚠️ Usage: /editwallet <wallet> <balance> [new name]")
        return

    wallet = find_wallet(user.id, args[0])
    if wallet is None:
        await update.message.reply_text(f"⚠️ No wallet called \"{args[0]}\". See /wallets.")
        return
    balance = parse_amount(args[1])
    if balance is None:
        await update.message.reply_text("⚠️ The balance must be a number.")
        return

    name = " ".join(args[2:]) or wallet.name
    result = wallet_service.save_wallet(user.id, name, balance, wallet_id=wallet.id)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def delwallet_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delwallet <wallet>."""
    user = update.effective_user
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /delwallet <wallet>")
        return

    ref = " ".join(context.args)
    wallet = find_wallet(user.id, ref)
    if wallet is None:
        await update.message.reply_text(f"⚠️ No wallet called \"{ref}\". See /wallets.")
        return
    result = wallet_service.delete_wallet(user.id, wallet.id)
    await update.message.reply_text(result["message"])


@authorized_only
@rate_limited
async def transfer_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /transfer <from> <to> <amount> [fee] [notes].

    Example:
        /transfer BCA Cash 500k 2500
    """
    user = update.effective_user
    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text(
            "⚠️ Usage: /transfer <from> <to> <amount> [fee] [notes]\n"
            "Example: /transfer BCA Cash 500k 2500"
        )
        return

    source = find_wallet(user.id, args[0])
    target = find_wallet(user.id, args[1])
    if source is None or target is None:
        missing = args[0] if source is None else args[1]
        await update.message.reply_text(f"⚠️ No wallet called \"{missing}\". See /wallets.")
        return

    amount = parse_amount(args[2])
    if amount is None:
        await update.message.reply_text("⚠️ The amount must be a number.")
        return
    rest = args[3:]
    fee = parse_amount(rest[0]) if rest else None
    if fee is not None:
        rest = rest[1:]

    result = wallet_service.transfer_funds(
        user.id, source.id, target.id, amount, fee or 0.0, notes=" ".join(rest),
    )
    await update.message.reply_text(result["message"])
