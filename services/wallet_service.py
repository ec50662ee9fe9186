"""
services/wallet_service.py
--------------------------
Business logic for wallets: create/edit, guarded deletion and
transfers between wallets.
"""

from datetime import datetime
from typing import Optional

from config import TRANSFER_CATEGORY_NAME
from db.connection import transaction
from models.category import Category
from models.period import CategoryBudget
from models.transaction import Expense, Income, make_id
from models.wallet import Wallet
from repositories.category_repo import CategoryRepository
from repositories.period_repo import PeriodRepository
from repositories.transaction_repo import TransactionRepository
from repositories.user_repo import UserRepository
from repositories.wallet_repo import WalletRepository
from security.session import verify_caller
from services.display import money
from services.errors import PeriodNotFoundError, ValidationError, WalletNotFoundError
from services.results import ok, service_action
from utils.logger import get_logger

logger = get_logger(__name__)


class WalletService:
    """Manages wallets and movements of money between them."""

    def __init__(self):
        self.wallet_repo = WalletRepository()
        self.transaction_repo = TransactionRepository()
        self.period_repo = PeriodRepository()
        self.category_repo = CategoryRepository()
        self.user_repo = UserRepository()

    @service_action("save the wallet")
    def save_wallet(
        self,
        user_id: int,
        name: str,
        initial_balance: float = 0.0,
        icon: Optional[str] = None,
        wallet_id: Optional[str] = None,
    ) -> dict:
        """
        Create a wallet, or edit one when `wallet_id` is given.

        Editing overwrites `initial_balance`, i.e. the balance at the start of
        the current period. The icon is kept unless a new one is passed.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("A wallet needs a name.")
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            existing = self.wallet_repo.get_by_id(wallet_id, user_id, conn=conn) if wallet_id else None
            if wallet_id and existing is None:
                raise WalletNotFoundError("Wallet not found.")
            icon = icon or (existing.icon if existing else "wallet")
            wallet = Wallet(user_id=user_id, name=name, initial_balance=float(initial_balance), icon=icon)
            if wallet_id:
                wallet.id = wallet_id
            self.wallet_repo.save(wallet, conn=conn)
        return ok(f"👛 Wallet \"{wallet.name}\" saved.\n🔖 `{wallet.id}`", id=wallet.id)

    @service_action("delete the wallet")
    def delete_wallet(self, user_id: int, wallet_id: str) -> dict:
        """
        Delete a wallet that no transaction references.

        The current period is checked first, then the archives; the failure
        message says which one blocks the deletion.
        """
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            if self.wallet_repo.get_by_id(wallet_id, user_id, conn=conn) is None:
                raise WalletNotFoundError("Wallet not found.")

            refs = self.transaction_repo.count_wallet_references(wallet_id, user_id, conn=conn)
            if refs["current"]:
                raise ValidationError(
                    "This wallet cannot be deleted because it has transactions "
                    "in the current period."
                )
            if refs["archive"]:
                raise ValidationError(
                    "This wallet has transactions in archived periods. Delete or "
                    "move those transactions first if you want to continue."
                )
            self.wallet_repo.delete(wallet_id, user_id, conn=conn)
        return ok("🗑️ Wallet deleted.")

    @service_action("transfer the funds")
    def transfer_funds(
        self,
        user_id: int,
        from_wallet_id: str,
        to_wallet_id: str,
        amount: float,
        admin_fee: float = 0.0,
        notes: str = "",
        date: Optional[datetime] = None,
    ) -> dict:
        """
        Move money between two wallets.

        Records, in one transaction, an expense on the source wallet
        (amount + fee) in the essential transfer category and an income on the
        target wallet (amount), both with the same date.
        """
        if from_wallet_id == to_wallet_id:
            raise ValidationError("Cannot transfer to the same wallet.")
        if amount <= 0:
            raise ValidationError("The transfer amount must be positive.")
        if admin_fee < 0:
            raise ValidationError("Admin fee cannot be negative.")
        when = date or datetime.now()

        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            period = self.period_repo.get_current(
                user_id, conn=conn, for_update=True, with_transactions=False
            )
            if period is None:
                raise PeriodNotFoundError("There is no open budget period. Send /start first.")
            source = self.wallet_repo.get_by_id(from_wallet_id, user_id, conn=conn)
            target = self.wallet_repo.get_by_id(to_wallet_id, user_id, conn=conn)
            if source is None or target is None:
                raise WalletNotFoundError()

            category = self._transfer_category(user_id, period, conn)
            extra = f" {notes}" if notes else ""
            expense = Expense.create(
                amount, admin_fee,
                id=make_id("exp-trf"),
                category_id=category.id,
                wallet_id=source.id,
                date=when,
                notes=f"Transfer to {target.name}.{extra}",
            )
            income = Income.create(
                amount,
                id=make_id("inc-trf"),
                wallet_id=target.id,
                date=when,
                notes=f"Transfer from {source.name}.{extra}",
            )
            expense.validate()
            income.validate()
            self.transaction_repo.add(expense, period.id, conn=conn)
            self.transaction_repo.add(income, period.id, conn=conn)

        logger.info(f"User {user_id} transferred {amount} from {source.id} to {target.id}")
        fee = f" (fee {money(admin_fee)})" if admin_fee else ""
        return ok(
            f"🔁 Transferred {money(amount)} from {source.name} to {target.name}{fee}.",
            expense_id=expense.id,
            income_id=income.id,
        )

    def _transfer_category(self, user_id: int, period, conn) -> Category:
        """Find the essential transfer category, creating it if it is missing."""
        category = self.category_repo.get_by_name(TRANSFER_CATEGORY_NAME, user_id, conn=conn)
        if category is None:
            category = Category(
                user_id=user_id,
                name=TRANSFER_CATEGORY_NAME,
                icon="arrow-left-right",
                is_essential=True,
            )
            self.category_repo.add(category, conn=conn)
        if all(cb.category_id != category.id for cb in period.category_budgets):
            period.category_budgets.append(CategoryBudget(category.id, 0.0, category.name))
            self.period_repo.replace_budgets(period.id, period.category_budgets, conn=conn)
        return category
