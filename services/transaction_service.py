"""
services/transaction_service.py
-------------------------------
Business logic for recording, editing and deleting expenses and incomes.

Transactions are appended to the current period. Edits and deletions can
target the current period or an archived one. Wallet balances of an
archived period have already been folded into the wallets'
initial_balance, so changing an archived transaction also shifts the
affected wallets by the difference and refreshes the archive's totals.
"""

from collections import defaultdict
from datetime import date as date_cls, datetime
from typing import Optional

from ai.gemini_parser import parse_transaction
from db.connection import transaction
from models.transaction import Expense, Income, Split
from repositories.category_repo import CategoryRepository
from repositories.period_repo import PeriodRepository
from repositories.transaction_repo import TransactionRepository
from repositories.user_repo import UserRepository
from repositories.wallet_repo import WalletRepository
from security.session import verify_caller
from services.balance_service import period_summary
from services.display import NO_WALLET, UNCATEGORIZED, money, name_map, resolve_name
from services.errors import PeriodNotFoundError, TransactionNotFoundError, ValidationError
from services.period_service import resolve_period
from services.results import fail, ok, service_action
from utils.logger import get_logger

logger = get_logger(__name__)

_KINDS = ("expense", "income")

MANUAL_ENTRY_HINT = (
    "Enter it manually instead:\n"
    "  /expense <wallet> <category> <amount> [fee] [notes]\n"
    "  /income <wallet> <amount> [fee] [notes]"
)


def wallet_effects(transactions) -> dict[str, float]:
    """Summed signed effect of transactions on each wallet."""
    effects: dict[str, float] = defaultdict(float)
    for t in transactions:
        for wallet_id, delta in t.wallet_effect().items():
            effects[wallet_id] += delta
    return effects


def effect_delta(before, after) -> dict[str, float]:
    """Per-wallet change when the transactions `before` become `after`."""
    old = wallet_effects(before)
    new = wallet_effects(after)
    deltas = {w: new.get(w, 0.0) - old.get(w, 0.0) for w in set(old) | set(new)}
    return {w: d for w, d in deltas.items() if d}


class TransactionService:
    """Handles all business logic related to expenses and incomes."""

    def __init__(self):
        self.period_repo = PeriodRepository()
        self.transaction_repo = TransactionRepository()
        self.wallet_repo = WalletRepository()
        self.category_repo = CategoryRepository()
        self.user_repo = UserRepository()

    # ── CREATE ───────────────────────────────────────────

    @service_action("record the expense")
    def add_expense(
        self,
        user_id: int,
        wallet_id: Optional[str],
        base_amount: float,
        admin_fee: float = 0.0,
        category_id: Optional[str] = None,
        splits: Optional[list[Split]] = None,
        date: Optional[datetime] = None,
        notes: str = "",
        saving_goal_id: Optional[str] = None,
        debt_id: Optional[str] = None,
    ) -> dict:
        """
        Record an expense in the current period.

        The stored amount is base_amount + admin_fee. Pass `splits` instead of
        `category_id` to spread the expense over several categories; the
        splits must add up to the final amount.
        """
        expense = Expense.create(
            base_amount,
            admin_fee,
            category_id=category_id,
            splits=splits,
            wallet_id=wallet_id,
            date=date or datetime.now(),
            notes=notes or "",
            saving_goal_id=saving_goal_id,
            debt_id=debt_id,
        )
        expense.validate()
        self._append(user_id, expense)
        fee = f" (incl. fee {money(expense.admin_fee)})" if expense.admin_fee else ""
        return ok(f"💸 Expense recorded: {money(expense.amount)}{fee}\n🔖 `{expense.id}`", id=expense.id)

    @service_action("record the income")
    def add_income(
        self,
        user_id: int,
        wallet_id: Optional[str],
        base_amount: float,
        admin_fee: float = 0.0,
        date: Optional[datetime] = None,
        notes: str = "",
    ) -> dict:
        """Record an income in the current period; the fee is deducted."""
        income = Income.create(
            base_amount, admin_fee, wallet_id=wallet_id,
            date=date or datetime.now(), notes=notes or "",
        )
        income.validate()
        self._append(user_id, income)
        fee = f" (after fee {money(income.admin_fee)})" if income.admin_fee else ""
        return ok(f"💰 Income recorded: {money(income.amount)}{fee}\n🔖 `{income.id}`", id=income.id)

    def _append(self, user_id: int, record) -> None:
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            period = self.period_repo.get_current(
                user_id, conn=conn, for_update=True, with_transactions=False
            )
            if period is None:
                raise PeriodNotFoundError("There is no open budget period. Send /start first.")
            self.transaction_repo.add(record, period.id, conn=conn)

    # ── UPDATE ───────────────────────────────────────────

    @service_action("update the transaction")
    def update_transaction(self, user_id: int, period_ref, record, upsert: bool = False) -> dict:
        """
        Replace the transaction with the same id in a period.

        Args:
            period_ref: "current" or an archived period id.
            record: The new Expense or Income (its `id` selects the target).
            upsert: Insert the record when no transaction has its id. Without
                it, editing a missing transaction is an error.
        """
        record.validate()
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            period = self._load_period(user_id, period_ref, conn)
            existing = period.find(record.kind, record.id)

            if existing is None:
                if not upsert:
                    raise TransactionNotFoundError(f"No {record.kind} with id {record.id} in this period.")
                self.transaction_repo.add(record, period.id, conn=conn)
                before, after = [], [record]
            else:
                self.transaction_repo.replace(record, period.id, conn=conn)
                before, after = [existing], [record]

            items = period.transactions(record.kind)
            items[:] = [t for t in items if t.id != record.id] + [record]
            self._refresh_archive(user_id, period, before, after, conn)

        action = "saved" if existing is None else "updated"
        return ok(f"✏️ {record.kind.capitalize()} `{record.id}` {action}.")

    # ── DELETE ───────────────────────────────────────────

    @service_action("delete the transaction")
    def delete_transaction(
        self, user_id: int, period_ref, transaction_id: str, kind: Optional[str] = None
    ) -> dict:
        """
        Remove an expense or income from a period by id.

        When `kind` is omitted both lists are searched.
        """
        if kind is not None and kind not in _KINDS:
            raise ValidationError(f"Unknown transaction type: {kind}")
        with transaction() as conn:
            verify_caller(user_id, self.user_repo, conn=conn)
            period = self._load_period(user_id, period_ref, conn)
            kind, existing = _locate(period, transaction_id, kind)
            if existing is None:
                raise TransactionNotFoundError(f"No transaction with id {transaction_id} in this period.")
            self.transaction_repo.delete(kind, transaction_id, period.id, conn=conn)

            items = period.transactions(kind)
            items[:] = [t for t in items if t.id != transaction_id]
            self._refresh_archive(user_id, period, [existing], [], conn)

        return ok(f"🗑️ {kind.capitalize()} `{transaction_id}` deleted.")

    @service_action("edit the transaction")
    def edit_amount(
        self,
        user_id: int,
        period_ref,
        transaction_id: str,
        base_amount: float,
        admin_fee: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> dict:
        """
        Change the amount (and optionally fee and notes) of an existing
        transaction, keeping everything else. Split expenses must be
        re-entered because their shares would no longer add up.
        """
        period = resolve_period(self.period_repo, user_id, period_ref)
        kind, existing = _locate(period, transaction_id)
        if existing is None:
            raise TransactionNotFoundError(f"No transaction with id {transaction_id} in this period.")
        if kind == "expense" and existing.is_split:
            raise ValidationError("Split expenses cannot be edited. Delete it and add it again with /split.")

        fee = existing.admin_fee if admin_fee is None else admin_fee
        record_cls = Expense if kind == "expense" else Income
        extra = {"category_id": existing.category_id} if kind == "expense" else {}
        if kind == "expense":
            extra.update(saving_goal_id=existing.saving_goal_id, debt_id=existing.debt_id)
        record = record_cls.create(
            base_amount, fee,
            id=existing.id,
            wallet_id=existing.wallet_id,
            date=existing.date,
            notes=existing.notes if notes is None else notes,
            **extra,
        )
        return self.update_transaction(user_id, period_ref, record)

    def _load_period(self, user_id: int, period_ref, conn):
        return resolve_period(self.period_repo, user_id, period_ref, conn=conn, for_update=True)

    def _refresh_archive(self, user_id: int, period, before, after, conn) -> None:
        """
        Keep an archived period consistent after one of its transactions changed:
        shift the wallets by the change in effect and recompute the frozen totals.
        """
        if period.is_current:
            return
        for wallet_id, delta in effect_delta(before, after).items():
            self.wallet_repo.adjust_initial_balance(wallet_id, user_id, delta, conn=conn)
        self.period_repo.update_summary(period.id, period_summary(period), conn=conn)
        logger.info(f"Refreshed archived period #{period.id} for user {user_id}")

    # ── AI-assisted entry ────────────────────────────────

    @service_action("record the message")
    def add_from_text(self, user_id: int, text: str) -> dict:
        """
        Parse a free-text message with Gemini and record it.

        Any failure of the AI call, or output that cannot be matched to the
        user's wallets and categories, yields a failed result asking for
        manual entry; nothing is recorded in that case.
        """
        wallets = self.wallet_repo.get_all(user_id)
        categories = self.category_repo.get_all(user_id)
        parsed = parse_transaction(
            text,
            wallet_names=[w.name for w in wallets],
            category_names=[c.name for c in categories],
        )
        if not parsed or "error" in parsed:
            question = (parsed or {}).get("question") or "I couldn't read that."
            return fail(f"🤔 {question}\n\n{MANUAL_ENTRY_HINT}", question=question)

        try:
            kind = parsed.get("type", "expense")
            amount = float(parsed["amount"])
            fee = float(parsed.get("admin_fee") or 0)
            when = datetime.combine(
                date_cls.fromisoformat(parsed["date"]), datetime.now().time()
            ) if parsed.get("date") else datetime.now()
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unusable AI output {parsed}: {e}")
            return fail(f"🤔 I couldn't read the amount.\n\n{MANUAL_ENTRY_HINT}")

        wallet = _match(wallets, parsed.get("wallet"))
        if wallet is None and len(wallets) == 1:
            wallet = wallets[0]
        notes = parsed.get("notes") or parsed.get("description") or ""

        if kind == "income":
            result = self.add_income(
                user_id, wallet.id if wallet else None, amount, fee, date=when, notes=notes,
            )
        else:
            category = _match(categories, parsed.get("category"))
            if category is None:
                return fail(
                    f"🤔 Which category is \"{parsed.get('category', '?')}\"? "
                    f"See /categories.\n\n{MANUAL_ENTRY_HINT}"
                )
            result = self.add_expense(
                user_id, wallet.id if wallet else None, amount, fee,
                category_id=category.id, date=when, notes=notes,
            )

        if result["success"]:
            wallet_names = name_map(wallets)
            category_names = name_map(categories)
            details = f"\n👛 {resolve_name(wallet_names, wallet.id if wallet else None, NO_WALLET)}"
            if kind != "income":
                details += f" | 🏷️ {resolve_name(category_names, category.id, UNCATEGORIZED)}"
            result["message"] += details
        return result


def _locate(period, transaction_id: str, kind: Optional[str] = None):
    """(kind, record) for a transaction id, searching both kinds unless given."""
    for k in (kind,) if kind else _KINDS:
        found = period.find(k, transaction_id)
        if found is not None:
            return k, found
    return kind, None


def _match(records, name: Optional[str]):
    """Find a record by case-insensitive name."""
    if not name:
        return None
    wanted = name.strip().lower()
    return next((r for r in records if r.name.lower() == wanted), None)
