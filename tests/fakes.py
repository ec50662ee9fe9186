"""
In-memory stand-ins for the repositories and for db.connection.transaction.

All fake repositories share one `Store`. `Store.transaction()` snapshots the
store on entry and restores the snapshot if the block raises, so tests can
check that a failed operation leaves nothing behind. Reads hand out copies,
so a service mutating a returned object changes nothing until it writes.
"""

import copy
from contextlib import contextmanager
from itertools import count


class Store:
    def __init__(self):
        self.users = {}
        self.wallets = {}
        self.categories = {}
        self.periods = {}
        self.recurring = {}
        self.goals = {}
        self.debts = {}
        self._period_ids = count(1)
        self._recurring_ids = count(1)
        self.commits = 0
        self.rollbacks = 0

    _DATA = ("users", "wallets", "categories", "periods", "recurring", "goals", "debts")

    @contextmanager
    def transaction(self):
        snapshot = {name: copy.deepcopy(getattr(self, name)) for name in self._DATA}
        try:
            yield self
        except Exception:
            for name, value in snapshot.items():
                setattr(self, name, value)
            self.rollbacks += 1
            raise
        self.commits += 1


class FakeUserRepo:
    def __init__(self, store):
        self.store = store

    def ensure_user(self, telegram_id, first_name=None, conn=None):
        created = telegram_id not in self.store.users
        self.store.users[telegram_id] = {"id": telegram_id, "telegram_id": telegram_id, "first_name": first_name}
        return {**self.store.users[telegram_id], "created": created}

    def get_by_telegram_id(self, telegram_id, conn=None):
        user = self.store.users.get(telegram_id)
        return dict(user) if user else None

    def get_all_ids(self, conn=None):
        return list(self.store.users)


class FakeWalletRepo:
    def __init__(self, store):
        self.store = store

    def save(self, wallet, conn=None):
        existing = self.store.wallets.get(wallet.id)
        if existing is not None and existing.user_id != wallet.user_id:
            raise ValueError("Wallet belongs to another user")
        self.store.wallets[wallet.id] = copy.deepcopy(wallet)
        return wallet

    def set_initial_balance(self, wallet_id, user_id, balance, conn=None):
        wallet = self._owned(wallet_id, user_id)
        if wallet is None:
            return False
        wallet.initial_balance = balance
        return True

    def adjust_initial_balance(self, wallet_id, user_id, delta, conn=None):
        wallet = self._owned(wallet_id, user_id)
        if wallet is None:
            return False
        wallet.initial_balance += delta
        return True

    def get_by_id(self, wallet_id, user_id, conn=None):
        return copy.deepcopy(self._owned(wallet_id, user_id))

    def get_all(self, user_id, conn=None):
        return [copy.deepcopy(w) for w in self.store.wallets.values() if w.user_id == user_id]

    def delete(self, wallet_id, user_id, conn=None):
        if self._owned(wallet_id, user_id) is None:
            return False
        del self.store.wallets[wallet_id]
        return True

    def _owned(self, wallet_id, user_id):
        wallet = self.store.wallets.get(wallet_id)
        return wallet if wallet is not None and wallet.user_id == user_id else None


class FakeCategoryRepo:
    def __init__(self, store):
        self.store = store

    def add(self, category, conn=None):
        self.store.categories[category.id] = copy.deepcopy(category)
        return category

    def get_all(self, user_id, conn=None):
        return [copy.deepcopy(c) for c in self.store.categories.values() if c.user_id == user_id]

    def get_by_id(self, category_id, user_id, conn=None):
        c = self.store.categories.get(category_id)
        return copy.deepcopy(c) if c is not None and c.user_id == user_id else None

    def get_by_name(self, name, user_id, conn=None):
        return next(
            (copy.deepcopy(c) for c in self.store.categories.values()
             if c.user_id == user_id and c.name.lower() == name.lower()),
            None,
        )

    def delete(self, category_id, user_id, conn=None):
        if self.get_by_id(category_id, user_id) is None:
            return False
        del self.store.categories[category_id]
        return True


class FakeTransactionRepo:
    def __init__(self, store):
        self.store = store

    def add(self, transaction, period_id, conn=None):
        record = copy.deepcopy(transaction)
        record.period_id = period_id
        self.store.periods[period_id].transactions(record.kind).append(record)
        return transaction

    def count_wallet_references(self, wallet_id, user_id, conn=None):
        counts = {"current": 0, "archive": 0}
        for period in self.store.periods.values():
            if period.user_id != user_id:
                continue
            n = sum(1 for t in period.expenses + period.incomes if t.wallet_id == wallet_id)
            counts["current" if period.is_current else "archive"] += n
        return counts

    def replace(self, transaction, period_id, conn=None):
        items = self.store.periods[period_id].transactions(transaction.kind)
        for i, t in enumerate(items):
            if t.id == transaction.id:
                record = copy.deepcopy(transaction)
                record.period_id = period_id
                items[i] = record
                return True
        return False

    def delete(self, kind, transaction_id, period_id, conn=None):
        items = self.store.periods[period_id].transactions(kind)
        before = len(items)
        items[:] = [t for t in items if t.id != transaction_id]
        return len(items) != before


class FakePeriodRepo:
    def __init__(self, store):
        self.store = store
        self.locked = []

    def create(self, period, conn=None):
        if period.is_current and self._current(period.user_id) is not None:
            raise RuntimeError("duplicate open period")
        period.id = next(self.store._period_ids)
        self.store.periods[period.id] = copy.deepcopy(period)
        return period

    def get_current(self, user_id, conn=None, for_update=False, with_transactions=True):
        if for_update:
            self.locked.append(user_id)
        return self._copy(self._current(user_id), with_transactions)

    def get_by_id(self, period_id, user_id, conn=None, for_update=False, with_transactions=True):
        period = self.store.periods.get(period_id)
        if period is None or period.user_id != user_id:
            return None
        return self._copy(period, with_transactions)

    def list_archives(self, user_id, conn=None):
        archives = [p for p in self.store.periods.values() if p.user_id == user_id and not p.is_current]
        archives.sort(key=lambda p: p.period_end, reverse=True)
        return [self._copy(p, False) for p in archives]

    def replace_budgets(self, period_id, budgets, conn=None):
        self.store.periods[period_id].category_budgets = copy.deepcopy(list(budgets))

    def close(self, period_id, period_end, summary, conn=None):
        period = self.store.periods[period_id]
        if not period.is_current:
            return False
        period.period_end = period_end
        period.total_income = summary["total_income"]
        period.total_expenses = summary["total_expenses"]
        period.remaining_budget = summary["remaining_budget"]
        return True

    def update_summary(self, period_id, summary, conn=None):
        period = self.store.periods[period_id]
        period.total_income = summary["total_income"]
        period.total_expenses = summary["total_expenses"]
        period.remaining_budget = summary["remaining_budget"]

    def _current(self, user_id):
        return next(
            (p for p in self.store.periods.values() if p.user_id == user_id and p.is_current),
            None,
        )

    @staticmethod
    def _copy(period, with_transactions):
        if period is None:
            return None
        result = copy.deepcopy(period)
        if not with_transactions:
            result.expenses, result.incomes = [], []
        return result


class FakeRecurringRepo:
    def __init__(self, store):
        self.store = store

    def add(self, template, conn=None):
        template.id = next(self.store._recurring_ids)
        self.store.recurring[template.id] = copy.deepcopy(template)
        return template

    def get_all(self, user_id, active_only=True, conn=None):
        return [
            copy.deepcopy(t) for t in self.store.recurring.values()
            if t.user_id == user_id and (t.active or not active_only)
        ]

    def get_by_id(self, template_id, user_id, conn=None):
        t = self.store.recurring.get(template_id)
        return copy.deepcopy(t) if t is not None and t.user_id == user_id else None

    def mark_added(self, template_id, day, conn=None):
        self.store.recurring[template_id].last_added = day

    def delete(self, template_id, user_id, conn=None):
        if self.get_by_id(template_id, user_id) is None:
            return False
        del self.store.recurring[template_id]
        return True


class FakeGoalRepo:
    def __init__(self, store, table):
        self.store = store
        self.table = table

    def add(self, record, conn=None):
        getattr(self.store, self.table)[record.id] = copy.deepcopy(record)
        return record

    def get_all(self, user_id, conn=None):
        return [copy.deepcopy(r) for r in getattr(self.store, self.table).values() if r.user_id == user_id]


def wire(service, store):
    """Point every repository attribute a service has at the fakes."""
    fakes = {
        "user_repo": FakeUserRepo,
        "wallet_repo": FakeWalletRepo,
        "category_repo": FakeCategoryRepo,
        "transaction_repo": FakeTransactionRepo,
        "period_repo": FakePeriodRepo,
    }
    for attr, cls in fakes.items():
        if hasattr(service, attr):
            setattr(service, attr, cls(store))
    if hasattr(service, "repo"):
        service.repo = FakeRecurringRepo(store)
    if hasattr(service, "goal_repo"):
        service.goal_repo = FakeGoalRepo(store, "goals")
    if hasattr(service, "debt_repo"):
        service.debt_repo = FakeGoalRepo(store, "debts")
    return service
