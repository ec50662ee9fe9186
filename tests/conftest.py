import pytest

import services.category_service
import services.onboarding_service
import services.period_service
import services.recurring_service
import services.transaction_service
import services.wallet_service
from security import rate_limiter
from services.balance_service import BalanceService
from services.category_service import CategoryService
from services.goal_service import GoalService
from services.onboarding_service import OnboardingService
from services.period_service import PeriodService
from services.recurring_service import RecurringService
from services.transaction_service import TransactionService
from services.wallet_service import WalletService
from tests.fakes import Store, wire

USER_ID = 1001

_TRANSACTIONAL_MODULES = (
    services.category_service,
    services.onboarding_service,
    services.period_service,
    services.recurring_service,
    services.transaction_service,
    services.wallet_service,
)


class Ledger:
    """Every service wired to one in-memory store."""

    def __init__(self, store):
        self.store = store
        self.periods = wire(PeriodService(), store)
        self.transactions = wire(TransactionService(), store)
        self.wallets = wire(WalletService(), store)
        self.categories = wire(CategoryService(), store)
        self.balances = wire(BalanceService(), store)
        self.recurring = wire(RecurringService(), store)
        self.goals = wire(GoalService(), store)
        self.goals.transaction_service = self.transactions
        self.onboarding = wire(OnboardingService(), store)
        self.onboarding.category_service = self.categories
        self.onboarding.period_service = self.periods

    def current(self, user_id=USER_ID):
        return self.periods.period_repo.get_current(user_id)

    def wallet(self, wallet_id):
        return self.store.wallets[wallet_id]

    def category_id(self, name, user_id=USER_ID):
        return self.categories.category_repo.get_by_name(name, user_id).id


@pytest.fixture
def store(monkeypatch):
    store = Store()
    for module in _TRANSACTIONAL_MODULES:
        monkeypatch.setattr(module, "transaction", store.transaction)
    return store


@pytest.fixture
def ledger(store):
    """A registered user with the system categories and an open period."""
    ledger = Ledger(store)
    result = ledger.onboarding.register(USER_ID, "Tester")
    assert result["success"], result["message"]
    return ledger


@pytest.fixture(autouse=True)
def _clear_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()
