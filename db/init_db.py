"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db

Expenses and incomes are stored one row each, keyed by id and pointing at
the budget period they belong to. A period is therefore an aggregate over
its transaction rows, and archiving a period never copies transactions.
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users table: registered Telegram users
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    telegram_id     BIGINT UNIQUE NOT NULL,
    first_name      VARCHAR(100),
    currency        VARCHAR(5) DEFAULT 'IDR',
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Wallets: initial_balance is the balance at the start of the open period
CREATE TABLE IF NOT EXISTS wallets (
    id              VARCHAR(40) PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    name            VARCHAR(100) NOT NULL,
    icon            VARCHAR(40) DEFAULT 'wallet',
    initial_balance NUMERIC(14,2) NOT NULL DEFAULT 0,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Categories: master list per user
CREATE TABLE IF NOT EXISTS categories (
    id               VARCHAR(40) PRIMARY KEY,
    user_id          BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    name             VARCHAR(100) NOT NULL,
    icon             VARCHAR(40) DEFAULT 'tag',
    is_essential     BOOLEAN DEFAULT FALSE,
    is_debt_category BOOLEAN DEFAULT FALSE
);

-- Budget periods: exactly one open period (period_end IS NULL) per user
CREATE TABLE IF NOT EXISTS budget_periods (
    id               SERIAL PRIMARY KEY,
    user_id          BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    period_start     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    period_end       TIMESTAMPTZ,
    total_income     NUMERIC(14,2),
    total_expenses   NUMERIC(14,2),
    remaining_budget NUMERIC(14,2)
);

-- Category budgets: snapshot per period, carried over on close
CREATE TABLE IF NOT EXISTS period_category_budgets (
    period_id       INT NOT NULL REFERENCES budget_periods(id) ON DELETE CASCADE,
    category_id     VARCHAR(40) NOT NULL,
    category_name   VARCHAR(100),
    budget          NUMERIC(14,2) NOT NULL DEFAULT 0,
    position        INT NOT NULL DEFAULT 0,
    PRIMARY KEY (period_id, category_id)
);

-- Expenses: category_id is NULL for split expenses.
-- Wallet/category/goal/debt ids are deliberately not foreign keys.
CREATE TABLE IF NOT EXISTS expenses (
    id              VARCHAR(40) PRIMARY KEY,
    period_id       INT NOT NULL REFERENCES budget_periods(id) ON DELETE CASCADE,
    wallet_id       VARCHAR(40),
    amount          NUMERIC(14,2) NOT NULL,
    base_amount     NUMERIC(14,2) NOT NULL,
    admin_fee       NUMERIC(14,2) NOT NULL DEFAULT 0,
    category_id     VARCHAR(40),
    is_split        BOOLEAN NOT NULL DEFAULT FALSE,
    date            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    notes           TEXT,
    saving_goal_id  VARCHAR(40),
    debt_id         VARCHAR(40)
);

CREATE TABLE IF NOT EXISTS expense_splits (
    expense_id      VARCHAR(40) NOT NULL REFERENCES expenses(id) ON DELETE CASCADE,
    position        INT NOT NULL,
    category_id     VARCHAR(40) NOT NULL,
    amount          NUMERIC(14,2) NOT NULL,
    PRIMARY KEY (expense_id, position)
);

CREATE TABLE IF NOT EXISTS incomes (
    id              VARCHAR(40) PRIMARY KEY,
    period_id       INT NOT NULL REFERENCES budget_periods(id) ON DELETE CASCADE,
    wallet_id       VARCHAR(40),
    amount          NUMERIC(14,2) NOT NULL,
    base_amount     NUMERIC(14,2) NOT NULL,
    admin_fee       NUMERIC(14,2) NOT NULL DEFAULT 0,
    date            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    notes           TEXT
);

-- Recurring transaction templates, posted monthly on day_of_month
CREATE TABLE IF NOT EXISTS recurring_transactions (
    id              SERIAL PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    name            VARCHAR(100) NOT NULL,
    type            VARCHAR(10) NOT NULL CHECK (type IN ('expense', 'income')),
    amount          NUMERIC(14,2) NOT NULL,
    base_amount     NUMERIC(14,2) NOT NULL,
    admin_fee       NUMERIC(14,2) NOT NULL DEFAULT 0,
    category_id     VARCHAR(40),
    wallet_id       VARCHAR(40) NOT NULL,
    day_of_month    INT NOT NULL CHECK (day_of_month BETWEEN 1 AND 31),
    notes           TEXT,
    last_added      DATE,
    active          BOOLEAN DEFAULT TRUE,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS saving_goals (
    id              VARCHAR(40) PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    name            VARCHAR(100) NOT NULL,
    target_amount   NUMERIC(14,2) NOT NULL
);

CREATE TABLE IF NOT EXISTS debts (
    id              VARCHAR(40) PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    name            VARCHAR(100) NOT NULL,
    total_amount    NUMERIC(14,2) NOT NULL,
    interest_rate   NUMERIC(6,3) DEFAULT 0,
    minimum_payment NUMERIC(14,2) DEFAULT 0
);

-- Indexes
CREATE UNIQUE INDEX IF NOT EXISTS ux_periods_one_open
    ON budget_periods(user_id) WHERE period_end IS NULL;
CREATE INDEX IF NOT EXISTS idx_periods_user_end ON budget_periods(user_id, period_end);
CREATE INDEX IF NOT EXISTS idx_expenses_period ON expenses(period_id);
CREATE INDEX IF NOT EXISTS idx_expenses_wallet ON expenses(wallet_id);
CREATE INDEX IF NOT EXISTS idx_incomes_period ON incomes(period_id);
CREATE INDEX IF NOT EXISTS idx_incomes_wallet ON incomes(wallet_id);
CREATE INDEX IF NOT EXISTS idx_recurring_user ON recurring_transactions(user_id) WHERE active = TRUE;
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    try:
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("Database schema created successfully.")
