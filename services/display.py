"""
services/display.py
-------------------
Formatting helpers shared by the services.

Transactions reference wallets, categories, goals and debts by id without
referential integrity, so every lookup goes through `resolve_name`, which
falls back to a readable default instead of failing.
"""

from typing import Iterable, Optional

UNCATEGORIZED = "Uncategorized"
NO_WALLET = "No wallet"
UNKNOWN_GOAL = "Unknown goal"
UNKNOWN_DEBT = "Unknown debt"


def name_map(records: Iterable) -> dict:
    """{id: name} for any records that have `id` and `name`."""
    return {r.id: r.name for r in records}


def resolve_name(names: dict, record_id: Optional[str], default: str) -> str:
    if not record_id:
        return default
    return names.get(record_id) or default


def money(value: float) -> str:
    return f"{value:,.2f}"


def describe_expense(
    expense, categories: dict, wallets: dict, goals: dict | None = None, debts: dict | None = None
) -> str:
    """One-line summary of an expense for chat output."""
    if expense.is_split:
        label = " + ".join(
            f"{resolve_name(categories, s.category_id, UNCATEGORIZED)} {money(s.amount)}"
            for s in expense.splits
        )
    else:
        label = resolve_name(categories, expense.category_id, UNCATEGORIZED)
    line = (
        f"  `{expense.id}` -{money(expense.amount)} | {label} | "
        f"{resolve_name(wallets, expense.wallet_id, NO_WALLET)} | {expense.date:%Y-%m-%d}"
    )
    if expense.admin_fee:
        line += f" (fee {money(expense.admin_fee)})"
    if expense.saving_goal_id:
        line += f" | 🎯 {resolve_name(goals or {}, expense.saving_goal_id, UNKNOWN_GOAL)}"
    if expense.debt_id:
        line += f" | 🧾 {resolve_name(debts or {}, expense.debt_id, UNKNOWN_DEBT)}"
    if expense.notes:
        line += f" | {expense.notes}"
    return line


def describe_income(income, wallets: dict) -> str:
    """One-line summary of an income for chat output."""
    line = (
        f"  `{income.id}` +{money(income.amount)} | "
        f"{resolve_name(wallets, income.wallet_id, NO_WALLET)} | {income.date:%Y-%m-%d}"
    )
    if income.admin_fee:
        line += f" (fee {money(income.admin_fee)})"
    if income.notes:
        line += f" | {income.notes}"
    return line
