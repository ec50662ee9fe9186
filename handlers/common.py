"""
handlers/common.py
------------------
Argument parsing shared by the command handlers: amounts with k/m
shorthand and wallet/category references given by id or by name.
"""

import re
from typing import Optional

from repositories.category_repo import CategoryRepository
from repositories.wallet_repo import WalletRepository

wallet_repo = WalletRepository()
category_repo = CategoryRepository()

_SUFFIXES = {"k": 1_000, "rb": 1_000, "m": 1_000_000, "jt": 1_000_000}
_AMOUNT_RE = re.compile(r"^([\d.,]+)(k|rb|m|jt)?$", re.IGNORECASE)


def parse_amount(text: str) -> Optional[float]:
    """
    Read an amount such as "45000", "45k", "1.5m" or "12,500".

    Returns:
        The value, or None if `text` is not an amount.
    """
    match = _AMOUNT_RE.match((text or "").strip())
    if not match:
        return None
    number, suffix = match.groups()
    number = number.replace(",", "")
    try:
        value = float(number)
    except ValueError:
        return None
    return value * _SUFFIXES.get((suffix or "").lower(), 1)


def find_wallet(user_id: int, ref: str):
    """A wallet by exact id or case-insensitive name."""
    wallets = wallet_repo.get_all(user_id)
    return _pick(wallets, ref)


def find_category(user_id: int, ref: str):
    categories = category_repo.get_all(user_id)
    return _pick(categories, ref)


def _pick(records, ref: str):
    ref = (ref or "").strip()
    for r in records:
        if r.id == ref:
            return r
    wanted = ref.lower().replace("_", " ")
    return next((r for r in records if r.name.lower() == wanted), None)


def split_pipes(args: list[str]) -> list[str]:
    """'/cmd a b | c | d' arguments → ['a b', 'c', 'd']."""
    return [p.strip() for p in " ".join(args).split("|")]
