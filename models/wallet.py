"""
models/wallet.py
----------------
Domain model for wallets (cash, bank accounts, e-money).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.transaction import make_id


@dataclass
class Wallet:
    """
    A place money is kept.

    Attributes:
        id: Record id (``wal-...``).
        user_id: Telegram user ID of the owner.
        name: Display name, e.g. "Cash" or "BCA".
        icon: Icon key for display.
        initial_balance: Balance at the start of the currently open period.
            The live balance is always derived from it, never stored.
        created_at: Timestamp when the record was created.
    """
    user_id: int
    name: str
    initial_balance: float = 0.0
    icon: str = "wallet"
    id: str = field(default_factory=lambda: make_id("wal"))
    created_at: Optional[datetime] = None

    def __str__(self) -> str:
        return f"{self.name} (start {self.initial_balance:,.2f})"
