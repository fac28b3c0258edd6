"""Chip economy: the ledger interface sessions settle against, plus an in-memory ledger."""

from parlor.economy.ledger import (
    BalanceResult,
    InsufficientFundsError,
    Ledger,
    LedgerError,
    TransferResult,
    UpdateResult,
)
from parlor.economy.memory import InMemoryLedger

__all__ = [
    "BalanceResult",
    "InMemoryLedger",
    "InsufficientFundsError",
    "Ledger",
    "LedgerError",
    "TransferResult",
    "UpdateResult",
]
