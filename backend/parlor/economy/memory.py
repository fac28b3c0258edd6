"""In-memory chip ledger for local runs and tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from parlor.economy.ledger import (
    BalanceResult,
    InsufficientFundsError,
    Ledger,
    TransferResult,
    UpdateResult,
)

logger = structlog.get_logger()

DEFAULT_STARTING_BALANCE = 100


@dataclass
class Account:
    chips: int
    games_played: int = 0


class InMemoryLedger(Ledger):
    """Ledger backed by a dict; accounts open lazily with the starting balance.

    Mutations hold one asyncio.Lock, so a transfer's debit and credit are
    never observed half-applied.
    """

    def __init__(self, starting_balance: int = DEFAULT_STARTING_BALANCE) -> None:
        self._starting_balance = starting_balance
        self._accounts: dict[tuple[str, str], Account] = {}
        self._lock = asyncio.Lock()

    def _account(self, player_id: str, scope_id: str) -> Account:
        key = (player_id, scope_id)
        account = self._accounts.get(key)
        if account is None:
            account = Account(chips=self._starting_balance)
            self._accounts[key] = account
            logger.debug("ledger account opened", player_id=player_id, scope_id=scope_id)
        return account

    def games_played(self, player_id: str, scope_id: str) -> int:
        return self._account(player_id, scope_id).games_played

    def set_balance(self, player_id: str, scope_id: str, chips: int) -> None:
        self._account(player_id, scope_id).chips = chips

    async def get_balance(self, player_id: str, scope_id: str) -> BalanceResult:
        return BalanceResult(balance=self._account(player_id, scope_id).chips, success=True)

    async def update_balance(self, player_id: str, scope_id: str, delta: int) -> UpdateResult:
        async with self._lock:
            account = self._account(player_id, scope_id)
            if delta < 0 and account.chips + delta < 0:
                logger.warning("insufficient funds", player_id=player_id, balance=account.chips, delta=delta)
                raise InsufficientFundsError(player_id, account.chips, -delta)
            account.chips += delta
            return UpdateResult(new_balance=account.chips, success=True)

    async def transfer(self, from_id: str, to_id: str, scope_id: str, amount: int) -> TransferResult:
        if amount < 0:
            raise ValueError("transfer amount must not be negative")
        async with self._lock:
            source = self._account(from_id, scope_id)
            target = self._account(to_id, scope_id)
            if source.chips < amount:
                logger.warning("insufficient funds for transfer", player_id=from_id, balance=source.chips, amount=amount)
                raise InsufficientFundsError(from_id, source.chips, amount)
            source.chips -= amount
            target.chips += amount
            return TransferResult(from_balance=source.chips, to_balance=target.chips, success=True)

    async def record_game_played(self, player_id: str, scope_id: str) -> None:
        async with self._lock:
            self._account(player_id, scope_id).games_played += 1
