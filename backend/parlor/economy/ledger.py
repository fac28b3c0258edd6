"""Abstract interface for the chip economy consumed by game sessions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel


class InsufficientFundsError(Exception):
    """A debit would take a balance below zero."""

    def __init__(self, player_id: str, balance: int, requested: int) -> None:
        self.player_id = player_id
        self.balance = balance
        self.requested = requested
        super().__init__(f"balance of {player_id} is {balance}, cannot take {requested}")


class LedgerError(Exception):
    """The ledger backend could not complete a request."""


class BalanceResult(BaseModel, frozen=True):
    balance: int | None
    success: bool


class UpdateResult(BaseModel, frozen=True):
    new_balance: int | None
    success: bool


class TransferResult(BaseModel, frozen=True):
    from_balance: int | None
    to_balance: int | None
    success: bool


class Ledger(ABC):
    """Chip balances per (player, scope). Scope is the chat server/guild id.

    ``update_balance`` and ``transfer`` raise InsufficientFundsError when a
    debit would overdraw; other failures come back with ``success=False``.
    """

    @abstractmethod
    async def get_balance(self, player_id: str, scope_id: str) -> BalanceResult: ...

    @abstractmethod
    async def update_balance(self, player_id: str, scope_id: str, delta: int) -> UpdateResult: ...

    @abstractmethod
    async def transfer(self, from_id: str, to_id: str, scope_id: str, amount: int) -> TransferResult: ...

    @abstractmethod
    async def record_game_played(self, player_id: str, scope_id: str) -> None: ...
