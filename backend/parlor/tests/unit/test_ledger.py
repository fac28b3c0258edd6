import asyncio

import pytest

from parlor.economy import InMemoryLedger, InsufficientFundsError

SCOPE = "guild-1"


class TestInMemoryLedger:
    async def test_accounts_open_with_starting_balance(self):
        ledger = InMemoryLedger(starting_balance=250)
        result = await ledger.get_balance("alice", SCOPE)

        assert result.balance == 250
        assert result.success

    async def test_balances_are_per_scope(self):
        ledger = InMemoryLedger(starting_balance=100)
        await ledger.update_balance("alice", SCOPE, 50)

        assert (await ledger.get_balance("alice", SCOPE)).balance == 150
        assert (await ledger.get_balance("alice", "guild-2")).balance == 100

    async def test_overdraw_raises_and_leaves_balance(self):
        ledger = InMemoryLedger(starting_balance=30)
        with pytest.raises(InsufficientFundsError) as exc_info:
            await ledger.update_balance("alice", SCOPE, -31)

        assert exc_info.value.requested == 31
        assert (await ledger.get_balance("alice", SCOPE)).balance == 30

    async def test_debit_to_zero_allowed(self):
        ledger = InMemoryLedger(starting_balance=30)
        result = await ledger.update_balance("alice", SCOPE, -30)

        assert result.new_balance == 0

    async def test_transfer_moves_chips(self):
        ledger = InMemoryLedger(starting_balance=100)
        result = await ledger.transfer("alice", "bob", SCOPE, 40)

        assert (result.from_balance, result.to_balance) == (60, 140)

    async def test_uncovered_transfer_changes_nothing(self):
        ledger = InMemoryLedger(starting_balance=100)
        ledger.set_balance("alice", SCOPE, 10)
        with pytest.raises(InsufficientFundsError):
            await ledger.transfer("alice", "bob", SCOPE, 40)

        assert (await ledger.get_balance("alice", SCOPE)).balance == 10
        assert (await ledger.get_balance("bob", SCOPE)).balance == 100

    async def test_negative_transfer_rejected(self):
        with pytest.raises(ValueError, match="must not be negative"):
            await InMemoryLedger().transfer("alice", "bob", SCOPE, -1)

    async def test_concurrent_debits_never_overdraw(self):
        ledger = InMemoryLedger(starting_balance=100)
        results = await asyncio.gather(
            *(ledger.update_balance("alice", SCOPE, -30) for _ in range(5)),
            return_exceptions=True,
        )

        assert sum(isinstance(r, InsufficientFundsError) for r in results) == 2
        assert (await ledger.get_balance("alice", SCOPE)).balance == 10

    async def test_games_played_counter(self):
        ledger = InMemoryLedger()
        await ledger.record_game_played("alice", SCOPE)
        await ledger.record_game_played("alice", SCOPE)

        assert ledger.games_played("alice", SCOPE) == 2
        assert ledger.games_played("bob", SCOPE) == 0
