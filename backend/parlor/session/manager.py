from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from parlor.economy.ledger import InsufficientFundsError, LedgerError
from parlor.logic import blackjack, connect_four, elimination, poker_duel
from parlor.logic.action_result import ActionResult, abort
from parlor.logic.actions import ParsedAction, parse_action_id
from parlor.logic.cards import Card, shuffled_deck
from parlor.logic.enums import GameAction, GameErrorCode, TimeoutType, Variant
from parlor.logic.events import GameEvent, SettlementEvent, convert_events, error_event
from parlor.logic.exceptions import (
    GameIntegrityError,
    GameRuleError,
    InvalidActionError,
    LedgerUnavailableError,
)
from parlor.logic.rng import create_rng, generate_seed
from parlor.logic.settlement import Adjustment, Transfer, plan_settlement
from parlor.logic.timer import TimerConfig
from parlor.messaging.render import NullRenderer, RenderableState, render_session
from parlor.session.registry import GameRegistry
from parlor.session.timer_manager import TimerManager
from parlor.session.types import (
    ActionOutcome,
    BlackjackConfig,
    ConnectFourConfig,
    EliminationConfig,
)
from parlor.settings import ParlorSettings
from shared.logging import bind_session

if TYPE_CHECKING:
    import random

    from parlor.economy.ledger import Ledger
    from parlor.logic.state import GameSession
    from parlor.messaging.render import Renderer
    from parlor.session.types import GameConfig

    DeckFactory = Callable[[random.Random], list[Card]]

logger = structlog.get_logger()

_VARIANT_MODULES = {
    Variant.ELIMINATION: elimination,
    Variant.CONNECT_FOUR: connect_four,
    Variant.BLACKJACK: blackjack,
    Variant.POKER_DUEL: poker_duel,
}


class SessionManager:
    """Drive every live session: create, act, time out, settle, remove.

    All work on one session runs under that session's lock, and every path
    re-reads the latest state from the registry after acquiring it.
    """

    def __init__(
        self,
        ledger: Ledger,
        *,
        settings: ParlorSettings | None = None,
        renderer: Renderer | None = None,
        registry: GameRegistry | None = None,
        deck_factory: DeckFactory = shuffled_deck,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or ParlorSettings()
        self._ledger = ledger
        self._renderer = renderer or NullRenderer()
        self._registry = registry or GameRegistry(max_sessions=self._settings.max_sessions)
        self._timer_manager = TimerManager(
            on_timeout=self._handle_timeout,
            config=TimerConfig.from_settings(self._settings),
        )
        self._rngs: dict[str, random.Random] = {}  # session_id -> rng
        self._deck_factory = deck_factory
        self._clock = clock

    @property
    def registry(self) -> GameRegistry:
        return self._registry

    @property
    def timer_manager(self) -> TimerManager:
        return self._timer_manager

    @property
    def session_count(self) -> int:
        return len(self._registry)

    def get_session(self, session_id: str) -> GameSession | None:
        return self._registry.get(session_id)

    # --- creation ---

    async def create(self, config: GameConfig) -> str:
        """Assemble and register a session, running any opening CPU turns.

        Raises InsufficientFundsError before anything is registered when a
        participant cannot cover the wager.
        """
        bind_session(config.session_id, variant=config.variant)
        await self._check_funds(config)
        seed = config.seed or generate_seed()
        rng = create_rng(seed)

        if isinstance(config, EliminationConfig):
            result = elimination.create_elimination(
                config.session_id,
                config.scope_id,
                [p.as_tuple() for p in config.players],
                config.wager,
                rng,
            )
        elif isinstance(config, ConnectFourConfig):
            result = connect_four.create_connect_four(
                config.session_id,
                config.scope_id,
                config.host.as_tuple(),
                config.opponent.as_tuple() if config.opponent else None,
                config.wager,
            )
        elif isinstance(config, BlackjackConfig):
            result = blackjack.create_blackjack(
                config.session_id,
                config.scope_id,
                config.player.as_tuple(),
                config.wager,
                self._deck_factory(rng),
            )
        else:
            balance = await self._read_balance(config.player.player_id, config.scope_id)
            result = poker_duel.create_poker_duel(
                config.session_id,
                config.scope_id,
                config.player.as_tuple(),
                config.wager,
                balance,
            )

        self._registry.insert(result.new_state)
        self._rngs[config.session_id] = rng
        logger.info("session created", wager=config.wager, status=result.new_state.status, seed=seed)

        lock = self._registry.lock_for(config.session_id)
        if lock is not None:
            async with lock:
                await self._commit(result)
        return config.session_id

    async def _check_funds(self, config: GameConfig) -> None:
        if config.wager == 0:
            return
        if isinstance(config, EliminationConfig):
            player_ids = [p.player_id for p in config.players]
        elif isinstance(config, ConnectFourConfig):
            player_ids = [config.host.player_id] + ([config.opponent.player_id] if config.opponent else [])
        else:
            player_ids = [config.player.player_id]
        for player_id in player_ids:
            balance = await self._read_balance(player_id, config.scope_id)
            if balance < config.wager:
                logger.info("wager not covered", player_id=player_id, balance=balance)
                raise InsufficientFundsError(player_id, balance, config.wager)

    async def _read_balance(self, player_id: str, scope_id: str) -> int:
        try:
            result = await self._ledger.get_balance(player_id, scope_id)
        except LedgerError as e:
            raise LedgerUnavailableError("your balance could not be checked, try again later") from e
        if not result.success or result.balance is None:
            raise LedgerUnavailableError("your balance could not be checked, try again later")
        return result.balance

    # --- actions ---

    async def submit_action(self, session_id: str, player_id: str, action_id: str) -> ActionOutcome:
        bind_session(session_id, player_id=player_id)
        lock = self._registry.lock_for(session_id)
        if lock is None:
            return self._rejected(player_id, GameErrorCode.GAME_NOT_FOUND, "this game is no longer running")
        try:
            parsed = parse_action_id(action_id)
        except InvalidActionError as e:
            return self._rejected(player_id, e.code, str(e))

        async with lock:
            state = self._registry.get(session_id)
            if state is None:
                return self._rejected(player_id, GameErrorCode.GAME_NOT_FOUND, "this game is no longer running")
            structlog.contextvars.bind_contextvars(variant=state.variant)
            try:
                result = await self._dispatch(state, player_id, parsed)
            except GameRuleError as e:
                logger.info("action rejected", action_id=action_id, error_code=e.code, reason=str(e))
                return self._rejected(player_id, e.code, str(e), state)
            except GameIntegrityError:
                logger.exception("session invariant violated, aborting", action_id=action_id)
                result = abort(state)
            except Exception:
                logger.exception("unexpected error in transition, aborting", action_id=action_id)
                result = abort(state)

            if result.new_state is state and not result.events:
                # idempotent no-op (a repeated join): nothing to commit or re-arm
                return ActionOutcome(accepted=True, state=state, view=render_session(state))
            return await self._commit(result)

    async def _dispatch(self, state: GameSession, player_id: str, parsed: ParsedAction) -> ActionResult:
        rng = self._rngs[state.session_id]
        if state.variant == Variant.ELIMINATION:
            return elimination.apply_action(state, player_id, parsed, rng)
        if state.variant == Variant.CONNECT_FOUR:
            return connect_four.apply_action(state, player_id, parsed, rng)
        if state.variant == Variant.BLACKJACK:
            return blackjack.apply_action(state, player_id, parsed)
        if parsed.action == GameAction.CONFIRM:
            # the stake is checked against the balance at confirmation, not at creation
            balance = await self._read_balance(state.player.player_id, state.scope_id)
            return poker_duel.confirm(state, player_id, balance, rng, self._deck_factory)
        return poker_duel.apply_action(state, player_id, parsed, rng, self._deck_factory)

    def _rejected(
        self,
        player_id: str,
        code: GameErrorCode,
        message: str,
        state: GameSession | None = None,
    ) -> ActionOutcome:
        return ActionOutcome(
            accepted=False,
            error_code=code,
            message=message,
            state=state,
            events=[error_event(player_id, code, message)],
        )

    # --- timeouts ---

    async def on_timeout(self, session_id: str) -> ActionOutcome | None:
        """Fire the session's pending timeout immediately, whatever its token."""
        return await self._handle_timeout(session_id, None, None)

    async def _handle_timeout(
        self,
        session_id: str,
        timeout_type: TimeoutType | None,
        version: int | None,
    ) -> ActionOutcome | None:
        bind_session(session_id)
        lock = self._registry.lock_for(session_id)
        if lock is None:
            return None

        async with lock:
            state = self._registry.get(session_id)
            if state is None or state.is_finished:
                return None
            structlog.contextvars.bind_contextvars(variant=state.variant)
            if version is not None and state.version != version:
                logger.debug("stale timeout ignored", token=version, version=state.version)
                return None
            pending = _VARIANT_MODULES[state.variant].pending_timeout(state)
            if pending is None or (timeout_type is not None and pending != timeout_type):
                return None

            logger.info("session timed out", timeout_type=pending)
            try:
                result = self._apply_timeout(state)
            except GameRuleError as e:
                logger.warning("timeout rejected", reason=str(e))
                return None
            except GameIntegrityError:
                logger.exception("session invariant violated on timeout, aborting")
                result = abort(state)
            except Exception:
                logger.exception("unexpected error in timeout, aborting")
                result = abort(state)
            return await self._commit(result)

    def _apply_timeout(self, state: GameSession) -> ActionResult:
        if state.variant == Variant.ELIMINATION:
            return elimination.apply_timeout(state, self._rngs[state.session_id])
        if state.variant == Variant.CONNECT_FOUR:
            return connect_four.apply_timeout(state)
        if state.variant == Variant.BLACKJACK:
            return blackjack.apply_timeout(state)
        return poker_duel.apply_timeout(state)

    # --- commit, settle, render ---

    async def _commit(self, result: ActionResult) -> ActionOutcome:
        """Store an accepted transition, re-arm or settle, then render.

        Must be called under the session lock.
        """
        state = result.new_state.model_copy(
            update={"version": result.new_state.version + 1, "last_action_at": self._clock()},
        )
        session_id = state.session_id
        events: list[GameEvent] = list(result.events)

        if state.is_finished:
            self._timer_manager.cleanup(session_id)
            # settle first; the session leaves the registry whatever the ledger says
            events.extend(await self._settle(state))
            self._registry.remove(session_id)
            self._rngs.pop(session_id, None)
            logger.info(
                "session finished",
                result=state.result,
                winner_id=state.winner_id,
                end_reason=state.end_reason,
            )
        else:
            self._registry.replace(state)
            pending = _VARIANT_MODULES[state.variant].pending_timeout(state)
            if pending is None:
                self._timer_manager.cancel(session_id)
            else:
                self._timer_manager.start(session_id, state.variant, pending, state.version)

        view = render_session(state, events)
        await self._render(session_id, view)
        return ActionOutcome(accepted=True, state=state, events=convert_events(events), view=view)

    async def _settle(self, state: GameSession) -> list[SettlementEvent]:
        plan = plan_settlement(state)
        events: list[SettlementEvent] = []
        for operation in plan.operations:
            if isinstance(operation, Transfer):
                events.extend(await self._apply_transfer(state.scope_id, operation))
            else:
                events.append(await self._apply_adjustment(state.scope_id, operation))
        # each operation is its own ledger call, so a payout can land partly
        unsettled = sorted({e.player_id for e in events if not e.success})
        if unsettled and len(unsettled) < len({e.player_id for e in events}):
            logger.error("settlement partially applied", unsettled=unsettled)
        for player_id in plan.played:
            try:
                await self._ledger.record_game_played(player_id, state.scope_id)
            except Exception:
                logger.exception("failed to record game played", player_id=player_id)
        return events

    async def _apply_adjustment(self, scope_id: str, adjustment: Adjustment) -> SettlementEvent:
        failed = SettlementEvent(player_id=adjustment.player_id, delta=adjustment.delta, new_balance=None, success=False)
        try:
            result = await self._ledger.update_balance(adjustment.player_id, scope_id, adjustment.delta)
        except InsufficientFundsError as e:
            logger.warning("settlement debit not covered", player_id=e.player_id, balance=e.balance, delta=adjustment.delta)
            return failed
        except Exception:
            logger.exception("settlement update failed", player_id=adjustment.player_id, delta=adjustment.delta)
            return failed
        if not result.success:
            logger.error("ledger refused settlement", player_id=adjustment.player_id, delta=adjustment.delta)
        return SettlementEvent(
            player_id=adjustment.player_id,
            delta=adjustment.delta,
            new_balance=result.new_balance,
            success=result.success,
        )

    async def _apply_transfer(self, scope_id: str, transfer: Transfer) -> list[SettlementEvent]:
        try:
            result = await self._ledger.transfer(transfer.from_id, transfer.to_id, scope_id, transfer.amount)
        except InsufficientFundsError as e:
            logger.warning("settlement transfer not covered", player_id=e.player_id, balance=e.balance)
            from_balance, to_balance, success = None, None, False
        except Exception:
            logger.exception("settlement transfer failed", from_id=transfer.from_id, to_id=transfer.to_id)
            from_balance, to_balance, success = None, None, False
        else:
            from_balance, to_balance, success = result.from_balance, result.to_balance, result.success
            if not success:
                logger.error("ledger refused transfer", from_id=transfer.from_id, to_id=transfer.to_id)
        return [
            SettlementEvent(player_id=transfer.from_id, delta=-transfer.amount, new_balance=from_balance, success=success),
            SettlementEvent(player_id=transfer.to_id, delta=transfer.amount, new_balance=to_balance, success=success),
        ]

    async def _render(self, session_id: str, view: RenderableState) -> None:
        try:
            await self._renderer.render(session_id, view)
        except Exception:
            logger.exception("failed to render session")

    # --- read-only and lifecycle ---

    def describe(self, session_id: str) -> RenderableState | None:
        state = self._registry.get(session_id)
        if state is None:
            return None
        return render_session(state)

    def shutdown(self) -> None:
        """Cancel every pending timer. Sessions stay in memory until the process exits."""
        self._timer_manager.cancel_all()
        logger.info("session manager shut down", live_sessions=len(self._registry))
