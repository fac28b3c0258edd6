"""Shared result type and helpers for session transitions.

Every transition function in the variant modules returns an ActionResult.
It lives in its own module so the variant modules and the session manager
can import it without depending on each other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from parlor.logic.enums import EndReason, GameResult, SessionStatus, Variant
from parlor.logic.events import GameEndedEvent, GameEvent

if TYPE_CHECKING:
    from parlor.logic.state import GameSession

_CARD_VARIANTS = frozenset({Variant.BLACKJACK, Variant.POKER_DUEL})


class ActionResult(NamedTuple):
    """New immutable session state plus the events describing the change."""

    new_state: GameSession
    events: list[GameEvent]


def finish[S: GameSession](
    state: S,
    *,
    result: GameResult | None,
    winner_id: str | None = None,
    end_reason: EndReason = EndReason.COMPLETED,
    **updates: object,
) -> tuple[S, GameEndedEvent]:
    """Move a session to its terminal state and build the matching end event."""
    finished = state.model_copy(
        update={
            "status": SessionStatus.FINISHED,
            "result": result,
            "winner_id": winner_id,
            "end_reason": end_reason,
            **updates,
        },
    )
    event = GameEndedEvent(result=result, winner_id=winner_id, end_reason=end_reason)
    return finished, event


def abort(state: GameSession) -> ActionResult:
    """Force-terminate after an integrity failure: a push (card games) or draw, no winner."""
    updates: dict[str, object] = {}
    if hasattr(state, "phase"):
        updates["phase"] = type(state.phase).FINISHED
    result = GameResult.PUSH if state.variant in _CARD_VARIANTS else GameResult.DRAW
    finished, event = finish(state, result=result, end_reason=EndReason.ABORTED, **updates)
    return ActionResult(finished, [event])
