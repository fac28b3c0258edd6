"""
Action ids: the opaque strings attached to rendered buttons.

An id is either a bare action name (``hit``) or ``<action>:<index>``
(``drop:3``, ``switch:0``). The presenter builds ids with ``action_id`` and
the session manager parses whatever the chat platform echoes back.
"""

from __future__ import annotations

from typing import NamedTuple

from parlor.logic.enums import GameAction
from parlor.logic.exceptions import InvalidActionError

_INDEXED_ACTIONS = frozenset({GameAction.PICK_SWITCH, GameAction.DROP})


class ParsedAction(NamedTuple):
    action: GameAction
    index: int | None = None


def action_id(action: GameAction, index: int | None = None) -> str:
    if index is None:
        return action.value
    return f"{action.value}:{index}"


def parse_action_id(raw: str) -> ParsedAction:
    """Parse an action id, raising InvalidActionError for anything malformed."""
    name, sep, arg = raw.strip().partition(":")
    try:
        action = GameAction(name)
    except ValueError:
        raise InvalidActionError(f"unknown action {raw!r}") from None

    if action in _INDEXED_ACTIONS:
        if not sep or not arg.isdigit():
            raise InvalidActionError(f"action {action.value!r} needs a numeric index")
        return ParsedAction(action, int(arg))
    if sep:
        raise InvalidActionError(f"action {action.value!r} takes no index")
    return ParsedAction(action)
