"""Typed domain exceptions for parlor sessions.

Rule violations raised by the transition functions subclass GameRuleError;
the session manager catches them at its boundary and answers the player with
a rejected ActionOutcome, leaving the session untouched. GameIntegrityError
marks a broken invariant (an exhausted deck, for one) and makes the manager
force-terminate the session without settlement.
"""

from parlor.logic.enums import GameErrorCode


class GameRuleError(Exception):
    """Base exception for actions that break game rules.

    Attributes:
        code: Error code echoed back to the player.

    """

    code = GameErrorCode.INVALID_ACTION


class InvalidActionError(GameRuleError):
    """Action id is malformed or not available in the current phase."""


class NotYourTurnError(GameRuleError):
    """Action came from a player who is not the one to act."""

    code = GameErrorCode.NOT_YOUR_TURN


class NotAPlayerError(GameRuleError):
    """Action came from someone who is not seated (or invited) in the session."""

    code = GameErrorCode.NOT_A_PLAYER


class GameFinishedError(GameRuleError):
    """Session already reached a terminal state."""

    code = GameErrorCode.GAME_FINISHED


class UnsupportedSettingsError(GameRuleError):
    """Session configuration cannot be honoured (bad player count, negative wager)."""


class GameIntegrityError(Exception):
    """An invariant that should be unreachable was violated."""


class DeckExhaustedError(GameIntegrityError):
    """A deal was attempted on an empty deck."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"deck exhausted in session {session_id}")


class StakeNotCoveredError(GameRuleError):
    """The player's current balance no longer covers the wager."""

    code = GameErrorCode.INSUFFICIENT_FUNDS


class LedgerUnavailableError(GameRuleError):
    """A balance needed to validate the action could not be read."""

    code = GameErrorCode.LEDGER_UNAVAILABLE
