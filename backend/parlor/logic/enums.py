"""
String enum definitions for parlor game concepts.
"""

from enum import Enum


class Variant(str, Enum):
    """Game variants hosted by the session manager."""

    ELIMINATION = "elimination"
    CONNECT_FOUR = "connect_four"
    BLACKJACK = "blackjack"
    POKER_DUEL = "poker_duel"


class SessionStatus(str, Enum):
    """Lifecycle status shared by every variant."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class BlackjackPhase(str, Enum):
    PLAYER_TURN = "player_turn"
    DEALER_TURN = "dealer_turn"
    FINISHED = "finished"


class PokerPhase(str, Enum):
    CONFIRM_START = "confirm_start"
    ROUND_START = "round_start"
    ROUND_REVEAL = "round_reveal"
    FINISHED = "finished"


class GameAction(str, Enum):
    """Actions a player can trigger through an action id."""

    JOIN = "join"
    PICK_SWITCH = "switch"
    DROP = "drop"
    HIT = "hit"
    STAND = "stand"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    REVEAL = "reveal"
    NEXT_ROUND = "next_round"


class TimeoutType(str, Enum):
    """Kinds of scheduled timeouts; each maps to a configured duration."""

    LOBBY = "lobby"
    TURN = "turn"
    CONFIRM = "confirm"
    ROUND = "round"


class EndReason(str, Enum):
    """Why a session reached its terminal state."""

    COMPLETED = "completed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    ABORTED = "aborted"


class GameResult(str, Enum):
    """Variant outcome tags recorded on a finished session."""

    WIN = "win"
    LOSE = "lose"
    DRAW = "draw"
    PUSH = "push"
    BLACKJACK = "blackjack"
    PLAYER_BUST = "player_bust"
    DEALER_BUST = "dealer_bust"


class GameErrorCode(str, Enum):
    """Error codes returned with rejected actions."""

    GAME_NOT_FOUND = "game_not_found"
    GAME_FINISHED = "game_finished"
    NOT_YOUR_TURN = "not_your_turn"
    NOT_A_PLAYER = "not_a_player"
    INVALID_ACTION = "invalid_action"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    LEDGER_UNAVAILABLE = "ledger_unavailable"
