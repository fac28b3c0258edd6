"""
Five-card poker hand evaluation for the poker duel, backed by treys lookup tables.

treys scores hands from 1 (royal flush) up to 7462 (worst high card), so the
score is flipped into a strength where higher is better.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from treys import Card as TreysCard
from treys import Evaluator

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parlor.logic.cards import Card

HAND_SIZE = 5
_WORST_SCORE = 7462

_evaluator = Evaluator()


class HandStrength(NamedTuple):
    strength: int
    rank_name: str


def _to_treys(cards: Sequence[Card]) -> list[int]:
    return [TreysCard.new(card.code) for card in cards]


def evaluate_hand(cards: Sequence[Card]) -> HandStrength:
    """Score exactly five cards; higher strength beats lower."""
    if len(cards) != HAND_SIZE:
        raise ValueError(f"Expected {HAND_SIZE} cards, got {len(cards)}")
    encoded = _to_treys(cards)
    score = _evaluator.evaluate(encoded[:2], encoded[2:])
    rank_name = _evaluator.class_to_string(_evaluator.get_rank_class(score))
    return HandStrength(strength=_WORST_SCORE + 1 - score, rank_name=rank_name)


def compare_hands(first: Sequence[Card], second: Sequence[Card]) -> int:
    """Return 1 if ``first`` wins, -1 if ``second`` wins, 0 on a tie."""
    a = evaluate_hand(first).strength
    b = evaluate_hand(second).strength
    if a > b:
        return 1
    if a < b:
        return -1
    return 0
