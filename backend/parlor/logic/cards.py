"""
Playing cards: 52-card deck construction, shuffling, dealing and blackjack hand values.

Cards are frozen models. A deck is a plain list whose *end* is the top, so
dealing is ``list.pop()``. Session state stores decks and hands as tuples;
transitions thaw them into lists, deal, and freeze the result again.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from pydantic import BaseModel, ConfigDict

from parlor.logic.rng import fisher_yates_shuffle

if TYPE_CHECKING:
    import random
    from collections.abc import Iterable

DECK_SIZE = 52
BLACKJACK_TOTAL = 21
ACE_HIGH_VALUE = 11
ACE_ADJUSTMENT = 10


class Suit(str, Enum):
    SPADES = "s"
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]


class Rank(str, Enum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "T"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    @property
    def value_points(self) -> int:
        """Blackjack points before ace adjustment."""
        if self is Rank.ACE:
            return ACE_HIGH_VALUE
        if self in (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        return int(self.value)

    @property
    def label(self) -> str:
        return "10" if self is Rank.TEN else self.value


_SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
}


class Card(BaseModel):
    """A single playing card."""

    model_config = ConfigDict(frozen=True)

    suit: Suit
    rank: Rank

    @property
    def value(self) -> int:
        return self.rank.value_points

    @property
    def glyph(self) -> str:
        return f"{self.rank.label}{self.suit.symbol}"

    @property
    def code(self) -> str:
        """Two-character code such as ``Th`` or ``As``."""
        return f"{self.rank.value}{self.suit.value}"

    @classmethod
    def parse(cls, code: str) -> Card:
        """Build a card from its two-character code (``"Kd"``)."""
        if len(code) != 2:
            raise ValueError(f"Card code must be two characters, got {code!r}")
        return cls(rank=Rank(code[0].upper()), suit=Suit(code[1].lower()))

    def __str__(self) -> str:
        return self.glyph


class HandValue(NamedTuple):
    value: int
    is_soft: bool


def create_deck() -> list[Card]:
    """Return a fresh, ordered 52-card deck."""
    return [Card(suit=suit, rank=rank) for suit in Suit for rank in Rank]


def shuffle(deck: list[Card], rng: random.Random) -> None:
    fisher_yates_shuffle(deck, rng)


def shuffled_deck(rng: random.Random) -> list[Card]:
    """Convenience for transitions: a new deck already shuffled."""
    deck = create_deck()
    shuffle(deck, rng)
    return deck


def deal(deck: list[Card]) -> Card | None:
    """Remove and return the top card, or None when the deck is exhausted."""
    if not deck:
        return None
    return deck.pop()


def hand_value(cards: Iterable[Card]) -> HandValue:
    """Blackjack total, counting aces as 1 while the hand would bust.

    ``is_soft`` tells whether an ace is still counted as 11 in the result.
    """
    total = 0
    high_aces = 0
    for card in cards:
        total += card.value
        if card.rank is Rank.ACE:
            high_aces += 1
    while total > BLACKJACK_TOTAL and high_aces:
        total -= ACE_ADJUSTMENT
        high_aces -= 1
    return HandValue(value=total, is_soft=high_aces > 0)


def is_blackjack(cards: tuple[Card, ...] | list[Card]) -> bool:
    """A natural: exactly two cards totalling 21."""
    return len(cards) == 2 and hand_value(cards).value == BLACKJACK_TOTAL


def format_hand(cards: Iterable[Card], *, hide_first: bool = False) -> str:
    glyphs = [card.glyph for card in cards]
    if hide_first and glyphs:
        glyphs[0] = "❓"
    return " ".join(glyphs)
