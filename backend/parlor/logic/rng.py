"""
Random sources for shuffling decks, turn orders and detonators.

Every session owns one ``random.Random`` created from a hex seed. The session
manager generates a fresh cryptographic seed when none is supplied and logs
it with the session, so a seed from the logs replays the random decisions.
"""

from __future__ import annotations

import random
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import MutableSequence

SEED_BYTES = 32


def validate_seed_hex(seed_hex: str) -> None:
    """Check a seed is a hex string of the expected length.

    Raises TypeError for non-string input, ValueError for a malformed string.
    """
    if not isinstance(seed_hex, str):
        raise TypeError(f"Seed must be a string, got {type(seed_hex).__name__}")
    expected_length = SEED_BYTES * 2
    if len(seed_hex) != expected_length:
        raise ValueError(f"Seed must be exactly {expected_length} hex characters, got {len(seed_hex)}")
    try:
        bytes.fromhex(seed_hex)
    except ValueError:
        raise ValueError("Seed contains invalid hex characters") from None


def generate_seed() -> str:
    return secrets.token_bytes(SEED_BYTES).hex()


def create_rng(seed_hex: str) -> random.Random:
    validate_seed_hex(seed_hex)
    return random.Random(int(seed_hex, 16))  # noqa: S311


def fisher_yates_shuffle[T](items: MutableSequence[T], rng: random.Random) -> None:
    """Shuffle in place: for i from n-1 down to 1, swap items[i] with items[randint(0, i)]."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
