"""
Seat assembly: turn the humans named in a session config into player slots
and fill the remaining seats with CPU players.
"""

from parlor.logic.exceptions import UnsupportedSettingsError
from parlor.logic.state import PlayerSlot

CPU_ID_PREFIX = "CPU_"


def cpu_player_id(number: int) -> str:
    return f"{CPU_ID_PREFIX}{number}"


def is_cpu_id(player_id: str) -> bool:
    return player_id.startswith(CPU_ID_PREFIX)


def fill_seats(humans: list[tuple[str, str]], total_seats: int) -> tuple[PlayerSlot, ...]:
    """
    Build ``total_seats`` slots: the given (player_id, label) humans first, in
    the order given, then ``CPU 1``, ``CPU 2``... for the rest.

    Order indices are assigned here once and never change afterwards.
    """
    if not humans or len(humans) > total_seats:
        raise UnsupportedSettingsError(f"Expected 1 to {total_seats} human players, got {len(humans)}")
    ids = [player_id.strip() for player_id, _ in humans]
    if any(not player_id for player_id in ids):
        raise UnsupportedSettingsError("Player ids must not be empty")
    if len(ids) != len(set(ids)):
        raise UnsupportedSettingsError("Player ids must be unique")
    if any(is_cpu_id(player_id) for player_id in ids):
        raise UnsupportedSettingsError(f"Player ids must not start with {CPU_ID_PREFIX!r}")

    slots = [
        PlayerSlot(player_id=player_id, label=label or player_id, order=order)
        for order, (player_id, (_, label)) in enumerate(zip(ids, humans, strict=True))
    ]
    for number in range(1, total_seats - len(humans) + 1):
        slots.append(
            PlayerSlot(
                player_id=cpu_player_id(number),
                label=f"CPU {number}",
                order=len(slots),
                is_cpu=True,
            ),
        )
    return tuple(slots)
