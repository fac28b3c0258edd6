"""Parlor configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ParlorSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PARLOR_", frozen=True)

    lobby_timeout_seconds: float = Field(default=60, gt=0)
    elimination_turn_timeout_seconds: float = Field(default=90, gt=0)
    connect_four_turn_timeout_seconds: float = Field(default=60, gt=0)
    blackjack_turn_timeout_seconds: float = Field(default=120, gt=0)
    poker_confirm_timeout_seconds: float = Field(default=30, gt=0)
    poker_round_timeout_seconds: float = Field(default=60, gt=0)

    starting_balance: int = Field(default=100, ge=0)
    max_sessions: int = Field(default=1000, ge=1)
    log_dir: str | None = None
