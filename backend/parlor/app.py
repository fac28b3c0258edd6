from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from parlor.economy.memory import InMemoryLedger
from parlor.messaging.render import NullRenderer
from parlor.session.manager import SessionManager
from parlor.settings import ParlorSettings
from shared.logging import setup_logging

if TYPE_CHECKING:
    from parlor.economy.ledger import Ledger
    from parlor.messaging.render import Renderer

logger = structlog.get_logger()


def build_session_manager(
    settings: ParlorSettings | None = None,
    *,
    ledger: Ledger | None = None,
    renderer: Renderer | None = None,
) -> SessionManager:
    """Wire settings, logging, ledger and renderer into a ready SessionManager.

    The chat front end passes its own ledger and renderer; the defaults are an
    in-memory ledger and a renderer that drops every view.
    """
    if settings is None:
        settings = ParlorSettings()

    log_file = setup_logging(settings.log_dir)

    if ledger is None:
        ledger = InMemoryLedger(starting_balance=settings.starting_balance)
    if renderer is None:
        renderer = NullRenderer()

    logger.info("parlor ready", log_file=str(log_file) if log_file else None, max_sessions=settings.max_sessions)
    return SessionManager(ledger, settings=settings, renderer=renderer)
