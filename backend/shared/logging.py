"""structlog setup shared by the parlor service and its test suite.

Every record runs through one processor chain: the bound session context
(session id, variant, acting player) is merged in and game enums are logged
as their plain values. ``setup_logging`` attaches the output handlers for a
running bot; the tests call ``configure_structlog`` alone so records reach
pytest's caplog.

Environment variables:
- LOG_FORMAT: "json" for log aggregation, "console" or unset for a terminal.
- LOG_LEVEL: a stdlib level name, INFO when unset.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

# keys owned by the session currently being handled
SESSION_KEYS = ("session_id", "variant", "player_id")

LOG_FILE_PREFIX = "parlor"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, frozenset, set)):
        return [_plain(item) for item in value]
    return value


def _plain_game_values(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Log variants, phases, results and error codes by value, also inside lists."""
    for key, value in event_dict.items():
        event_dict[key] = _plain(value)
    return event_dict


def configure_structlog() -> None:
    """Route structlog through stdlib logging with the parlor processor chain."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _plain_game_values,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def bind_session(session_id: str, **context: object) -> None:
    """Make ``session_id`` the session every following record is about.

    Session keys bound for an earlier session are dropped first, so a
    player id never carries over to a session that player is not acting in.
    None values are skipped.
    """
    structlog.contextvars.unbind_contextvars(*SESSION_KEYS)
    structlog.contextvars.bind_contextvars(
        session_id=session_id,
        **{key: value for key, value in context.items() if value is not None},
    )


def _is_test() -> bool:
    return "pytest" in sys.modules


def _log_format_is_json() -> bool:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format not in ("json", "console", ""):
        raise ValueError(f"Invalid LOG_FORMAT={log_format!r}. Must be 'json', 'console', or unset.")
    return log_format == "json"


def _log_level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    if name not in _LEVELS:
        raise ValueError(f"Invalid LOG_LEVEL={name!r}. Must be one of {', '.join(_LEVELS)}.")
    return logging.getLevelName(name)


def _handler(handler: logging.Handler, *, json_mode: bool, colors: bool = False) -> logging.Handler:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        ),
    )
    return handler


def setup_logging(log_dir: Path | str | None = None, level: int | None = None) -> Path | None:
    """Configure structlog and send records to stdout, plus a file when asked.

    With ``log_dir`` a ``parlor-<utc time>.log`` file is opened there and its
    path returned. Test runs never write log files.
    """
    json_mode = _log_format_is_json()
    configure_structlog()

    root_logger = logging.getLogger()
    root_logger.setLevel(_log_level_from_env() if level is None else level)
    root_logger.handlers.clear()
    root_logger.addHandler(_handler(logging.StreamHandler(sys.stdout), json_mode=json_mode, colors=sys.stdout.isatty()))

    if log_dir is None or _is_test():
        return None

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f"{LOG_FILE_PREFIX}-{datetime.now(tz=UTC):%Y-%m-%d_%H-%M-%S}.log"
    root_logger.addHandler(_handler(logging.FileHandler(log_file), json_mode=json_mode))
    return log_file
