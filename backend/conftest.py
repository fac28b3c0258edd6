"""Root conftest: test environment, and structlog records delivered to caplog."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from shared.logging import configure_structlog

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

# no handlers here: pytest's caplog handler receives the stdlib records
configure_structlog()


@pytest.fixture(autouse=True)
def _fresh_session_context():
    """Each test starts without a session bound by the one before it."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
