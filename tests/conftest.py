from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture(autouse=True)
def restore_fluentdb_logger() -> Generator[None, None, None]:
    """Undo ``configure_logging`` so caplog keeps seeing library records."""
    logger = logging.getLogger("fluentdb")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
