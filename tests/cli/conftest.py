import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures loguru; put the default stderr sink back afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)
