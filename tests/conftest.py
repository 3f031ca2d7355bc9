"""Pytest configuration and shared fixtures for the card scanner tests."""
import logging
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from card_scanner.entities import Frame, NormalizedRegion
from tests.fakes import blank_image

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)


@pytest.fixture
def frame():
    """A small blank frame for fake-provider tests."""
    return Frame.from_image(blank_image(200, 100))


@pytest.fixture
def card_region():
    return NormalizedRegion(0.1, 0.1, 0.6, 0.4)


@pytest.fixture
def text_region():
    return NormalizedRegion(0.2, 0.3, 0.3, 0.05)


@pytest.fixture(autouse=True)
def reset_scanner_logger():
    """Undo any handler installed by setup_logging during a test."""
    yield
    logger = logging.getLogger('card_scanner')
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
