import pytest

from config_service.config import Settings
from config_service.core.logging.builder import setup_logging, stop_queue_logging


@pytest.fixture(autouse=True)
def restore_test_logging():
    """These tests reconfigure global logging; put the suite's configuration back afterwards."""
    yield
    stop_queue_logging()
    setup_logging(Settings(ENV="testing", LOG_FORMAT="text", LOG_LEVEL="DEBUG"))
