import pytest

from command_processor.config.schemas import LoggingConfig
from command_processor.infrastructure.logging.logger import setup_logging
from command_processor.infrastructure.registry.command_registry import reset_registry


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Route structlog through stdlib logging so caplog sees records."""
    setup_logging(LoggingConfig(level="DEBUG"))


@pytest.fixture(autouse=True)
def clean_registry():
    """Each test starts without a process-wide registry."""
    reset_registry()
    yield
    reset_registry()
