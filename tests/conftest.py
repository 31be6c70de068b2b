import pytest
from loguru import logger

from flight_manager import FlightRegistry


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    # main() points loguru at the captured stderr and enables the module
    logger.remove()
    logger.disable("flight_manager")


@pytest.fixture
def registry() -> FlightRegistry:
    return FlightRegistry()
