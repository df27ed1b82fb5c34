"""Root pytest configuration for all tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_prosemark_logger():
    """Drop handlers installed by CLI invocations so later tests never log to closed streams."""
    yield
    app_logger = logging.getLogger("prosemark")
    for handler in list(app_logger.handlers):
        handler.close()
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
