"""Root conftest.py for the b2bvendas test suite.

Project-wide fixtures: settings cache, request context and loguru state are
reset around every test so no configuration leaks between tests.
"""

from collections.abc import Generator

import pytest
from loguru import logger

from b2bvendas.core.config import get_settings
from b2bvendas.core.context import RequestContext
from b2bvendas.core.logging import _state


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Start and finish every test with a fresh settings instance."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Keep correlation and user ids from leaking between tests."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[None]:
    """Mark logging as configured so app creation adds no stdout handlers."""
    logger.remove()
    _state.configured = True
    yield
    logger.remove()
