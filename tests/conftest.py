"""
Shared fixtures for dashboard tests
"""

import pytest

from src.services.shared_services import reset_services


@pytest.fixture(autouse=True)
def fresh_services():
    """Shared singletons must not leak between tests"""
    reset_services()
    yield
    reset_services()
