"""
Shared fixtures for integration tests against PostgreSQL.
"""

import pytest

from tests.pg import require_database


@pytest.fixture(scope="module")
def database_url() -> str:
    """Database URL for a reachable PostgreSQL, or skip the module."""
    return require_database()
