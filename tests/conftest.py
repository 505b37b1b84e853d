"""Global pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import os
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).parent.parent


# =============================================================================
# Environment
# =============================================================================

# Must be set before dscommerce.config caches its first load
os.environ.setdefault("DSCOMMERCE_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DSCOMMERCE_JWT_SECRET", "test-secret-with-enough-length")
os.environ["DSCOMMERCE_BCRYPT_ROUNDS"] = "4"
os.environ.pop("SENTRY_DSN", None)


# =============================================================================
# Markers
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory so `-m unit` and `-m integration` work."""
    for item in items:
        path = str(item.fspath)
        if f"{os.sep}integration{os.sep}" in path:
            item.add_marker(pytest.mark.integration)
        elif f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return PROJECT_ROOT
