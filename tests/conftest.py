"""Shared pytest fixtures and configuration."""

import pytest

from examcell.config import Settings
from examcell.state_store import StateStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def settings() -> Settings:
    """Settings with a fixed key and cheap bcrypt rounds."""
    return Settings(
        database_path=":memory:",
        jwt_secret_key="test-secret-key",
        bcrypt_rounds=4,
        access_token_expire_minutes=30,
        _env_file=None,
    )


@pytest.fixture
def store():
    """Create an in-memory StateStore."""
    s = StateStore(":memory:")
    yield s
    s.close()
