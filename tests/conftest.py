"""pytest configuration and fixtures."""

import logging

import pytest

from mutualmatch.config import StoreConfig, reset_settings
from mutualmatch.services.match_service import MatchService
from mutualmatch.store.match_store import MatchStore
from mutualmatch.utils.cache import RedisClient
from mutualmatch.utils.logging import LIBRARY_LOGGER


@pytest.fixture(autouse=True)
def set_test_env(monkeypatch):
    """Run every test against a clean, local-only environment."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("DEBUG", "false")
    for key in ("REDIS_URL", "SENTRY_DSN", "STORE_ENDPOINT", "STORE_USERNAME", "STORE_PASSWORD"):
        monkeypatch.delenv(key, raising=False)

    reset_settings()
    RedisClient.reset()
    yield
    reset_settings()
    RedisClient.reset()


@pytest.fixture
def library_logger():
    """The mutualmatch stdlib logger, restored to its pristine state afterwards."""
    library_logger = logging.getLogger(LIBRARY_LOGGER)
    handlers = list(library_logger.handlers)
    level, propagate = library_logger.level, library_logger.propagate
    yield library_logger
    library_logger.handlers = handlers
    library_logger.setLevel(level)
    library_logger.propagate = propagate


@pytest.fixture
def store_config(tmp_path):
    """Store config pointing at a throwaway SQLite file."""
    return StoreConfig(endpoint=f"sqlite:///{tmp_path / 'matches.db'}", timeout=5.0)


@pytest.fixture
def store(store_config):
    """A match store with its tables created."""
    match_store = MatchStore(store_config)
    match_store.create_tables()
    yield match_store
    match_store.dispose()


@pytest.fixture
def service(store):
    """A match service over the throwaway store."""
    return MatchService(store)


@pytest.fixture
def alice():
    return "user-alice"


@pytest.fixture
def bob():
    return "user-bob"
