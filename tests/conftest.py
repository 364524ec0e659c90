"""Pytest configuration and fixtures."""

import random
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlinks.common.logging_config import setup_logging
from shortlinks.service import URLShortenerService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.store.memory import InMemoryURLStore
from shortlinks.store.snapshot import SnapshotFile
from web_app import create_app


START = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    """Controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def short_code_generator(logger):
    """Create short code generator with a seeded random source."""
    return ShortCodeGenerator(default_length=6, rng=random.Random(1234), logger=logger)


@pytest.fixture
def store(clock, logger) -> InMemoryURLStore:
    """In-memory store without snapshot persistence."""
    return InMemoryURLStore(snapshot=None, clock=clock, logger=logger)


@pytest.fixture
def snapshot_path(tmp_path):
    return str(tmp_path / "data" / "urls.json")


@pytest.fixture
def snapshot_store(snapshot_path, clock, logger) -> InMemoryURLStore:
    """In-memory store persisted to a temporary snapshot file."""
    return InMemoryURLStore(
        snapshot=SnapshotFile(snapshot_path, timeout_seconds=5.0, logger=logger),
        clock=clock,
        logger=logger,
    )


@pytest.fixture
def service(store, short_code_generator, clock, logger) -> URLShortenerService:
    """Create service instance."""
    return URLShortenerService(
        store=store,
        short_code_generator=short_code_generator,
        base_url="http://testserver",
        logger=logger,
        clock=clock,
    )


@pytest.fixture
def config():
    return Config(base_url="http://testserver", snapshot_enabled=False)


@pytest.fixture
def app(service, config, logger):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config, logger=logger)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
