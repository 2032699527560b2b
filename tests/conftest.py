"""Pytest configuration and fixtures."""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlinks.common.logging_config import setup_logging
from shortlinks.service import ShortlinkService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.store.memory import InMemoryRegistryStore
from shortlinks_web import create_app


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ScriptedGenerator(ShortCodeGenerator):
    """Generator that replays fixed codes before falling back to random ones."""

    def __init__(self, codes, default_length: int = 6):
        super().__init__(default_length=default_length)
        self.codes = list(codes)
        self.calls = []

    def generate(self, length=None):
        self.calls.append(length)
        if self.codes:
            return self.codes.pop(0)
        return super().generate(length)


@pytest.fixture(autouse=True)
def reset_shortlinks_logger():
    """Undo handler and level changes made by setup_logging."""
    yield
    root = logging.getLogger("shortlinks")
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def store(short_code_generator, clock):
    """Registry store driven by the fake clock."""
    return InMemoryRegistryStore(
        short_code_generator=short_code_generator,
        clock=clock,
    )


@pytest.fixture
def service(store):
    """Create service instance."""
    return ShortlinkService(store=store)


@pytest.fixture
def config():
    return Config(base_url="http://testserver")


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(service=service, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
