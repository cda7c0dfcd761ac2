"""Root test configuration."""

import logging

import pytest
import structlog

from ravegraph.db.models import ServiceModel
from ravegraph.db.session import Database


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
async def database(tmp_path):
    """File-backed SQLite store; concurrent sessions need a real file, not :memory:."""
    db = Database.from_url(f"sqlite+aiosqlite:///{tmp_path / 'ravegraph.db'}")
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def seed(database):
    """Insert ORM rows directly, for tables the repositories only read."""

    async def add_rows(*rows) -> None:
        async with database.transaction() as session:
            session.add_all(rows)

    return add_rows


@pytest.fixture
async def services(seed):
    """Two registered services, the targets for evidence and claims."""
    await seed(
        ServiceModel(id="checkout-api", name="Checkout API", tier="critical"),
        ServiceModel(id="search-api", name="Search API", tier="standard"),
    )
    return ["checkout-api", "search-api"]
