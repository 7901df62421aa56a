"""Shared pytest fixtures for Humane Logistics tests.

Fixture summary
---------------
memory_repo      Empty in-memory repository.
sql_engine       Async SQLite engine on a shared in-memory database.
sql_repo         SQL repository (partition ``"News"``) with the schema created.
enrichment       Enrichment step with deterministic scorer and classifier doubles.

No test needs network access or a database server: HTTP is mocked with
respx and the SQL adapter runs against aiosqlite.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set before application modules are imported so Settings() never picks up a
# developer's real database or API key.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "OPENROUTER_API_KEY": "",
    "LOG_LEVEL": "WARNING",
}

for _key, _value in _TEST_ENV_DEFAULTS.items():
    os.environ[_key] = _value

from humane_logistics.config.settings import get_settings  # noqa: E402
from humane_logistics.enrichment.service import ContentEnrichmentService  # noqa: E402
from humane_logistics.storage.memory import InMemoryMediaRepository  # noqa: E402
from humane_logistics.storage.sql import SqlMediaRepository  # noqa: E402
from tests.doubles import FixedClassifier, FixedScorer  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def memory_repo() -> InMemoryMediaRepository:
    return InMemoryMediaRepository()


@pytest_asyncio.fixture
async def sql_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def sql_repo(sql_engine: AsyncEngine) -> SqlMediaRepository:
    repo = SqlMediaRepository(sql_engine, partition="News")
    await repo.create_schema()
    return repo


@pytest.fixture
def enrichment() -> ContentEnrichmentService:
    return ContentEnrichmentService(scorer=FixedScorer(0.5), classifier=FixedClassifier())
