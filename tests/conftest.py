"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolation of cached pagination settings
    - Database Fixtures: SQLAlchemy engine on in-memory SQLite
    - Data Fixtures: in-memory record sets
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from keyset_pager.core.settings import clear_settings_cache

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Drop cached settings so env overrides in one test don't leak."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite.

    Yields:
        Async SQLAlchemy engine connected to in-memory SQLite.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    try:
        yield engine
    finally:
        await engine.dispose()


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def five_records() -> list[dict[str, int]]:
    """Records with ids 1..5, as mappings."""
    return [{"id": i} for i in range(1, 6)]
