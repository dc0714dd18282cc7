"""
Pytest configuration and fixtures for Modwarden tests.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from modwarden.database.db_connection import ConnectionManager  # noqa: E402
from modwarden.database.db_schema import SchemaManager  # noqa: E402


class FakeClock:
    """Manually advanced unix clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    """Open a fresh SQLite store with the schema applied."""
    manager = ConnectionManager()
    await manager.open(tmp_path / "test.db")
    await SchemaManager.initialize_schema(manager.connection)
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def second_store(store):
    """A second connection to the same database file, with its own writer slot."""
    manager = ConnectionManager()
    await manager.open(store.path)
    yield manager
    await manager.close()
