"""
Tests for the Database handle: lazy connect, caching, and failure recovery.
"""

import pytest
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from app.core.exceptions import DatabaseConnectionError
from app.db.session import Database

SQLITE_MEMORY = "sqlite+aiosqlite:///:memory:"


@pytest.mark.asyncio
async def test_missing_url_is_a_connection_error():
    database = Database("")

    with pytest.raises(DatabaseConnectionError) as exc_info:
        await database.connect()

    assert exc_info.value.status_code == 503
    assert not database.connected


@pytest.mark.asyncio
async def test_connect_is_cached():
    database = Database(SQLITE_MEMORY, poolclass=StaticPool)

    engine = await database.connect()
    assert database.connected
    assert await database.connect() is engine

    session = await database.session()
    async with session:
        assert (await session.execute(text("SELECT 1"))).scalar() == 1

    await database.close()
    assert not database.connected


@pytest.mark.asyncio
async def test_failed_connect_is_not_cached(tmp_path):
    # The parent directory does not exist, so SQLite cannot open the file
    database = Database(f"sqlite+aiosqlite:///{tmp_path}/missing/dir/events.db")

    with pytest.raises(DatabaseConnectionError):
        await database.connect()
    assert not database.connected

    (tmp_path / "missing" / "dir").mkdir(parents=True)
    await database.connect()
    assert database.connected
    await database.close()
