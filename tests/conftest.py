import sqlite3

import pytest
import pytest_asyncio

from scriptdesk.config import Settings
from scriptdesk.database import StorageEngine
from scriptdesk.services.repository import ScriptRepository


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "scripts.db"


@pytest.fixture
def db_url(db_path):
    return f"sqlite+aiosqlite:///{db_path}"


@pytest.fixture
def make_legacy_db(db_path):
    """Create a scripts table from before titles existed, optionally with rows."""
    def _make(rows=()):
        conn = sqlite3.connect(db_path)
        conn.execute(
            "CREATE TABLE scripts ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "english_text TEXT, "
            "japanese_text TEXT)"
        )
        conn.executemany(
            "INSERT INTO scripts (english_text, japanese_text) VALUES (?, ?)", rows
        )
        conn.commit()
        conn.close()
        return db_path
    return _make


@pytest_asyncio.fixture
async def storage(db_url):
    engine = StorageEngine(db_url)
    await engine.open()
    yield engine
    await engine.close()


@pytest_asyncio.fixture
async def repository(storage):
    return ScriptRepository(storage)


@pytest.fixture
def settings(db_url):
    return Settings(DATABASE_URL=db_url, _env_file=None)
