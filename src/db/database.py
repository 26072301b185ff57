# manages the connection to the local storage file, internal to db package
import asyncio
import os.path
from contextlib import asynccontextmanager
from sqlite3 import Row

import aiosqlite

from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = config.STORAGE_PATH

_KV_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_initialized = False
_init_lock = asyncio.Lock()


async def _init_db(conn: aiosqlite.Connection) -> None:
    _logger.info(f"Initializing local storage at {DB_PATH}...")
    await conn.executescript(_KV_SCHEMA)
    await conn.commit()


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection to local storage.

    Creates the parent directory and the key-value table on first use.
    """
    global _initialized
    parent = os.path.dirname(DB_PATH)
    if parent and not os.path.isdir(parent):
        os.makedirs(parent, exist_ok=True)

    conn = await aiosqlite.connect(DB_PATH)
    conn.row_factory = Row
    try:
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    await _init_db(conn)
                    _initialized = True
        yield conn
    finally:
        await conn.close()
