# key-value records in the local storage file, modelled on browser localStorage
from __future__ import annotations

from typing import List, Optional

from db.database import connect


class LocalStorage:
    """
    String records keyed by name. Values are stored verbatim; callers are
    responsible for (de)serializing and for tolerating garbage on read.
    """

    async def get_item(self, key: str) -> Optional[str]:
        async with connect() as conn:
            cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        async with connect() as conn:
            await conn.execute(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (key, value),
            )
            await conn.commit()

    async def remove_item(self, key: str) -> None:
        async with connect() as conn:
            await conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
            await conn.commit()

    async def keys(self) -> List[str]:
        async with connect() as conn:
            cur = await conn.execute("SELECT key FROM kv ORDER BY key;")
            rows = await cur.fetchall()
            await cur.close()
        return [row[0] for row in rows]
