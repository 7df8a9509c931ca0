# string key/value storage, the terminal counterpart of a browser's localStorage
from typing import Optional

from storage.database import connect


async def get_item(key: str) -> Optional[str]:
    async with connect() as conn:
        cur = await conn.execute("SELECT value FROM local_store WHERE key = ?;", (key,))
        row = await cur.fetchone()
        await cur.close()
    return row[0] if row else None


async def set_item(key: str, value: str) -> None:
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO local_store(key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE
                SET value = excluded.value, updated_at = excluded.updated_at;
            """,
            (key, value),
        )
        await conn.commit()


async def remove_item(*keys: str) -> None:
    """Remove every given key; missing keys are ignored."""
    if not keys:
        return
    async with connect() as conn:
        await conn.executemany(
            "DELETE FROM local_store WHERE key = ?;", [(k,) for k in keys]
        )
        await conn.commit()
