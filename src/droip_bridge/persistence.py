"""SQLite persistence for symbols, pages, and site-wide data."""

import asyncio
import json
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

logger = logging.getLogger("droip_bridge.persistence")


def get_default_db_path() -> str:
    """Get the default database path, respecting DROIP_BRIDGE_DATA_DIR."""
    data_dir = os.environ.get("DROIP_BRIDGE_DATA_DIR")
    if data_dir:
        return str(Path(data_dir) / "symbols.db")
    return os.path.expanduser("~/.droip-bridge/symbols.db")


# Keys used in the global_data table
GLOBAL_STYLE_BLOCKS_KEY = "global_style_blocks"
USER_SAVED_DATA_KEY = "user_saved_data"
USER_CUSTOM_FONTS_KEY = "user_custom_fonts"
USER_CONTROLLER_KEY = "user_controller"

LISTED_PAGE_STATUSES = ("publish", "draft", "private")
MAX_LISTED_PAGES = 100

SCHEMA = """
CREATE TABLE IF NOT EXISTS symbols (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT 'other',
    set_as TEXT NOT NULL DEFAULT '',
    symbol_data JSON NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_symbols_set_as ON symbols(set_as);

CREATE TABLE IF NOT EXISTS pages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    slug TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'publish',
    post_type TEXT NOT NULL DEFAULT 'page',
    editor_mode TEXT,
    blocks JSON,
    style_blocks JSON,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_pages_type ON pages(post_type);

CREATE TABLE IF NOT EXISTS global_data (
    key TEXT PRIMARY KEY,
    value JSON NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _loads(value: str | None) -> Any:
    return json.loads(value) if value is not None else None


class SymbolStore:
    """Async SQLite storage for symbols and page data.

    Stands in for Droip's post storage: symbols are keyed by an integer ID,
    and the `setAs` role is kept single-owner at write time by `claim_role`.
    Concurrent writers to the same symbol are last-write-wins.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = Path(os.path.expanduser(db_path or get_default_db_path()))
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._max_pool_size = 5

    @asynccontextmanager
    async def _connection(self, *, commit: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """Get a database connection with automatic cleanup and optional commit.

        Args:
            commit: If True, commit on success, rollback on error.
        """
        conn = await self._acquire_conn()
        try:
            yield conn
            if commit:
                await conn.commit()
                logger.debug("Transaction committed")
        except Exception as e:
            if commit:
                await conn.rollback()
                logger.warning(f"Transaction rolled back due to error: {e}")
            raise
        finally:
            await self._release_conn(conn)

    async def _acquire_conn(self) -> aiosqlite.Connection:
        """Acquire a connection from pool or create new one."""
        async with self._pool_lock:
            if self._pool:
                return self._pool.pop()

        conn = await aiosqlite.connect(self.db_path)
        conn.row_factory = aiosqlite.Row

        async with self._init_lock:
            if not self._initialized:
                logger.info(f"Initializing database at {self.db_path}")
                await conn.executescript(SCHEMA)
                await conn.commit()
                self._initialized = True

        return conn

    async def _release_conn(self, conn: aiosqlite.Connection) -> None:
        """Return connection to pool or close if pool is full."""
        async with self._pool_lock:
            if len(self._pool) < self._max_pool_size:
                self._pool.append(conn)
                return

        await conn.close()

    async def close_pool(self) -> None:
        """Close all pooled connections. Call on shutdown."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            count = len(self._pool)
            self._pool.clear()
            logger.info(f"Closed {count} pooled connections")

    # ── Symbols ─────────────────────────────────────────────────────────

    @staticmethod
    def _row_to_symbol(row: aiosqlite.Row) -> dict[str, Any]:
        return {"id": row["id"], "symbolData": json.loads(row["symbol_data"])}

    async def save(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        """Insert a new symbol from a `{"symbolData": {...}}` payload.

        Returns `{"id", "symbolData", "type"}`, or None if the payload carries
        no symbolData object.
        """
        symbol_data = payload.get("symbolData") if isinstance(payload, dict) else None
        if not isinstance(symbol_data, dict):
            logger.warning("Rejected save: payload has no symbolData object")
            return None

        now = _now()
        async with self._connection(commit=True) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO symbols (name, category, set_as, symbol_data, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(symbol_data.get("name", "")),
                    str(symbol_data.get("category") or "other"),
                    str(symbol_data.get("setAs") or ""),
                    json.dumps(symbol_data),
                    now,
                    now,
                ),
            )
            symbol_id = cursor.lastrowid

        logger.info(f"Saved symbol {symbol_id}: {symbol_data.get('name')}")
        return {"id": symbol_id, "symbolData": symbol_data, "type": "symbol"}

    async def get_symbol(self, symbol_id: int) -> dict[str, Any] | None:
        async with self._connection() as conn:
            cursor = await conn.execute("SELECT * FROM symbols WHERE id = ?", (symbol_id,))
            row = await cursor.fetchone()
            return self._row_to_symbol(row) if row else None

    async def list_symbols(self) -> list[dict[str, Any]]:
        async with self._connection() as conn:
            cursor = await conn.execute("SELECT * FROM symbols ORDER BY id")
            rows = await cursor.fetchall()
            return [self._row_to_symbol(row) for row in rows]

    async def update_symbol(self, symbol_id: int, symbol_data: dict[str, Any]) -> bool:
        """Replace a symbol's data. Returns False if the symbol does not exist."""
        async with self._connection(commit=True) as conn:
            cursor = await conn.execute(
                """
                UPDATE symbols SET name = ?, category = ?, set_as = ?, symbol_data = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    str(symbol_data.get("name", "")),
                    str(symbol_data.get("category") or "other"),
                    str(symbol_data.get("setAs") or ""),
                    json.dumps(symbol_data),
                    _now(),
                    symbol_id,
                ),
            )
            updated = cursor.rowcount > 0

        if updated:
            logger.info(f"Updated symbol {symbol_id}")
        return updated

    async def claim_role(self, symbol_id: int, role: str) -> list[int]:
        """Clear `role` from every other symbol holding it.

        Only one symbol may be the site header (or footer). Returns the IDs
        of the symbols that lost the role.
        """
        if not role:
            return []

        cleared = []
        async with self._connection(commit=True) as conn:
            cursor = await conn.execute(
                "SELECT * FROM symbols WHERE set_as = ? AND id != ?", (role, symbol_id)
            )
            for row in await cursor.fetchall():
                symbol_data = json.loads(row["symbol_data"])
                symbol_data["setAs"] = ""
                await conn.execute(
                    "UPDATE symbols SET set_as = '', symbol_data = ?, updated_at = ? WHERE id = ?",
                    (json.dumps(symbol_data), _now(), row["id"]),
                )
                cleared.append(row["id"])

        if cleared:
            logger.info(f"Role '{role}' claimed by symbol {symbol_id}; cleared from {cleared}")
        return cleared

    async def role_holder(self, role: str) -> int | None:
        """Return the ID of the symbol holding `role`, if any."""
        if not role:
            return None
        async with self._connection() as conn:
            cursor = await conn.execute(
                "SELECT id FROM symbols WHERE set_as = ? ORDER BY id LIMIT 1", (role,)
            )
            row = await cursor.fetchone()
            return row["id"] if row else None

    async def delete_symbol(self, symbol_id: int) -> bool:
        async with self._connection(commit=True) as conn:
            cursor = await conn.execute("DELETE FROM symbols WHERE id = ?", (symbol_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted symbol {symbol_id}")
        return deleted

    # ── Pages ───────────────────────────────────────────────────────────

    @staticmethod
    def _row_to_page(row: aiosqlite.Row) -> dict[str, Any]:
        return {
            "id": row["id"],
            "title": row["title"],
            "slug": row["slug"],
            "status": row["status"],
            "post_type": row["post_type"],
            "editor_mode": row["editor_mode"],
            "blocks": _loads(row["blocks"]),
            "style_blocks": _loads(row["style_blocks"]),
        }

    async def add_page(
        self,
        title: str,
        slug: str = "",
        status: str = "publish",
        post_type: str = "page",
        editor_mode: str | None = None,
        blocks: dict | None = None,
        style_blocks: dict | None = None,
    ) -> int:
        """Insert a page and return its ID."""
        async with self._connection(commit=True) as conn:
            cursor = await conn.execute(
                """
                INSERT INTO pages (title, slug, status, post_type, editor_mode, blocks, style_blocks, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    slug,
                    status,
                    post_type,
                    editor_mode,
                    json.dumps(blocks) if blocks is not None else None,
                    json.dumps(style_blocks) if style_blocks is not None else None,
                    _now(),
                ),
            )
            return cursor.lastrowid

    async def get_page(self, page_id: int) -> dict[str, Any] | None:
        async with self._connection() as conn:
            cursor = await conn.execute("SELECT * FROM pages WHERE id = ?", (page_id,))
            row = await cursor.fetchone()
            return self._row_to_page(row) if row else None

    async def list_pages(self, post_type: str = "page") -> list[dict[str, Any]]:
        """List published, draft, and private pages of a post type (at most 100)."""
        placeholders = ", ".join("?" for _ in LISTED_PAGE_STATUSES)
        async with self._connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM pages WHERE post_type = ? AND status IN ({placeholders}) ORDER BY id LIMIT ?",
                (post_type, *LISTED_PAGE_STATUSES, MAX_LISTED_PAGES),
            )
            rows = await cursor.fetchall()
            return [self._row_to_page(row) for row in rows]

    async def update_page_blocks(self, page_id: int, blocks: dict[str, Any]) -> bool:
        async with self._connection(commit=True) as conn:
            cursor = await conn.execute(
                "UPDATE pages SET blocks = ?, updated_at = ? WHERE id = ?",
                (json.dumps(blocks), _now(), page_id),
            )
            return cursor.rowcount > 0

    # ── Site-wide data ──────────────────────────────────────────────────

    async def get_global(self, key: str) -> Any:
        async with self._connection() as conn:
            cursor = await conn.execute("SELECT value FROM global_data WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return json.loads(row["value"]) if row else None

    async def set_global(self, key: str, value: Any) -> None:
        async with self._connection(commit=True) as conn:
            await conn.execute(
                """
                INSERT INTO global_data (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, json.dumps(value), _now()),
            )
