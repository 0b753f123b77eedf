"""SQLite-backed local store for menu items.

The store owns a single connection. Every operation runs in a worker thread
under one asyncio lock, so a reader never observes a half-applied
``replace_all``.

Ordering uses SQLite's default ``BINARY`` collation: ``name`` sorts
case-sensitively in byte order ("Zucchini" before "apple"). Text search uses
``LIKE``, which SQLite matches case-insensitively for ASCII letters only.
"""

import asyncio
import logging
import sqlite3
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import TypeVar

from little_lemon_menu.exceptions import StorageInitError, StorageQueryError
from little_lemon_menu.models.menu_models import MenuItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

CREATE_MENU_TABLE = """
CREATE TABLE IF NOT EXISTS menu (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    price REAL NOT NULL,
    description TEXT,
    image TEXT,
    category TEXT
)
"""

SELECT_COLUMNS = "SELECT id, name, price, description, image, category FROM menu"
ORDER_BY = " ORDER BY name, id"

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so ``text`` matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_filter_query(search_text: str, categories: Iterable[str]) -> tuple[str, list[str]]:
    """Build the filter SQL and its parameters.

    Args:
        search_text: Substring to look for in item names (trimmed here)
        categories: Category labels to restrict to; empty means no restriction

    Returns:
        Tuple of (sql, params)
    """
    sql = SELECT_COLUMNS + " WHERE 1=1"
    params: list[str] = []

    text = search_text.strip()
    if text:
        sql += f" AND name LIKE ? ESCAPE '{LIKE_ESCAPE}'"
        params.append(f"%{escape_like(text)}%")

    selected = sorted(set(categories))
    if selected:
        placeholders = ", ".join("?" for _ in selected)
        sql += f" AND category IN ({placeholders})"
        params.extend(selected)

    return sql + ORDER_BY, params


def _row_to_item(row: sqlite3.Row) -> MenuItem:
    return MenuItem(
        id=row["id"],
        name=row["name"],
        price=Decimal(str(row["price"])),
        description=row["description"],
        image=row["image"],
        category=row["category"],
    )


class MenuStore:
    """Durable storage for menu items.

    ``initialize()`` must be awaited before any other operation; operations
    on an uninitialized or closed store raise ``StorageQueryError``.
    """

    def __init__(self, db_path: str) -> None:
        """Initialize the store.

        Args:
            db_path: Path of the SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def initialize(self) -> None:
        """Open the database and create the menu table if needed.

        Safe to call repeatedly; the schema statement is idempotent.

        Raises:
            StorageInitError: If the database cannot be opened or is corrupt
        """
        async with self._lock:
            try:
                await asyncio.to_thread(self._open_and_migrate)
            except sqlite3.Error as e:
                logger.error(f"Failed to initialize menu store at {self.db_path}: {e}")
                raise StorageInitError(f"Cannot initialize menu store: {e}") from e

    def _open_and_migrate(self) -> None:
        created = False
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            created = True
        try:
            self._conn.execute(CREATE_MENU_TABLE)
            self._conn.commit()
        except sqlite3.Error:
            if created:
                self._conn.close()
                self._conn = None
            raise
        if created:
            logger.info(f"Menu store opened at {self.db_path}")

    async def close(self) -> None:
        """Close the underlying connection."""
        async with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    async def _run(self, operation: str, func: Callable[[sqlite3.Connection], T]) -> T:
        async with self._lock:
            conn = self._conn
            if conn is None:
                raise StorageQueryError(f"Menu store is not initialized ({operation})")
            try:
                return await asyncio.to_thread(func, conn)
            except sqlite3.Error as e:
                logger.error(f"Menu store {operation} failed: {e}")
                raise StorageQueryError(f"Menu store {operation} failed: {e}") from e

    async def is_empty(self) -> bool:
        """Return True if no menu rows exist.

        Raises:
            StorageQueryError: On access failure
        """

        def count(conn: sqlite3.Connection) -> int:
            return conn.execute("SELECT COUNT(*) FROM menu").fetchone()[0]

        return await self._run("count", count) == 0

    async def replace_all(self, items: Sequence[MenuItem]) -> None:
        """Replace every stored row with ``items`` in a single transaction.

        Items without a category are written with ``DEFAULT_CATEGORY``. If
        any insert fails the transaction is rolled back and the previous
        rows are kept.

        Args:
            items: Complete menu snapshot to persist

        Raises:
            StorageQueryError: If the transaction cannot be completed
        """
        rows = [
            (item.name, float(item.price), item.description, item.image, item.stored_category)
            for item in items
        ]

        def replace(conn: sqlite3.Connection) -> None:
            with conn:
                conn.execute("DELETE FROM menu")
                conn.executemany(
                    "INSERT INTO menu (name, price, description, image, category) "
                    "VALUES (?, ?, ?, ?, ?)",
                    rows,
                )

        await self._run("replace", replace)
        logger.info(f"Persisted {len(rows)} menu items")

    async def list_all(self) -> list[MenuItem]:
        """Return all rows ordered by name."""

        def select(conn: sqlite3.Connection) -> list[MenuItem]:
            return [_row_to_item(row) for row in conn.execute(SELECT_COLUMNS + ORDER_BY)]

        return await self._run("list", select)

    async def distinct_categories(self) -> list[str]:
        """Return the distinct non-null categories in ascending order."""

        def select(conn: sqlite3.Connection) -> list[str]:
            cursor = conn.execute(
                "SELECT DISTINCT category FROM menu WHERE category IS NOT NULL ORDER BY category"
            )
            return [row["category"] for row in cursor]

        return await self._run("categories", select)

    async def query(self, search_text: str, categories: Iterable[str]) -> list[MenuItem]:
        """Return rows matching the text and category criteria, ordered by name.

        Args:
            search_text: Name substring; blank means no text filter
            categories: Allowed categories; empty means any category

        Raises:
            StorageQueryError: On access failure
        """
        sql, params = build_filter_query(search_text, categories)

        def select(conn: sqlite3.Connection) -> list[MenuItem]:
            return [_row_to_item(row) for row in conn.execute(sql, params)]

        return await self._run("query", select)
