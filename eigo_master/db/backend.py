"""Key-value storage backends for the learner-progress store."""
import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from eigo_master.exceptions import NotInitialized, StorageError, StorageUnavailable, WriteError

logger = logging.getLogger(__name__)

# Collection kinds
KEYED = "keyed"                    # caller supplies a string key
AUTO_INCREMENT = "auto_increment"  # backend assigns an increasing integer id

SCHEMA_VERSION = 1

_COLLECTION_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")


class KeyValueBackend(ABC):
    """
    Generic key-value capability: get/put/add/get_all per named collection.

    Values are JSON-compatible dicts. Collections are declared up-front as
    either KEYED or AUTO_INCREMENT.
    """

    def __init__(self, collections: dict[str, str]):
        for name, kind in collections.items():
            if not _COLLECTION_NAME.match(name):
                raise ValueError(f"Invalid collection name: {name!r}")
            if kind not in (KEYED, AUTO_INCREMENT):
                raise ValueError(f"Invalid collection kind for {name!r}: {kind!r}")
        self.collections = dict(collections)

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    @abstractmethod
    async def open(self) -> None:
        """Open the backing medium. Raises StorageUnavailable on failure."""

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        ...

    @abstractmethod
    async def put(self, collection: str, key: str, value: dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def add(self, collection: str, value: dict[str, Any]) -> int:
        """Insert into an AUTO_INCREMENT collection and return the new id."""

    @abstractmethod
    async def get_all(self, collection: str) -> list[tuple[Any, dict[str, Any]]]:
        ...

    def _check_collection(self, collection: str, kind: str) -> None:
        if self.collections.get(collection) != kind:
            raise ValueError(f"{collection!r} is not a {kind} collection")


class SQLiteBackend(KeyValueBackend):
    """One SQLite table per collection, values stored as JSON text."""

    def __init__(self, db_path: str, collections: dict[str, str]):
        super().__init__(collections)
        self.db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        """Open the database file and create missing tables."""
        if self._conn is not None:
            return

        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(self.db_path)
        except (OSError, aiosqlite.Error) as e:
            raise StorageUnavailable(f"Cannot open database at {self.db_path}: {e}") from e

        try:
            await self._check_schema_version(conn)
            await self._create_tables(conn)
        except aiosqlite.Error as e:
            await conn.close()
            raise StorageUnavailable(f"Database at {self.db_path} is unusable: {e}") from e
        except StorageUnavailable:
            await conn.close()
            raise

        self._conn = conn
        logger.info("Opened database at %s", self.db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def _check_schema_version(self, conn: aiosqlite.Connection) -> None:
        async with conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
        version = row[0]
        if version > SCHEMA_VERSION:
            raise StorageUnavailable(
                f"Database schema version {version} is newer than supported ({SCHEMA_VERSION})"
            )

    async def _create_tables(self, conn: aiosqlite.Connection) -> None:
        for name, kind in self.collections.items():
            key_column = self._key_column(name)
            if kind == KEYED:
                key_sql = f"{key_column} TEXT PRIMARY KEY"
            else:
                key_sql = f"{key_column} INTEGER PRIMARY KEY AUTOINCREMENT"
            await conn.execute(
                f"CREATE TABLE IF NOT EXISTS {name} ({key_sql}, value TEXT NOT NULL)"
            )

            # An existing table with other columns was not written by us
            cursor = await conn.execute(f"PRAGMA table_info({name})")
            columns = {row[1] for row in await cursor.fetchall()}
            if columns != {key_column, "value"}:
                raise StorageUnavailable(
                    f"Table {name!r} has unexpected columns: {sorted(columns)}"
                )

        await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        await conn.commit()

    def _key_column(self, collection: str) -> str:
        return "key" if self.collections[collection] == KEYED else "id"

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise NotInitialized("Database is not open. Call open() first.")
        return self._conn

    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        self._check_collection(collection, KEYED)
        conn = self._require_conn()
        try:
            async with conn.execute(
                f"SELECT value FROM {collection} WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to read {collection}[{key!r}]: {e}") from e
        return self._decode(collection, key, row[0]) if row else None

    async def put(self, collection: str, key: str, value: dict[str, Any]) -> None:
        self._check_collection(collection, KEYED)
        conn = self._require_conn()
        try:
            await conn.execute(
                f"""INSERT INTO {collection} (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, json.dumps(value, ensure_ascii=False)),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await self._rollback(conn)
            raise WriteError(f"Failed to write {collection}[{key!r}]: {e}") from e

    async def add(self, collection: str, value: dict[str, Any]) -> int:
        self._check_collection(collection, AUTO_INCREMENT)
        conn = self._require_conn()
        try:
            cursor = await conn.execute(
                f"INSERT INTO {collection} (value) VALUES (?)",
                (json.dumps(value, ensure_ascii=False),),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await self._rollback(conn)
            raise WriteError(f"Failed to append to {collection}: {e}") from e
        return cursor.lastrowid

    async def get_all(self, collection: str) -> list[tuple[Any, dict[str, Any]]]:
        if collection not in self.collections:
            raise ValueError(f"Unknown collection: {collection!r}")
        conn = self._require_conn()
        key_column = self._key_column(collection)
        try:
            async with conn.execute(
                f"SELECT {key_column}, value FROM {collection} ORDER BY {key_column}"
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to read {collection}: {e}") from e
        return [(row[0], self._decode(collection, row[0], row[1])) for row in rows]

    @staticmethod
    def _decode(collection: str, key: Any, raw: str) -> dict[str, Any]:
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt value in {collection}[{key!r}]: {e}") from e
        if not isinstance(value, dict):
            raise StorageError(f"Corrupt value in {collection}[{key!r}]: expected an object")
        return value

    async def _rollback(self, conn: aiosqlite.Connection) -> None:
        try:
            await conn.rollback()
        except aiosqlite.Error:
            logger.exception("Rollback failed for %s", self.db_path)
