"""Persistent store for word statistics and quiz history."""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError

from eigo_master.db.backend import AUTO_INCREMENT, KEYED, KeyValueBackend, SQLiteBackend
from eigo_master.db.models import QuizHistoryEntry, QuizResult, WordStat
from eigo_master.exceptions import NotInitialized, StorageError, StorageUnavailable

logger = logging.getLogger(__name__)

WORD_STATS = "word_stats"
QUIZ_HISTORY = "quiz_history"

COLLECTIONS = {
    WORD_STATS: KEYED,
    QUIZ_HISTORY: AUTO_INCREMENT,
}


def normalize_word_key(english: str) -> str:
    """Canonical key for a word: surrounding whitespace removed, case folded."""
    return english.strip().casefold()


class PersistentStore:
    """
    Durable storage for two collections: word stats and quiz history.

    Every operation except initialize() raises NotInitialized until
    initialize() has completed. Write failures raise WriteError and are
    not retried.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._backend = backend
        self._clock = clock
        self._initialized = False
        # Per-word locks: one writer per WordStat at a time
        self._word_locks: dict[str, asyncio.Lock] = {}

    @classmethod
    def sqlite(cls, db_path: str, clock: Callable[[], datetime] = datetime.now) -> "PersistentStore":
        """Store backed by a SQLite file."""
        return cls(SQLiteBackend(db_path, COLLECTIONS), clock=clock)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Open the backing medium.

        Raises:
            StorageUnavailable: If the medium cannot be opened or lacks
                the required collections
        """
        missing = [
            name for name, kind in COLLECTIONS.items()
            if self._backend.collections.get(name) != kind
        ]
        if missing:
            raise StorageUnavailable(f"Backend is missing collections: {', '.join(missing)}")

        await self._backend.open()
        self._initialized = True

    async def close(self) -> None:
        self._initialized = False
        await self._backend.close()

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitialized("Store not initialized. Call initialize() first.")

    # ========================================================================
    # WORD STATS
    # ========================================================================

    async def record_attempt(self, word: str, was_correct: bool) -> WordStat:
        """
        Count one attempt for a word, creating its record on first use.

        Args:
            word: English spelling (normalized before use)
            was_correct: Whether the learner spelled it correctly

        Returns:
            The updated WordStat

        Raises:
            NotInitialized: Before initialize()
            WriteError: If the record could not be persisted
            StorageError: If the stored record is unreadable
        """
        self._require_initialized()
        key = normalize_word_key(word)
        if not key:
            raise ValueError("Word must not be empty")

        if key not in self._word_locks:
            self._word_locks[key] = asyncio.Lock()

        async with self._word_locks[key]:
            raw = await self._backend.get(WORD_STATS, key)
            stat = _load_stat(key, raw) if raw else WordStat(english=key)
            stat = stat.with_attempt(was_correct, self._clock())
            await self._backend.put(WORD_STATS, key, stat.to_record())

        logger.debug(
            "Attempt recorded: %s correct=%s (%d/%d)",
            key, was_correct, stat.correct_count, stat.total_attempts,
        )
        return stat

    async def get_word_stat(self, word: str) -> Optional[WordStat]:
        self._require_initialized()
        key = normalize_word_key(word)
        raw = await self._backend.get(WORD_STATS, key)
        return _load_stat(key, raw) if raw else None

    async def get_all_word_stats(self) -> list[WordStat]:
        """All word stats, in no particular order."""
        self._require_initialized()
        rows = await self._backend.get_all(WORD_STATS)
        return [_load_stat(key, value) for key, value in rows]

    # ========================================================================
    # QUIZ HISTORY
    # ========================================================================

    async def append_history(self, result: QuizResult) -> QuizHistoryEntry:
        """
        Append a completed session. The store assigns the id.

        Returns:
            The stored entry including its id
        """
        self._require_initialized()
        entry_id = await self._backend.add(QUIZ_HISTORY, result.model_dump(mode="json"))
        entry = QuizHistoryEntry(id=entry_id, **result.model_dump())
        logger.info(
            "Quiz history #%d saved: %s %d/%d",
            entry.id, entry.dictionary_name, entry.score, entry.total,
        )
        return entry

    async def get_all_history(self) -> list[QuizHistoryEntry]:
        """All history entries, most recent first (ties: higher id first)."""
        self._require_initialized()
        rows = await self._backend.get_all(QUIZ_HISTORY)
        entries = [_load_entry(key, value) for key, value in rows]
        entries.sort(key=lambda e: (e.completed_at, e.id), reverse=True)
        return entries


def _load_stat(key: str, value: dict) -> WordStat:
    try:
        return WordStat.model_validate(value)
    except ValidationError as e:
        raise StorageError(f"Corrupt word stat {key!r}: {e}") from e


def _load_entry(entry_id: int, value: dict) -> QuizHistoryEntry:
    try:
        return QuizHistoryEntry.model_validate({**value, "id": entry_id})
    except ValidationError as e:
        raise StorageError(f"Corrupt quiz history entry #{entry_id}: {e}") from e
