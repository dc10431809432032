from eigo_master.db.models import QuizHistoryEntry, WordStat
from eigo_master.db.store import PersistentStore


class StatsAggregator:
    """Read-only views over the store. Storage errors propagate."""

    def __init__(self, store: PersistentStore):
        self._store = store

    async def overall_accuracy(self) -> float:
        """Percentage of correct attempts across all words (0 without attempts)."""
        stats = await self._store.get_all_word_stats()
        total_correct = sum(s.correct_count for s in stats)
        total_attempts = sum(s.total_attempts for s in stats)
        if total_attempts == 0:
            return 0.0
        return total_correct / total_attempts * 100

    async def weakest_words(self, n: int) -> list[WordStat]:
        """
        Lowest accuracy first.

        Ties go to the word with fewer attempts (less evidence), then to
        alphabetical order of the word key.
        """
        _check_limit(n)
        stats = await self._store.get_all_word_stats()
        stats.sort(key=lambda s: (s.accuracy, s.total_attempts, s.english))
        return stats[:n]

    async def recent_sessions(self, n: int) -> list[QuizHistoryEntry]:
        _check_limit(n)
        history = await self._store.get_all_history()
        return history[:n]

    async def sessions_played(self) -> int:
        return len(await self._store.get_all_history())


def _check_limit(n: int) -> None:
    if n < 0:
        raise ValueError(f"Limit must not be negative, got {n}")
