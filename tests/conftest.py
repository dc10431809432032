"""Common fixtures for EigoMaster tests."""
import random
from datetime import datetime, timedelta

import pytest

from eigo_master.db.models import Dictionary, Word
from eigo_master.db.store import PersistentStore
from eigo_master.services.quiz_engine import QuizSessionEngine


class FakeClock:
    """Returns increasing timestamps, one minute apart."""

    def __init__(self, start: datetime = datetime(2026, 2, 25, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(minutes=1)
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_path(tmp_path):
    """Path inside a directory that does not exist yet."""
    return str(tmp_path / "data" / "eigo_master.db")


@pytest.fixture
async def store(db_path, clock):
    """Initialized store on a fresh SQLite file."""
    store = PersistentStore.sqlite(db_path, clock=clock)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def words():
    """Five-word pool."""
    return [
        Word(english="apple", japanese="りんご"),
        Word(english="dog", japanese="犬"),
        Word(english="cat", japanese="猫"),
        Word(english="book", japanese="本"),
        Word(english="water", japanese="水"),
    ]


@pytest.fixture
def dictionary(words):
    return Dictionary(name="Level 1", words=words)


@pytest.fixture
def engine(store, clock):
    """Engine with no feedback delay and a fixed shuffle seed."""
    return QuizSessionEngine(
        store,
        session_size=10,
        dwell_seconds=0,
        rng=random.Random(42),
        clock=clock,
    )
