"""Data models for dictionaries, word statistics and quiz history."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, computed_field, model_validator


class Word(BaseModel):
    """Single dictionary entry. Surrounding whitespace is stripped."""

    model_config = ConfigDict(str_strip_whitespace=True)

    english: str = Field(min_length=1)
    japanese: str


class Dictionary(BaseModel):
    """Named word pool."""
    name: str = Field(min_length=1)
    words: list[Word] = Field(default_factory=list)


class WordStat(BaseModel):
    """Per-word performance counters. Accuracy is always derived."""

    model_config = ConfigDict(frozen=True)

    english: str                 # normalized key, see normalize_word_key()
    correct_count: NonNegativeInt = 0
    incorrect_count: NonNegativeInt = 0
    last_attempt_at: Optional[datetime] = None

    @computed_field
    @property
    def total_attempts(self) -> int:
        return self.correct_count + self.incorrect_count

    @computed_field
    @property
    def accuracy(self) -> float:
        total = self.total_attempts
        return self.correct_count / total * 100 if total > 0 else 0.0

    def with_attempt(self, was_correct: bool, at: datetime) -> "WordStat":
        """Return a copy with one more attempt counted."""
        if was_correct:
            return self.model_copy(
                update={"correct_count": self.correct_count + 1, "last_attempt_at": at}
            )
        return self.model_copy(
            update={"incorrect_count": self.incorrect_count + 1, "last_attempt_at": at}
        )

    def to_record(self) -> dict[str, Any]:
        """Stored form: the counters only."""
        return self.model_dump(mode="json", exclude={"total_attempts", "accuracy"})


class QuizResult(BaseModel):
    """Outcome of one completed quiz session, before the store assigns an id."""

    model_config = ConfigDict(frozen=True)

    completed_at: datetime
    dictionary_name: str
    score: NonNegativeInt
    total: NonNegativeInt
    streak: NonNegativeInt = 0   # longest run of consecutive correct answers

    @model_validator(mode="after")
    def _check_counts(self) -> "QuizResult":
        if self.score > self.total:
            raise ValueError(f"score {self.score} exceeds total {self.total}")
        if self.streak > self.score:
            raise ValueError(f"streak {self.streak} exceeds score {self.score}")
        return self

    @property
    def score_percent(self) -> float:
        return self.score / self.total * 100 if self.total > 0 else 0.0


class QuizHistoryEntry(QuizResult):
    """Stored quiz session. Append-only."""
    id: int
