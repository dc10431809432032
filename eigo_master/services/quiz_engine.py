"""Spelling quiz session state machine."""
import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Optional, Sequence, Union

from eigo_master.db.models import QuizHistoryEntry, QuizResult, Word
from eigo_master.db.store import PersistentStore, normalize_word_key
from eigo_master.exceptions import EmptyPool, InvalidStateTransition, StorageError
from eigo_master.services.answer_checker import check_answer
from eigo_master.states.quiz_states import Feedback, QuizState

logger = logging.getLogger(__name__)

UNKNOWN_DICTIONARY = "Unknown"

ErrorCallback = Callable[[StorageError], None]


@dataclass
class AnswerRecord:
    english: str
    japanese: str
    user_answer: str
    is_correct: bool


@dataclass
class AnswerFeedback:
    """What the learner sees during the feedback dwell."""
    is_correct: bool
    correct_answer: str
    user_answer: str
    is_last: bool


@dataclass
class Session:
    """In-memory state of one quiz run."""
    dictionary_name: str
    questions: list[Word]
    position: int = 0
    score: int = 0
    input_buffer: str = ""
    feedback: Optional[Feedback] = None
    streak: int = 0
    best_streak: int = 0
    answers: list[AnswerRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current_word(self) -> Word:
        return self.questions[self.position]

    @property
    def has_next(self) -> bool:
        return self.position + 1 < len(self.questions)


def select_questions(pool: Sequence[Word], size: int, rng: random.Random) -> list[Word]:
    """
    Shuffle the whole pool and take the first `size` words.

    Words sharing a normalized spelling count once, so a session never
    asks the same word twice.
    """
    if size < 1:
        raise ValueError(f"Session size must be positive, got {size}")

    seen: set[str] = set()
    unique: list[Word] = []
    for word in pool:
        key = normalize_word_key(word.english)
        if key not in seen:
            seen.add(key)
            unique.append(word)

    rng.shuffle(unique)
    return unique[:size]


class QuizSessionEngine:
    """
    Drives one timed spelling quiz at a time.

    Idle -> AwaitingAnswer <-> ShowingFeedback -> Finished. Storage
    failures never stop the quiz: they are logged and passed to `on_error`.
    """

    def __init__(
        self,
        store: PersistentStore,
        *,
        session_size: int = 10,
        dwell_seconds: float = 1.5,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
        on_error: Optional[ErrorCallback] = None,
    ):
        self._store = store
        self.session_size = session_size
        self.dwell_seconds = dwell_seconds
        self._rng = rng or random.Random()
        self._clock = clock
        self._on_error = on_error

        self._state = QuizState.IDLE
        self._session: Optional[Session] = None
        self._dwell_task: Optional[asyncio.Task] = None
        self.last_result: Optional[Union[QuizResult, QuizHistoryEntry]] = None

    @property
    def state(self) -> QuizState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    # ========================================================================
    # TRANSITIONS
    # ========================================================================

    def start(
        self,
        word_pool: Sequence[Word],
        session_size: Optional[int] = None,
        dictionary_name: str = UNKNOWN_DICTIONARY,
    ) -> Session:
        """
        Begin a new session, discarding any session in progress.

        Raises:
            EmptyPool: If word_pool is empty. The start is refused: the engine
                keeps its current state and session (Idle stays Idle)
        """
        if not word_pool:
            raise EmptyPool(f"Dictionary {dictionary_name!r} has no words")

        if session_size is None:
            session_size = self.session_size
        questions = select_questions(word_pool, session_size, self._rng)

        self._cancel_dwell()
        self._session = Session(dictionary_name=dictionary_name, questions=questions)
        self._state = QuizState.AWAITING_ANSWER
        self.last_result = None

        logger.info("Quiz started: %s, %d questions", dictionary_name, len(questions))
        return self._session

    def type_key(self, key: str) -> str:
        """Append to the input buffer. Returns the buffer."""
        session = self._require_awaiting("type_key")
        session.input_buffer += key
        return session.input_buffer

    def backspace(self) -> str:
        """Remove the last typed character. Returns the buffer."""
        session = self._require_awaiting("backspace")
        session.input_buffer = session.input_buffer[:-1]
        return session.input_buffer

    async def submit_answer(self, raw_input: Optional[str] = None) -> AnswerFeedback:
        """
        Evaluate an answer and start the feedback dwell.

        Args:
            raw_input: Typed answer; the input buffer is used when omitted

        Raises:
            InvalidStateTransition: Outside AwaitingAnswer (nothing is recorded)
        """
        session = self._require_awaiting("submit_answer")
        word = session.current_word
        answer = session.input_buffer if raw_input is None else raw_input
        is_correct = check_answer(word.english, answer)

        # Leave AwaitingAnswer before suspending so repeated submits are refused
        self._state = QuizState.SHOWING_FEEDBACK
        session.input_buffer = answer
        session.feedback = Feedback.CORRECT if is_correct else Feedback.INCORRECT
        if is_correct:
            session.score += 1
            session.streak += 1
            session.best_streak = max(session.best_streak, session.streak)
        else:
            session.streak = 0
        session.answers.append(AnswerRecord(
            english=word.english,
            japanese=word.japanese,
            user_answer=answer,
            is_correct=is_correct,
        ))

        feedback = AnswerFeedback(
            is_correct=is_correct,
            correct_answer=word.english,
            user_answer=answer,
            is_last=not session.has_next,
        )

        self._dwell_task = asyncio.create_task(self._dwell(session))
        await self._persist(self._store.record_attempt(word.english, is_correct))
        return feedback

    def cancel(self) -> None:
        """
        Abandon the current session without writing history.

        Attempts already recorded stay recorded.

        Raises:
            InvalidStateTransition: In Finished
        """
        if self._state is QuizState.FINISHED:
            raise InvalidStateTransition("cancel", self._state)

        self._cancel_dwell()
        if self._session is not None:
            logger.info(
                "Quiz cancelled at question %d of %d",
                self._session.position + 1, self._session.total,
            )
        self._session = None
        self._state = QuizState.IDLE

    async def wait_for_feedback(self) -> None:
        """Wait until the pending feedback dwell, if any, has run."""
        task = self._dwell_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _require_awaiting(self, operation: str) -> Session:
        if self._state is not QuizState.AWAITING_ANSWER:
            raise InvalidStateTransition(operation, self._state)
        return self._session

    def _cancel_dwell(self) -> None:
        if self._dwell_task is not None and not self._dwell_task.done():
            self._dwell_task.cancel()
        self._dwell_task = None

    async def _dwell(self, session: Session) -> None:
        await asyncio.sleep(self.dwell_seconds)

        # A stale timer must not touch a session that was replaced or cancelled
        if self._session is not session or self._state is not QuizState.SHOWING_FEEDBACK:
            return

        if session.has_next:
            session.position += 1
            session.input_buffer = ""
            session.feedback = None
            self._state = QuizState.AWAITING_ANSWER
            return

        self._state = QuizState.FINISHED
        result = QuizResult(
            completed_at=self._clock(),
            dictionary_name=session.dictionary_name,
            score=session.score,
            total=session.total,
            streak=session.best_streak,
        )
        self.last_result = result
        logger.info("Quiz finished: %s %d/%d", result.dictionary_name, result.score, result.total)

        # The history write outlives a start() that cancels this task
        await asyncio.shield(self._save_history(session, result))

    async def _save_history(self, session: Session, result: QuizResult) -> None:
        entry = await self._persist(self._store.append_history(result))
        if entry is not None and self._session is session:
            self.last_result = entry

    async def _persist(self, write: Awaitable):
        try:
            return await write
        except StorageError as e:
            logger.error("Progress not saved: %s", e)
            if self._on_error is not None:
                self._on_error(e)
            return None
