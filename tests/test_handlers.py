"""Tests for the console handlers and their formatters."""
import random
from datetime import datetime

import pytest

from eigo_master.config import Settings
from eigo_master.console import AppContext, Console
from eigo_master.db.models import Dictionary, QuizHistoryEntry, QuizResult, Word, WordStat
from eigo_master.db.store import PersistentStore
from eigo_master.handlers.dictionary import browse_dictionary
from eigo_master.handlers.flashcards import run_flashcards
from eigo_master.handlers.history import format_history, format_weak_words, show_stats
from eigo_master.handlers.quiz import run_spelling_quiz
from eigo_master.handlers.results import format_feedback, format_results
from eigo_master.handlers.start import main_menu
from eigo_master.services.progress_tracker import StatsAggregator
from eigo_master.services.quiz_engine import AnswerFeedback, AnswerRecord, Session
from eigo_master.services.speech import ConsoleSpeaker


class ScriptedConsole(Console):
    """Console fed from a list of replies; a callable reply sees the output so far."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.output = []
        self.prompts = []
        super().__init__(input_func=self._reply, output_func=self.output.append)

    def _reply(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise EOFError
        reply = self.replies.pop(0)
        return reply(self.output) if callable(reply) else reply

    @property
    def text(self) -> str:
        return "\n".join(self.output)


def correct_answer(dictionary: Dictionary):
    """Reply with the English for the Japanese word shown last."""
    lookup = {w.japanese: w.english for w in dictionary.words}
    return lambda output: lookup[output[-1].split("\n")[-1]]


def wrong_answer(output) -> str:
    return "zzz"


def make_ctx(console, store, dictionary, **overrides) -> AppContext:
    settings = Settings(QUIZ_SESSION_SIZE=3, FEEDBACK_DWELL_MS=0, **overrides)
    return AppContext(
        console=console,
        settings=settings,
        store=store,
        stats=StatsAggregator(store),
        speaker=ConsoleSpeaker(console.answer),
        rng=random.Random(5),
        dictionaries={dictionary.name: dictionary},
        selected_dictionary=dictionary,
    )


# ============================================================================
# FORMATTERS
# ============================================================================


class TestFormatters:
    def test_feedback_correct(self):
        text = format_feedback(AnswerFeedback(True, "apple", "APPLE", False))
        assert text == "✅ Correct!"

    def test_feedback_incorrect_shows_spelling(self):
        text = format_feedback(AnswerFeedback(False, "apple", "aple", False))
        assert "Correct spelling: apple" in text

    def test_results(self, words):
        session = Session(dictionary_name="Level 1", questions=words[:4], score=3, best_streak=2)
        session.answers.append(AnswerRecord("dog", "犬", "dgo", False))
        entry = QuizHistoryEntry(
            id=1, completed_at=datetime(2026, 2, 25), dictionary_name="Level 1", score=3, total=4
        )

        text = format_results(session, entry)

        assert "Correct: 3 of 4 (75%)" in text
        assert "Best streak: 2" in text
        assert "犬 → dog (you typed: dgo)" in text
        assert "could not be saved" not in text

    def test_unsaved_result_flagged(self, words):
        session = Session(dictionary_name="Level 1", questions=words[:1], score=1)
        result = QuizResult(completed_at=datetime(2026, 2, 25), dictionary_name="Level 1", score=1, total=1)

        assert "could not be saved" in format_results(session, result)

    def test_history_empty(self):
        assert "No quizzes yet" in format_history([])

    def test_history_lines(self):
        entry = QuizHistoryEntry(
            id=7, completed_at=datetime(2026, 2, 25, 9, 5), dictionary_name="Level 2", score=8, total=10
        )
        assert "2026-02-25 09:05  Level 2 — 8/10" in format_history([entry])

    def test_weak_words_marks(self):
        text = format_weak_words([
            WordStat(english="dog", correct_count=0, incorrect_count=2),
            WordStat(english="cat", correct_count=1, incorrect_count=1),
            WordStat(english="book", correct_count=4, incorrect_count=1),
        ])
        assert "🔴 dog — 0% (0/2)" in text
        assert "🟡 cat — 50% (1/2)" in text
        assert "🟢 book — 80% (4/5)" in text


# ============================================================================
# SPELLING QUIZ
# ============================================================================


class TestSpellingQuiz:
    async def test_full_quiz_saves_history(self, store, dictionary):
        console = ScriptedConsole([correct_answer(dictionary)] * 3 + ["n"])
        ctx = make_ctx(console, store, dictionary)

        await run_spelling_quiz(ctx)

        [entry] = await store.get_all_history()
        assert (entry.score, entry.total, entry.streak) == (3, 3, 3)
        assert entry.dictionary_name == "Level 1"
        assert "Question 3 of 3" in console.text
        assert "Correct: 3 of 3 (100%)" in console.text
        assert "could not be saved" not in console.text

    async def test_missed_word_listed(self, store, dictionary):
        answer = correct_answer(dictionary)
        console = ScriptedConsole([answer, wrong_answer, answer, "n"])
        ctx = make_ctx(console, store, dictionary)

        await run_spelling_quiz(ctx)

        assert "Correct spelling:" in console.text
        assert "you typed: zzz" in console.text
        [entry] = await store.get_all_history()
        assert entry.score == 2

    async def test_try_again(self, store, dictionary):
        answer = correct_answer(dictionary)
        console = ScriptedConsole([answer] * 3 + ["y"] + [answer] * 3 + ["n"])
        ctx = make_ctx(console, store, dictionary)

        await run_spelling_quiz(ctx)

        assert len(await store.get_all_history()) == 2

    async def test_cancel_writes_no_history(self, store, dictionary):
        console = ScriptedConsole([correct_answer(dictionary), "/cancel"])
        ctx = make_ctx(console, store, dictionary)

        await run_spelling_quiz(ctx)

        assert "Quiz cancelled" in console.text
        assert await store.get_all_history() == []
        assert len(await store.get_all_word_stats()) == 1

    async def test_quiz_without_storage(self, db_path, dictionary):
        """Store never initialized: one warning, quiz still finishes."""
        console = ScriptedConsole([correct_answer(dictionary)] * 3 + ["n"])
        ctx = make_ctx(console, PersistentStore.sqlite(db_path), dictionary)

        await run_spelling_quiz(ctx)

        assert console.text.count("Progress could not be saved") == 1
        assert "Correct: 3 of 3" in console.text
        assert "This result could not be saved." in console.text

    async def test_empty_dictionary(self, store):
        empty = Dictionary(name="Empty", words=[])
        console = ScriptedConsole([])
        ctx = make_ctx(console, store, empty)

        await run_spelling_quiz(ctx)

        assert "has no words" in console.text


# ============================================================================
# OTHER SCREENS
# ============================================================================


class TestStats:
    async def test_empty_store(self, store, dictionary):
        console = ScriptedConsole([])
        await show_stats(make_ctx(console, store, dictionary))

        assert "Quizzes played: 0" in console.text
        assert "Overall accuracy: 0.0%" in console.text
        assert "No quizzes yet" in console.text

    async def test_with_records(self, store, dictionary):
        await store.record_attempt("dog", False)
        await store.record_attempt("apple", True)
        await store.append_history(
            QuizResult(completed_at=datetime(2026, 2, 25, 9, 0), dictionary_name="Level 1", score=1, total=2)
        )
        console = ScriptedConsole([])

        await show_stats(make_ctx(console, store, dictionary))

        assert "Quizzes played: 1" in console.text
        assert "Overall accuracy: 50.0%" in console.text
        assert "🔴 dog" in console.text
        assert "Level 1 — 1/2" in console.text

    async def test_store_unavailable(self, db_path, dictionary):
        console = ScriptedConsole([])
        await show_stats(make_ctx(console, PersistentStore.sqlite(db_path), dictionary))

        assert "unavailable" in console.text


class TestFlashcardsScreen:
    async def test_stop_on_enter(self, store, dictionary):
        console = ScriptedConsole(["1", ""])
        await run_flashcards(make_ctx(console, store, dictionary))

        assert "[1 / 5]" in console.text
        assert "Stopped after 1 cards." in console.text

    async def test_unknown_mode(self, store, dictionary):
        console = ScriptedConsole(["9"])
        await run_flashcards(make_ctx(console, store, dictionary))

        assert "Unknown mode." in console.text


class TestDictionaryScreen:
    async def test_search_and_switch_language(self, store, dictionary):
        console = ScriptedConsole(["AT", "/ja", "犬", "/say book", ""])
        await browse_dictionary(make_ctx(console, store, dictionary))

        results = console.output[1:]
        assert any("cat" in r and "water" in r for r in results)
        assert any(r.startswith("dog") for r in results)
        assert "🔊 [en-US] book" in console.output
        assert "Japanese" in console.prompts[2]

    async def test_no_match(self, store, dictionary):
        console = ScriptedConsole(["xyz", ""])
        await browse_dictionary(make_ctx(console, store, dictionary))

        assert "No words match 'xyz'." in console.output


class TestMainMenu:
    async def test_exit(self, store, dictionary):
        console = ScriptedConsole(["0"])
        ctx = make_ctx(console, store, dictionary)
        ctx.selected_dictionary = None

        await main_menu(ctx)

        assert ctx.selected_dictionary is dictionary
        assert "Dictionary: Level 1" in console.output

    async def test_change_dictionary(self, store, dictionary):
        other = Dictionary(name="Level 2", words=[Word(english="river", japanese="川")])
        console = ScriptedConsole(["5", "2", "0"])
        ctx = make_ctx(console, store, dictionary)
        ctx.dictionaries[other.name] = other

        await main_menu(ctx)

        assert ctx.selected_dictionary is other

    async def test_unknown_choice(self, store, dictionary):
        console = ScriptedConsole(["7", "0"])
        await main_menu(make_ctx(console, store, dictionary))

        assert "Choose a number from the menu." in console.output

    async def test_end_of_input(self, store, dictionary):
        console = ScriptedConsole([])
        with pytest.raises(EOFError):
            await main_menu(make_ctx(console, store, dictionary))
