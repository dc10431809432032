import logging

from eigo_master.console import AppContext
from eigo_master.db.models import QuizHistoryEntry, WordStat
from eigo_master.exceptions import StorageError

logger = logging.getLogger(__name__)


def format_history(sessions: list[QuizHistoryEntry]) -> str:
    """Format recent quiz history as a readable text."""
    if not sessions:
        return "📭 No quizzes yet. Start your first one!"

    lines = ["📋 Recent quizzes:\n"]
    for s in sessions:
        date = s.completed_at.strftime("%Y-%m-%d %H:%M")
        lines.append(f"{date}  {s.dictionary_name} — {s.score}/{s.total}")
    return "\n".join(lines)


def format_weak_words(stats: list[WordStat]) -> str:
    if not stats:
        return ""

    lines = ["\n⚠️ Words to work on:\n"]
    for s in stats:
        if s.accuracy > 70:
            mark = "🟢"
        elif s.accuracy > 40:
            mark = "🟡"
        else:
            mark = "🔴"
        lines.append(f"{mark} {s.english} — {s.accuracy:.0f}% ({s.correct_count}/{s.total_attempts})")
    return "\n".join(lines)


def format_overall_stats(sessions_played: int, accuracy: float) -> str:
    return (
        f"\n📊 Summary:\n"
        f"Quizzes played: {sessions_played}\n"
        f"Overall accuracy: {accuracy:.1f}%"
    )


async def show_stats(ctx: AppContext) -> None:
    """Summary, weakest words and recent quizzes."""
    try:
        played = await ctx.stats.sessions_played()
        accuracy = await ctx.stats.overall_accuracy()
        weak = await ctx.stats.weakest_words(ctx.settings.WEAK_WORDS_LIMIT)
        recent = await ctx.stats.recent_sessions(ctx.settings.RECENT_SESSIONS_LIMIT)
    except StorageError:
        logger.exception("Failed to fetch stats")
        ctx.console.answer("⚠️ Learning records are unavailable right now.")
        return

    text = format_overall_stats(played, accuracy)
    weak_text = format_weak_words(weak)
    if weak_text:
        text += "\n" + weak_text
    text += "\n\n" + format_history(recent)
    ctx.console.answer(text)
