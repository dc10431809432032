from typing import Optional, Union

from eigo_master.db.models import QuizHistoryEntry, QuizResult
from eigo_master.services.quiz_engine import AnswerFeedback, Session


def format_feedback(feedback: AnswerFeedback) -> str:
    """Feedback shown during the dwell period."""
    if feedback.is_correct:
        return "✅ Correct!"
    return f"❌ Incorrect.\n\n📝 Correct spelling: {feedback.correct_answer}"


def format_results(session: Session, result: Optional[Union[QuizResult, QuizHistoryEntry]] = None) -> str:
    """Final quiz results."""
    total = session.total
    correct = session.score
    percent = round(correct / total * 100) if total > 0 else 0

    # Pick an emoji based on score
    if percent >= 90:
        emoji = "🏆"
        comment = "Excellent result!"
    elif percent >= 70:
        emoji = "👍"
        comment = "Good result!"
    elif percent >= 50:
        emoji = "📖"
        comment = "Not bad, but there is room to improve."
    else:
        emoji = "💪"
        comment = "Keep practising. You can do it!"

    lines = [
        "📊 Quiz finished\n",
        f"📚 Dictionary: {session.dictionary_name}\n",
        f"{emoji} Correct: {correct} of {total} ({percent}%)",
        f"🔥 Best streak: {session.best_streak}",
    ]

    missed = [a for a in session.answers if not a.is_correct]
    if missed:
        lines.append("\n📝 Words to review:")
        for a in missed:
            typed = a.user_answer or "—"
            lines.append(f"  {a.japanese} → {a.english} (you typed: {typed})")

    if result is not None and not isinstance(result, QuizHistoryEntry):
        lines.append("\n⚠️ This result could not be saved.")

    lines.append(f"\n{comment}")
    return "\n".join(lines)
