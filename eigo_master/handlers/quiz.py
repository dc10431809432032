from eigo_master.console import AppContext
from eigo_master.exceptions import EmptyPool, StorageError
from eigo_master.handlers.results import format_feedback, format_results
from eigo_master.services.quiz_engine import QuizSessionEngine
from eigo_master.states.quiz_states import QuizState

CANCEL_COMMAND = "/cancel"


async def run_spelling_quiz(ctx: AppContext) -> None:
    """Run spelling quizzes on the selected dictionary until the learner stops."""
    dictionary = ctx.selected_dictionary
    if dictionary is None:
        ctx.console.answer("Choose a dictionary first.")
        return

    warned = False

    def on_error(error: StorageError) -> None:
        nonlocal warned
        if not warned:
            ctx.console.answer("⚠️ Progress could not be saved. The quiz continues.")
            warned = True

    engine = QuizSessionEngine(
        ctx.store,
        session_size=ctx.settings.QUIZ_SESSION_SIZE,
        dwell_seconds=ctx.settings.FEEDBACK_DWELL_MS / 1000,
        rng=ctx.rng,
        on_error=on_error,
    )

    while True:
        try:
            engine.start(dictionary.words, dictionary_name=dictionary.name)
        except EmptyPool:
            ctx.console.answer(f"📭 Dictionary {dictionary.name} has no words.")
            return

        while engine.state is not QuizState.FINISHED:
            session = engine.session
            word = session.current_word
            ctx.console.answer(f"\n❓ Question {session.position + 1} of {session.total}\n\n{word.japanese}")

            raw = await ctx.console.ask(f"✏️ Type the English word ({CANCEL_COMMAND} to stop): ")
            if raw.strip() == CANCEL_COMMAND:
                engine.cancel()
                ctx.console.answer("Quiz cancelled. Back to the main menu.")
                return

            feedback = await engine.submit_answer(raw.strip())
            ctx.console.answer(format_feedback(feedback))
            await engine.wait_for_feedback()

        ctx.console.answer(format_results(engine.session, engine.last_result))

        again = await ctx.console.ask("\nTry again? [y/N] ")
        if not again.strip().lower().startswith("y"):
            return
