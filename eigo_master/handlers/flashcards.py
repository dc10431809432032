from eigo_master.console import AppContext
from eigo_master.db.models import Word
from eigo_master.services.flashcards import FlashcardMode, FlashcardPlayer

MODE_CHOICES = {
    "1": FlashcardMode.SILENT,
    "2": FlashcardMode.ENGLISH_AUDIO,
    "3": FlashcardMode.JAPANESE_AUDIO,
}

MODE_MENU = (
    "🃏 Flashcard mode:\n"
    "1. Silent\n"
    "2. English audio\n"
    "3. Japanese audio"
)


def format_card(word: Word, index: int, total: int, mode: FlashcardMode) -> str:
    if mode is FlashcardMode.ENGLISH_AUDIO:
        front, back = word.english, word.japanese
    else:
        front, back = word.japanese, word.english
    return f"\n[{index + 1} / {total}]\n{front}\n  {back}"


async def run_flashcards(ctx: AppContext) -> None:
    """Play flashcards until the learner presses Enter."""
    dictionary = ctx.selected_dictionary
    if dictionary is None or not dictionary.words:
        ctx.console.answer("📭 The word list is empty.")
        return

    ctx.console.answer(MODE_MENU)
    choice = (await ctx.console.ask("Mode [1]: ")).strip() or "1"
    mode = MODE_CHOICES.get(choice)
    if mode is None:
        ctx.console.answer("Unknown mode.")
        return

    player = FlashcardPlayer(
        dictionary.words,
        mode,
        ctx.speaker,
        interval=ctx.settings.FLASHCARD_INTERVAL_MS / 1000,
        audio_delay=ctx.settings.FLASHCARD_AUDIO_DELAY_MS / 1000,
        rng=ctx.rng,
        on_card=lambda word, index, total: ctx.console.answer(format_card(word, index, total, mode)),
    )
    player.start()
    try:
        await ctx.console.ask("(press Enter to stop)\n")
    finally:
        await player.stop()
    ctx.console.answer(f"Stopped after {player.cards_shown} cards.")
