from eigo_master.console import AppContext
from eigo_master.db.models import Word
from eigo_master.services.dictionary import SearchMode, search_words
from eigo_master.services.speech import ENGLISH

SWITCH_COMMANDS = {
    "/en": SearchMode.ENGLISH,
    "/ja": SearchMode.JAPANESE,
}


def format_words(words: list[Word], term: str) -> str:
    if not words:
        return f"No words match {term!r}." if term else "📭 The dictionary is empty."
    return "\n".join(f"{w.english:<20} {w.japanese}" for w in words)


async def browse_dictionary(ctx: AppContext) -> None:
    """
    Search the selected dictionary.

    /en and /ja switch the search language, /say <word> speaks a word,
    an empty line goes back to the menu.
    """
    dictionary = ctx.selected_dictionary
    if dictionary is None:
        ctx.console.answer("Choose a dictionary first.")
        return

    mode = SearchMode.ENGLISH
    ctx.console.answer(f"📖 {dictionary.name}\n" + format_words(dictionary.words, ""))

    while True:
        label = "English" if mode is SearchMode.ENGLISH else "Japanese"
        term = (await ctx.console.ask(f"\n🔎 Search in {label} (/en, /ja, /say <word>, Enter to go back): ")).strip()
        if not term:
            return
        if term in SWITCH_COMMANDS:
            mode = SWITCH_COMMANDS[term]
            continue
        if term.startswith("/say "):
            ctx.speaker.speak(term[len("/say "):].strip(), ENGLISH, lambda: None)
            continue
        ctx.console.answer(format_words(search_words(dictionary, term, mode), term))
