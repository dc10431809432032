from eigo_master.console import AppContext
from eigo_master.handlers.dictionary import browse_dictionary
from eigo_master.handlers.flashcards import run_flashcards
from eigo_master.handlers.history import show_stats
from eigo_master.handlers.quiz import run_spelling_quiz

MAIN_MENU = (
    "\n🏠 EigoMaster\n"
    "1. ✏️ Spelling quiz\n"
    "2. 🃏 Flashcards\n"
    "3. 📖 Dictionary\n"
    "4. 📊 Learning records\n"
    "5. 📚 Change dictionary\n"
    "0. Exit"
)

HANDLERS = {
    "1": run_spelling_quiz,
    "2": run_flashcards,
    "3": browse_dictionary,
    "4": show_stats,
}


async def choose_dictionary(ctx: AppContext) -> None:
    names = list(ctx.dictionaries)
    lines = ["📚 Dictionaries:"]
    for i, name in enumerate(names, start=1):
        words = len(ctx.dictionaries[name].words)
        current = " ◀" if ctx.selected_dictionary and ctx.selected_dictionary.name == name else ""
        lines.append(f"{i}. {name} ({words} words){current}")
    ctx.console.answer("\n".join(lines))

    choice = (await ctx.console.ask("Number: ")).strip()
    if choice.isdigit() and 1 <= int(choice) <= len(names):
        ctx.selected_dictionary = ctx.dictionaries[names[int(choice) - 1]]
        ctx.console.answer(f"Selected: {ctx.selected_dictionary.name}")
    else:
        ctx.console.answer("Dictionary unchanged.")


async def main_menu(ctx: AppContext) -> None:
    """Show the main menu until the learner exits."""
    if ctx.selected_dictionary is None and ctx.dictionaries:
        ctx.selected_dictionary = next(iter(ctx.dictionaries.values()))

    while True:
        ctx.console.answer(MAIN_MENU)
        if ctx.selected_dictionary is not None:
            ctx.console.answer(f"Dictionary: {ctx.selected_dictionary.name}")

        choice = (await ctx.console.ask("> ")).strip()
        if choice == "0":
            return
        if choice == "5":
            await choose_dictionary(ctx)
        elif choice in HANDLERS:
            await HANDLERS[choice](ctx)
        else:
            ctx.console.answer("Choose a number from the menu.")
