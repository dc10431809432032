"""Main entry point for EigoMaster."""
import asyncio
import logging
import random
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from eigo_master.config import settings
from eigo_master.console import AppContext, Console
from eigo_master.db.store import PersistentStore
from eigo_master.exceptions import StorageUnavailable
from eigo_master.handlers.start import main_menu
from eigo_master.services.dictionary import load_dictionaries
from eigo_master.services.progress_tracker import StatsAggregator
from eigo_master.services.speech import ConsoleSpeaker

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Log to a rotating file; the terminal belongs to the quiz."""
    log_path = Path(settings.LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        ]
    )


async def main() -> int:
    """Main function to start the app."""
    logger.info("Starting EigoMaster...")
    console = Console()

    store = PersistentStore.sqlite(settings.DATABASE_PATH)
    try:
        await store.initialize()
    except StorageUnavailable:
        # Degraded mode: every write reports NotInitialized, the quiz still runs
        logger.exception("Store unavailable at %s", settings.DATABASE_PATH)
        console.answer("⚠️ Learning records cannot be saved on this device. Progress will not be kept.")

    dictionaries = load_dictionaries(settings.DICTIONARY_DIR)
    if not dictionaries:
        console.answer(f"📭 No dictionaries found in {settings.DICTIONARY_DIR}.")
        await store.close()
        return 1

    ctx = AppContext(
        console=console,
        settings=settings,
        store=store,
        stats=StatsAggregator(store),
        speaker=ConsoleSpeaker(console.answer),
        rng=random.Random(settings.SHUFFLE_SEED),
        dictionaries=dictionaries,
    )

    try:
        await main_menu(ctx)
    except EOFError:
        pass
    finally:
        await store.close()
        logger.info("EigoMaster stopped")
    return 0


def cli() -> None:
    setup_logging()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Stopped by user")


if __name__ == "__main__":
    cli()
