"""Console I/O and the shared application context passed to handlers."""
import asyncio
import random
from dataclasses import dataclass
from typing import Callable, Optional

from eigo_master.config import Settings
from eigo_master.db.models import Dictionary
from eigo_master.db.store import PersistentStore
from eigo_master.services.progress_tracker import StatsAggregator
from eigo_master.services.speech import Speaker


class Console:
    """Line-based terminal I/O. Reading runs in a worker thread so timers keep firing."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ):
        self._input = input_func
        self._output = output_func

    async def ask(self, prompt: str) -> str:
        return await asyncio.to_thread(self._input, prompt)

    def answer(self, text: str) -> None:
        self._output(text)


@dataclass
class AppContext:
    console: Console
    settings: Settings
    store: PersistentStore
    stats: StatsAggregator
    speaker: Speaker
    rng: random.Random
    dictionaries: dict[str, Dictionary]
    selected_dictionary: Optional[Dictionary] = None
