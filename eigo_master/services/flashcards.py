"""Automatic flashcard playback."""
import asyncio
import logging
import random
from enum import Enum
from typing import Callable, Optional, Sequence

from eigo_master.db.models import Word
from eigo_master.exceptions import EmptyPool
from eigo_master.services.speech import ENGLISH, JAPANESE, CompletionSignal, Speaker

logger = logging.getLogger(__name__)

CardCallback = Callable[[Word, int, int], None]


class FlashcardMode(str, Enum):
    SILENT = "silent"                  # advance on a fixed timer
    ENGLISH_AUDIO = "english_audio"    # speak English, advance when done
    JAPANESE_AUDIO = "japanese_audio"  # speak Japanese, advance when done


class FlashcardPlayer:
    """
    Cycles through a shuffled deck until stopped.

    Audio modes chain advancement off the speaker's completion callback;
    stop() cancels both the timer and any playback wait.
    """

    def __init__(
        self,
        words: Sequence[Word],
        mode: FlashcardMode,
        speaker: Speaker,
        *,
        interval: float = 3.0,
        audio_delay: float = 0.5,
        rng: Optional[random.Random] = None,
        on_card: Optional[CardCallback] = None,
    ):
        if not words:
            raise EmptyPool("No words to show")

        self.deck = list(words)
        (rng or random.Random()).shuffle(self.deck)
        self.mode = mode
        self.index = 0
        self.cards_shown = 0
        self._speaker = speaker
        self._interval = interval
        self._audio_delay = audio_delay
        self._on_card = on_card
        self._signal: Optional[CompletionSignal] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def current_word(self) -> Word:
        return self.deck[self.index]

    @property
    def is_playing(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Play in the background until stop()."""
        if self.is_playing:
            return self._task
        self._task = asyncio.create_task(self.play())
        return self._task

    async def stop(self) -> None:
        if self._signal is not None:
            self._signal.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait({self._task})
        self._task = None

    async def play(self, limit: Optional[int] = None) -> None:
        """Show cards in order, wrapping around; stop after `limit` cards if given."""
        logger.info("Flashcards started: %d cards, mode=%s", len(self.deck), self.mode.value)
        while limit is None or self.cards_shown < limit:
            word = self.current_word
            if self._on_card is not None:
                self._on_card(word, self.index, len(self.deck))
            self.cards_shown += 1

            if not await self._hold(word):
                return
            self.index = (self.index + 1) % len(self.deck)

    async def _hold(self, word: Word) -> bool:
        """Keep the card up for its time. False if playback was cancelled."""
        if self.mode is FlashcardMode.SILENT:
            await asyncio.sleep(self._interval)
            return True

        await asyncio.sleep(self._audio_delay)
        if self.mode is FlashcardMode.ENGLISH_AUDIO:
            text, language_tag = word.english, ENGLISH
        else:
            text, language_tag = word.japanese, JAPANESE

        signal = CompletionSignal()
        self._signal = signal
        try:
            self._speaker.speak(text, language_tag, signal.notify)
        except Exception:
            # A failed playback advances like a finished one
            logger.exception("Speech failed for %r", text)
            signal.notify()
        try:
            return await signal.wait()
        finally:
            self._signal = None
