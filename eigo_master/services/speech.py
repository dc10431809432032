"""Speech playback contract and completion signalling."""
import asyncio
from typing import Callable, Protocol

ENGLISH = "en-US"
JAPANESE = "ja-JP"


class Speaker(Protocol):
    """
    Text-to-speech capability.

    `on_complete` must be called exactly once, when playback ends or fails.
    """

    def speak(self, text: str, language_tag: str, on_complete: Callable[[], None]) -> None:
        ...


class ConsoleSpeaker:
    """Prints the text instead of speaking it; completes immediately."""

    def __init__(self, output: Callable[[str], None] = print):
        self._output = output

    def speak(self, text: str, language_tag: str, on_complete: Callable[[], None]) -> None:
        try:
            self._output(f"🔊 [{language_tag}] {text}")
        finally:
            on_complete()


class CompletionSignal:
    """
    At-most-once notification of playback completion.

    Only the first notify() or cancel() has an effect. Create it inside a
    running event loop.
    """

    def __init__(self):
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    def notify(self) -> None:
        if not self._future.done():
            self._future.set_result(True)

    def notify_threadsafe(self) -> None:
        """notify() for callbacks fired from a speech engine's own thread."""
        self._loop.call_soon_threadsafe(self.notify)

    def cancel(self) -> None:
        if not self._future.done():
            self._future.set_result(False)

    async def wait(self) -> bool:
        """True when playback completed, False when cancelled."""
        return await asyncio.shield(self._future)

