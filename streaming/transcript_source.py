"""
Speech-recognition collaborator, injected into sessions instead of looked up globally.

A source pushes TranscriptUpdate objects (interim or final) and RecognitionError
signals through the callbacks it receives in start(), and calls on_end when the
stream stops, with or without warning.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union

from streaming.errors import RecognitionError


@dataclass(frozen=True)
class TranscriptUpdate:
    text: str
    is_final: bool = False


UpdateCallback = Callable[[TranscriptUpdate], None]
ErrorCallback = Callable[[RecognitionError], None]
EndCallback = Callable[[], None]

SourceEvent = Union[TranscriptUpdate, RecognitionError]


class TranscriptSource:
    """Capability interface; concrete sources wrap a recognizer."""

    def start(self, on_update: UpdateCallback, on_error: ErrorCallback, on_end: EndCallback) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class ReplayTranscriptSource(TranscriptSource):
    """
    Deterministic source: replays a scripted list of events synchronously inside start().
    stop() (e.g. from a callback after a detection) halts the replay; the next start()
    continues from the following event.
    """

    def __init__(self, events: Iterable[SourceEvent]):
        self._events: List[SourceEvent] = list(events)
        self._cursor = 0
        self._running = False
        self.start_count = 0
        self.stop_count = 0

    @property
    def exhausted(self) -> bool:
        return self._cursor >= len(self._events)

    def start(self, on_update: UpdateCallback, on_error: ErrorCallback, on_end: EndCallback) -> None:
        self.start_count += 1
        self._running = True
        try:
            while self._running and self._cursor < len(self._events):
                event = self._events[self._cursor]
                self._cursor += 1
                if isinstance(event, RecognitionError):
                    on_error(event)
                else:
                    on_update(event)
        finally:
            self._running = False
        on_end()

    def stop(self) -> None:
        self.stop_count += 1
        self._running = False
