"""
Corpus-wide live detection: match the growing transcript against every verse.

Unlike a guided session, the text matched here is committed + interim, and every
update longer than MIN_LIVE_CHARS triggers a full corpus scan (VerseMatcher keeps the
normalized corpus cached). When the stream ends, the committed text is matched once
more and flagged complete.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from core.matching import MatchCandidate, VerseMatcher
from streaming.errors import RecognitionError, UnsupportedCapabilityError
from streaming.transcript_source import TranscriptSource, TranscriptUpdate

logger = logging.getLogger(__name__)

MIN_LIVE_CHARS = 3  # strictly longer than this


@dataclass
class LiveRecognitionResult:
    text: str
    partial_text: str
    matches: List[MatchCandidate] = field(default_factory=list)
    is_complete: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "partial_text": self.partial_text,
            "matches": [m.to_dict() for m in self.matches],
            "is_complete": self.is_complete,
        }


ResultListener = Callable[[LiveRecognitionResult], None]


class LiveRecognition:
    def __init__(self, matcher: VerseMatcher, source: Optional[TranscriptSource] = None,
                 min_chars: int = MIN_LIVE_CHARS):
        self.matcher = matcher
        self.source = source
        self.min_chars = min_chars
        self.committed = ""
        self.interim = ""
        self.active = False
        self.failed: Optional[RecognitionError] = None
        self.final_result: Optional[LiveRecognitionResult] = None
        self._listener: Optional[ResultListener] = None

    def full_text(self) -> str:
        return f"{self.committed} {self.interim}".strip()

    def ingest(self, update: TranscriptUpdate) -> Optional[str]:
        if self.failed:
            return None
        text = (update.text or "").strip()
        if update.is_final:
            if text:
                self.committed = f"{self.committed} {text}".strip()
            self.interim = ""
        else:
            self.interim = text
        full = self.full_text()
        return full if len(full) > self.min_chars else None

    def match(self, text: str, is_complete: bool = False) -> LiveRecognitionResult:
        result = LiveRecognitionResult(
            text=self.committed,
            partial_text="" if is_complete else self.interim,
            matches=self.matcher.match(text),
            is_complete=is_complete,
        )
        if self._listener:
            self._listener(result)
        return result

    def handle_update(self, update: TranscriptUpdate) -> Optional[LiveRecognitionResult]:
        text = self.ingest(update)
        if text is None:
            return None
        return self.match(text)

    def handle_error(self, error: RecognitionError) -> None:
        if not error.fatal:
            logger.debug("Ignoring transient recognition error: %s", error.code)
            return
        logger.warning("Fatal recognition error, stopping live detection: %s", error.code)
        self.reset()
        self.failed = error
        self.active = False
        raise error

    def handle_end(self) -> Optional[LiveRecognitionResult]:
        self.active = False
        if self.failed or not self.committed:
            return None
        self.final_result = self.match(self.committed, is_complete=True)
        return self.final_result

    def start(self, listener: Optional[ResultListener] = None) -> None:
        if self.source is None:
            raise UnsupportedCapabilityError("Speech recognition is not available: no transcript source")
        if self.active:
            return
        self._listener = listener
        self.reset()
        self.failed = None
        self.active = True
        self.source.start(self.handle_update, self.handle_error, self.handle_end)

    def stop(self) -> None:
        if self.source is not None and self.active:
            self.source.stop()

    def reset(self) -> None:
        self.committed = ""
        self.interim = ""
        self.final_result = None
