"""
Guided multi-verse recitation session driven by incremental transcripts.

The session keeps a committed transcript (all final segments so far) and the latest
interim segment. Each update evaluates "committed if non-empty, else interim"
through a policy:

- SequentialPolicy: only the verse after the last confirmed one is verified; at
  DETECT_THRESHOLD the verse is detected, the session pauses (the recognizer is
  stopped) and the transcript is reset before the next verse.
- BestMatchPolicy: every verse in the window is verified; the best one above
  BEST_MATCH_FLOOR is tracked, and recorded unless a better result already exists
  (the next expected verse may overwrite above PROGRESSION_THRESHOLD).
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from core.quran_data import Verse
from core.scoring import VERSE_CORRECT_THRESHOLD, VerificationResult, verify_recitation
from streaming.errors import RecognitionError, UnsupportedCapabilityError
from streaming.transcript_source import SourceEvent, TranscriptSource, TranscriptUpdate

logger = logging.getLogger(__name__)

DETECT_THRESHOLD = 70.0
BEST_MATCH_FLOOR = 30.0
PROGRESSION_THRESHOLD = 35.0
MIN_EVAL_CHARS = 3


@dataclass
class Assessment:
    """One policy evaluation: which window position was checked and whether it counts as detected."""
    index: int
    verse: Verse
    result: VerificationResult
    text: str
    detected: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "verse_key": self.verse.verse_key,
            "accuracy": round(self.result.accuracy, 2),
            "is_correct": self.result.is_correct,
            "detected": self.detected,
            "text": self.text,
            "result": self.result.to_dict(),
        }


@dataclass
class SessionSummary:
    results: Dict[int, VerificationResult]
    texts: Dict[int, str]
    current_index: int
    completed_count: int
    average_accuracy: float
    is_complete: bool
    last_assessment: Optional[Assessment] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": {str(i): r.to_dict() for i, r in sorted(self.results.items())},
            "texts": {str(i): t for i, t in sorted(self.texts.items())},
            "current_index": self.current_index,
            "completed_count": self.completed_count,
            "average_accuracy": round(self.average_accuracy, 2),
            "is_complete": self.is_complete,
            "last_assessment": self.last_assessment.to_dict() if self.last_assessment else None,
        }


class SequentialPolicy:
    name = "sequential"
    pauses_on_detection = True

    def __init__(self, detect_threshold: float = DETECT_THRESHOLD, **verify_options: Any):
        self.detect_threshold = detect_threshold
        self.verify_options = verify_options

    def assess(self, text: str, session: "RecitationSession") -> Optional[Assessment]:
        next_index = session.current_index + 1
        if next_index >= len(session.verses):
            return None
        verse = session.verses[next_index]
        result = verify_recitation(text, verse.text, **self.verify_options)
        return Assessment(
            index=next_index,
            verse=verse,
            result=result,
            text=text,
            detected=result.accuracy >= self.detect_threshold,
        )


class BestMatchPolicy:
    name = "best_match"
    pauses_on_detection = False

    def __init__(
        self,
        floor: float = BEST_MATCH_FLOOR,
        progression_threshold: float = PROGRESSION_THRESHOLD,
        **verify_options: Any,
    ):
        self.floor = floor
        self.progression_threshold = progression_threshold
        self.verify_options = verify_options

    def assess(self, text: str, session: "RecitationSession") -> Optional[Assessment]:
        next_index = session.current_index + 1
        best_index = -1
        best_result: Optional[VerificationResult] = None
        best_rank = None
        for i, verse in enumerate(session.verses):
            result = verify_recitation(text, verse.text, **self.verify_options)
            if result.accuracy <= self.floor:
                continue
            # Committed text keeps growing, so earlier verses stay at 100 once recited.
            # On equal scores: the next expected verse, then a position not yet recorded,
            # then the earliest (strict >).
            rank = (result.accuracy, i == next_index, i not in session.results)
            if best_rank is None or rank > best_rank:
                best_index, best_result, best_rank = i, result, rank
        if best_result is None:
            return None

        existing = session.results.get(best_index)
        is_next = best_index == next_index
        detected = (
            existing is None
            or best_result.accuracy > existing.accuracy
            or (is_next and best_result.accuracy > self.progression_threshold)
        )
        return Assessment(
            index=best_index,
            verse=session.verses[best_index],
            result=best_result,
            text=text,
            detected=detected,
        )


POLICIES = {
    SequentialPolicy.name: SequentialPolicy,
    BestMatchPolicy.name: BestMatchPolicy,
}


def make_policy(name: str, **options: Any):
    """Build a policy by name ('sequential' | 'best_match')."""
    try:
        policy_cls = POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown session policy {name!r}; expected one of {sorted(POLICIES)}") from None
    return policy_cls(**options)


AssessmentListener = Callable[[Assessment], None]


class RecitationSession:
    """
    Owns one session's transcript and detection state; nothing is shared across sessions.
    Evaluation is synchronous: handle_update returns once the policy has run.
    """

    def __init__(
        self,
        verses: Sequence[Verse],
        policy=None,
        source: Optional[TranscriptSource] = None,
        min_eval_chars: int = MIN_EVAL_CHARS,
        verse_threshold: float = VERSE_CORRECT_THRESHOLD,
    ):
        self.verses: List[Verse] = list(verses)
        self.policy = policy or SequentialPolicy()
        self.source = source
        self.min_eval_chars = min_eval_chars
        self.verse_threshold = verse_threshold

        self.committed = ""
        self.interim = ""
        self.current_index = -1
        self.current_candidate: Optional[int] = None
        self.results: Dict[int, VerificationResult] = {}
        self.texts: Dict[int, str] = {}
        self.last_assessment: Optional[Assessment] = None
        self.paused = False
        self.active = False
        self.failed: Optional[RecognitionError] = None
        self.transient_error_count = 0
        self._listener: Optional[AssessmentListener] = None

    # ----- transcript state -----

    def text_to_evaluate(self) -> str:
        return self.committed if self.committed else self.interim

    def _reset_transcript(self) -> None:
        self.committed = ""
        self.interim = ""

    def ingest(self, update: TranscriptUpdate) -> Optional[str]:
        """
        Fold one update into the transcript. Returns the text to evaluate,
        or None when paused/failed or the text is too short to mean anything.
        """
        if self.paused or self.failed:
            return None
        text = (update.text or "").strip()
        if update.is_final:
            if text:
                self.committed = f"{self.committed} {text}".strip()
            self.interim = ""
        else:
            self.interim = text
        candidate = self.text_to_evaluate()
        if len(candidate) < self.min_eval_chars:
            return None
        return candidate

    # ----- evaluation -----

    def assess(self, text: str) -> Optional[Assessment]:
        """Run the policy on `text`. Reads session state, changes nothing."""
        return self.policy.assess(text, self)

    def apply(self, assessment: Optional[Assessment]) -> bool:
        """Record an assessment; returns True when it marked a verse as detected."""
        if assessment is None or self.paused or self.failed:
            return False
        self.last_assessment = assessment
        self.current_candidate = assessment.index
        if self._listener:
            self._listener(assessment)
        if not assessment.detected:
            return False

        self.results[assessment.index] = assessment.result
        self.texts[assessment.index] = assessment.text
        self.current_index = assessment.index
        logger.info(
            "Verse %s detected at position %d (%.1f%%, policy=%s)",
            assessment.verse.verse_key, assessment.index, assessment.result.accuracy, self.policy.name,
        )
        if self.policy.pauses_on_detection:
            self.paused = True
            self._reset_transcript()
            if self.source is not None and self.active:
                self.source.stop()
        return True

    def handle_update(self, update: TranscriptUpdate) -> Optional[Assessment]:
        text = self.ingest(update)
        if text is None:
            return None
        assessment = self.assess(text)
        self.apply(assessment)
        return assessment

    def handle_error(self, error: RecognitionError) -> None:
        """Transient errors are ignored; a fatal one discards the session state and propagates."""
        if not error.fatal:
            self.transient_error_count += 1
            logger.debug("Ignoring transient recognition error: %s", error.code)
            return
        logger.warning("Fatal recognition error, ending session: %s", error.code)
        self._discard()
        self.failed = error
        self.active = False
        raise error

    def handle_end(self) -> Optional[Assessment]:
        """
        Stream ended. Unless paused on a detection, evaluate whatever text was accumulated
        one last time so the caller always gets a best-effort result.
        """
        self.active = False
        if self.paused or self.failed:
            return None
        text = self.text_to_evaluate()
        if len(text) < self.min_eval_chars:
            return None
        assessment = self.assess(text)
        self.apply(assessment)
        return assessment

    # ----- lifecycle -----

    def start(self, listener: Optional[AssessmentListener] = None) -> None:
        """Start listening through the injected source."""
        if self.source is None:
            raise UnsupportedCapabilityError("Speech recognition is not available: no transcript source")
        if self.active:
            return
        self._listener = listener
        self.failed = None
        self.paused = False
        self._reset_transcript()
        self.active = True
        self.source.start(self.handle_update, self.handle_error, self.handle_end)

    def resume(self) -> None:
        """Continue with the next verse after a sequential detection."""
        if not self.paused:
            return
        self.paused = False
        self._reset_transcript()
        if self.source is not None:
            self.active = True
            self.source.start(self.handle_update, self.handle_error, self.handle_end)

    def stop(self) -> None:
        if self.source is not None and self.active:
            self.source.stop()
        self.active = False

    def _discard(self) -> None:
        self._reset_transcript()
        self.current_index = -1
        self.current_candidate = None
        self.results = {}
        self.texts = {}
        self.last_assessment = None
        self.paused = False

    def reset(self) -> None:
        """Retry the session from the first verse."""
        self._discard()
        self.failed = None

    def run(self, events: Iterable[SourceEvent], auto_resume: bool = False) -> "SessionSummary":
        """
        Feed events without a source (tests, offline replays) and end the stream.
        With auto_resume, a sequential detection continues straight to the next verse
        instead of ignoring the rest of the events.
        """
        for event in events:
            if isinstance(event, RecognitionError):
                self.handle_error(event)
                continue
            self.handle_update(event)
            if self.paused and auto_resume:
                self.paused = False
                self._reset_transcript()
        self.handle_end()
        return self.summary()

    # ----- results -----

    @property
    def is_complete(self) -> bool:
        return bool(self.verses) and self.current_index >= len(self.verses) - 1

    def summary(self) -> SessionSummary:
        accuracies = [r.accuracy for r in self.results.values()]
        return SessionSummary(
            results=dict(self.results),
            texts=dict(self.texts),
            current_index=self.current_index,
            completed_count=sum(1 for a in accuracies if a >= self.verse_threshold),
            average_accuracy=sum(accuracies) / len(accuracies) if accuracies else 0.0,
            is_complete=self.is_complete,
            last_assessment=self.last_assessment,
        )
