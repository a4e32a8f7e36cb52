"""
Streaming layer: transcript sources, recitation sessions and live detection.

- transcript_source: TranscriptSource capability and a replaying fake.
- session: RecitationSession with sequential / best-match policies.
- live_recognition: corpus-wide detection over a growing transcript.
- websocket_server: handlers for /ws/recite and /ws/detect (import separately to avoid pulling FastAPI).
"""

from streaming.errors import RecognitionError, UnsupportedCapabilityError
from streaming.live_recognition import LiveRecognition, LiveRecognitionResult
from streaming.session import (
    Assessment,
    BestMatchPolicy,
    RecitationSession,
    SequentialPolicy,
    SessionSummary,
    make_policy,
)
from streaming.transcript_source import ReplayTranscriptSource, TranscriptSource, TranscriptUpdate

__all__ = [
    "Assessment",
    "BestMatchPolicy",
    "LiveRecognition",
    "LiveRecognitionResult",
    "RecognitionError",
    "RecitationSession",
    "ReplayTranscriptSource",
    "SequentialPolicy",
    "SessionSummary",
    "TranscriptSource",
    "TranscriptUpdate",
    "UnsupportedCapabilityError",
    "make_policy",
]
