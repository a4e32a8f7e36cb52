"""
Observability for streaming sessions.
"""

from metrics.streaming_metrics import (
    get_snapshot,
    record_session_open,
    record_session_close,
    record_evaluation_ms,
    record_transient_error,
    record_fatal_error,
    record_evaluation_error,
    record_superseded_evaluation,
    record_verse_detected,
)

__all__ = [
    "get_snapshot",
    "record_session_open",
    "record_session_close",
    "record_evaluation_ms",
    "record_transient_error",
    "record_fatal_error",
    "record_evaluation_error",
    "record_superseded_evaluation",
    "record_verse_detected",
]
