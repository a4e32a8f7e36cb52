"""
Streaming session observability.

Thread-safe module-level counters and latency samples for /ws/recite and /ws/detect,
exposed via GET /metrics/streaming (JSON snapshot).
"""

import threading
from collections import deque
from typing import Any, Dict

_lock = threading.Lock()
_active_sessions = 0
_evaluation_samples: deque = deque(maxlen=1000)  # last N evaluation durations (ms)
_transient_error_count = 0
_fatal_error_count = 0
_superseded_evaluations = 0
_verses_detected = 0
_evaluation_error_count = 0


def record_session_open() -> None:
    global _active_sessions
    with _lock:
        _active_sessions += 1


def record_session_close() -> None:
    global _active_sessions
    with _lock:
        _active_sessions = max(0, _active_sessions - 1)


def record_evaluation_ms(duration_ms: float) -> None:
    """One policy/matcher evaluation, end to end."""
    with _lock:
        _evaluation_samples.append(duration_ms)


def record_transient_error() -> None:
    global _transient_error_count
    with _lock:
        _transient_error_count += 1


def record_fatal_error() -> None:
    global _fatal_error_count
    with _lock:
        _fatal_error_count += 1


def record_evaluation_error() -> None:
    """An evaluation raised; the connection keeps going with the next transcript."""
    global _evaluation_error_count
    with _lock:
        _evaluation_error_count += 1


def record_superseded_evaluation() -> None:
    """A pending evaluation was replaced by a newer transcript before it ran."""
    global _superseded_evaluations
    with _lock:
        _superseded_evaluations += 1


def record_verse_detected() -> None:
    global _verses_detected
    with _lock:
        _verses_detected += 1


def reset() -> None:
    global _active_sessions, _transient_error_count, _fatal_error_count
    global _superseded_evaluations, _verses_detected, _evaluation_error_count
    with _lock:
        _active_sessions = 0
        _evaluation_samples.clear()
        _transient_error_count = 0
        _fatal_error_count = 0
        _superseded_evaluations = 0
        _verses_detected = 0
        _evaluation_error_count = 0


def get_snapshot() -> Dict[str, Any]:
    """JSON-serializable snapshot, used by GET /metrics/streaming."""
    with _lock:
        samples = list(_evaluation_samples)
        snapshot = {
            "active_sessions": _active_sessions,
            "transient_error_count": _transient_error_count,
            "fatal_error_count": _fatal_error_count,
            "superseded_evaluations": _superseded_evaluations,
            "verses_detected": _verses_detected,
            "evaluation_error_count": _evaluation_error_count,
        }
    n = len(samples)
    if n == 0:
        avg_ms = None
        p95_ms = None
    else:
        avg_ms = round(sum(samples) / n, 2)
        sorted_s = sorted(samples)
        idx = max(0, int(0.95 * n) - 1)
        p95_ms = round(sorted_s[idx], 2)
    snapshot.update({
        "avg_evaluation_ms": avg_ms,
        "p95_evaluation_ms": p95_ms,
        "evaluation_sample_count": n,
    })
    return snapshot
