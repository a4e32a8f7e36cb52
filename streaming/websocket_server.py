"""
WebSocket handlers for streaming recitation.

- /ws/recite: guided session over one window of a surah (sequential or best-match policy).
- /ws/detect: corpus-wide live detection.

The browser runs the speech recognizer and forwards its output as JSON messages:
  {"type": "transcript", "text": "...", "is_final": false}
  {"type": "error", "error": "no-speech"}
  {"type": "resume"}   (after a sequential detection)
  {"type": "end"}
Transcripts are folded into the session immediately; evaluation runs on the latest
text only, with at most one evaluation in flight per connection.
"""

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocket, WebSocketDisconnect

from core.matching import VerseMatcher
from core.quran_data import AYAHS_PER_SESSION, QuranCorpus
from core.scoring import VERSE_CORRECT_THRESHOLD
from streaming.errors import RecognitionError
from streaming.live_recognition import LiveRecognition, LiveRecognitionResult, MIN_LIVE_CHARS
from streaming.session import MIN_EVAL_CHARS, Assessment, RecitationSession
from streaming.transcript_source import TranscriptUpdate

logger = logging.getLogger(__name__)


class LatestOnlyEvaluator:
    """
    Runs `evaluate(text)` in the default executor, one call at a time.
    Text submitted while a call is running replaces any text still waiting,
    so a stale transcript is never evaluated after a newer one arrived.
    """

    def __init__(
        self,
        evaluate: Callable[[str], Any],
        on_result: Callable[[str, Any], Awaitable[None]],
        metrics: Optional[Any] = None,
    ):
        self._evaluate = evaluate
        self._on_result = on_result
        self._metrics = metrics
        self._pending: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, text: str) -> None:
        if self._pending is not None and self._metrics:
            self._metrics.record_superseded_evaluation()
        self._pending = text
        if not self.busy:
            self._task = asyncio.create_task(self._drain())

    def cancel_pending(self) -> None:
        self._pending = None

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def _drain(self) -> None:
        loop = asyncio.get_running_loop()
        while self._pending is not None:
            text, self._pending = self._pending, None
            t0 = time.perf_counter()
            try:
                result = await loop.run_in_executor(None, self._evaluate, text)
            except Exception:
                logger.exception("Evaluation failed for transcript of %d chars", len(text))
                if self._metrics:
                    self._metrics.record_evaluation_error()
                continue
            if self._metrics:
                self._metrics.record_evaluation_ms((time.perf_counter() - t0) * 1000)
            await self._on_result(text, result)


async def _send(websocket: WebSocket, payload: Dict[str, Any]) -> None:
    try:
        await websocket.send_json(payload)
    except (WebSocketDisconnect, RuntimeError):
        pass


async def _receive_message(websocket: WebSocket, timeout: float) -> Optional[Dict[str, Any]]:
    """Next client message as a dict; None on disconnect, timeout or 'end'. Ignored frames give {}."""
    try:
        frame = await asyncio.wait_for(websocket.receive(), timeout=timeout)
    except asyncio.TimeoutError:
        return None
    if frame["type"] == "websocket.disconnect":
        return None
    raw = frame.get("text")
    if raw is None:
        await _send(websocket, {"type": "warning", "message": "Binary message ignored"})
        return {}
    try:
        message = json.loads(raw)
    except ValueError:
        await _send(websocket, {"type": "warning", "message": "Invalid JSON message ignored"})
        return {}
    if not isinstance(message, dict):
        return {}
    if message.get("type") == "end":
        return None
    return message


def build_ws_recite_handler(
    get_corpus: Callable[[], QuranCorpus],
    build_policy: Callable[[str], Any],
    session_size: int = AYAHS_PER_SESSION,
    min_eval_chars: int = MIN_EVAL_CHARS,
    verse_threshold: float = VERSE_CORRECT_THRESHOLD,
    idle_timeout: float = 300.0,
    get_metrics: Optional[Any] = None,
) -> Callable:
    """
    Build the async WebSocket handler for /ws/recite.

    Args:
        get_corpus: Callable returning the loaded corpus.
        build_policy: Callable(name) -> session policy; raises ValueError for unknown names.
        session_size: Verses per session window.
        min_eval_chars: Shorter transcripts are not evaluated.
        verse_threshold: Accuracy counted as a completed verse in the summary.
        idle_timeout: Seconds without a client message before the session ends.
        get_metrics: Optional metrics module (record_* functions).

    Query params: surah (required), session (window index, default 0), policy (default sequential).
    """
    metrics = get_metrics

    async def handle_ws_recite(websocket: WebSocket) -> None:
        params = websocket.query_params
        try:
            surah = int(params.get("surah", ""))
            window_index = int(params.get("session", "0"))
        except ValueError:
            await websocket.close(code=1008, reason="surah and session must be integers")
            return
        verses = get_corpus().session_window(surah, window_index, session_size)
        if not verses:
            await websocket.close(code=1008, reason=f"No verses for surah {surah} session {window_index}")
            return
        try:
            policy = build_policy(params.get("policy", "sequential"))
        except ValueError as e:
            await websocket.close(code=1008, reason=str(e))
            return

        await websocket.accept()
        if metrics:
            metrics.record_session_open()
        session = RecitationSession(
            verses,
            policy=policy,
            min_eval_chars=min_eval_chars,
            verse_threshold=verse_threshold,
        )

        async def on_assessment(text: str, assessment: Optional[Assessment]) -> None:
            if assessment is None:
                return
            detected = session.apply(assessment)
            payload = {"type": "partial_result", "policy": policy.name, **assessment.to_dict()}
            payload["detected"] = detected
            await _send(websocket, payload)
            if not detected:
                return
            if metrics:
                metrics.record_verse_detected()
            if session.paused:
                evaluator.cancel_pending()
                await _send(websocket, {
                    "type": "detected",
                    "index": assessment.index,
                    "verse_key": assessment.verse.verse_key,
                    "accuracy": round(assessment.result.accuracy, 2),
                    "is_complete": session.is_complete,
                })

        evaluator = LatestOnlyEvaluator(session.assess, on_assessment, metrics)

        try:
            while True:
                message = await _receive_message(websocket, idle_timeout)
                if message is None:
                    break
                kind = message.get("type")
                if kind == "transcript":
                    update = TranscriptUpdate(text=str(message.get("text") or ""), is_final=bool(message.get("is_final")))
                    text = session.ingest(update)
                    if text is not None:
                        evaluator.submit(text)
                elif kind == "error":
                    try:
                        session.handle_error(RecognitionError(str(message.get("error") or "unknown")))
                    except RecognitionError as e:
                        if metrics:
                            metrics.record_fatal_error()
                        evaluator.cancel_pending()
                        await evaluator.wait()
                        await _send(websocket, {"type": "error", "fatal": True, "error": e.code, "message": e.message})
                        await websocket.close(code=1011)
                        return
                    if metrics:
                        metrics.record_transient_error()
                elif kind == "resume":
                    await evaluator.wait()
                    session.resume()
                    await _send(websocket, {"type": "resumed", "next_index": session.current_index + 1})

            await evaluator.wait()
            session.handle_end()
            await _send(websocket, {"type": "final_result", "result": session.summary().to_dict()})
        except WebSocketDisconnect:
            pass
        finally:
            if metrics:
                metrics.record_session_close()

    return handle_ws_recite


def build_ws_detect_handler(
    get_matcher: Callable[[], VerseMatcher],
    min_chars: int = MIN_LIVE_CHARS,
    idle_timeout: float = 300.0,
    get_metrics: Optional[Any] = None,
) -> Callable:
    """Build the async WebSocket handler for /ws/detect (corpus-wide live detection)."""
    metrics = get_metrics

    async def handle_ws_detect(websocket: WebSocket) -> None:
        await websocket.accept()
        if metrics:
            metrics.record_session_open()
        live = LiveRecognition(get_matcher(), min_chars=min_chars)

        async def on_matches(text: str, matches: list) -> None:
            result = LiveRecognitionResult(text=live.committed, partial_text=live.interim, matches=matches)
            await _send(websocket, {"type": "partial_result", **result.to_dict()})

        evaluator = LatestOnlyEvaluator(live.matcher.match, on_matches, metrics)

        try:
            while True:
                message = await _receive_message(websocket, idle_timeout)
                if message is None:
                    break
                kind = message.get("type")
                if kind == "transcript":
                    update = TranscriptUpdate(text=str(message.get("text") or ""), is_final=bool(message.get("is_final")))
                    text = live.ingest(update)
                    if text is not None:
                        evaluator.submit(text)
                elif kind == "error":
                    try:
                        live.handle_error(RecognitionError(str(message.get("error") or "unknown")))
                    except RecognitionError as e:
                        if metrics:
                            metrics.record_fatal_error()
                        evaluator.cancel_pending()
                        await evaluator.wait()
                        await _send(websocket, {"type": "error", "fatal": True, "error": e.code, "message": e.message})
                        await websocket.close(code=1011)
                        return
                    if metrics:
                        metrics.record_transient_error()

            await evaluator.wait()
            final = live.handle_end()
            await _send(websocket, {"type": "final_result", "result": final.to_dict() if final else None})
        except WebSocketDisconnect:
            pass
        finally:
            if metrics:
                metrics.record_session_close()

    return handle_ws_detect
