"""
Quran recitation API: text verification and verse detection.
The client runs speech recognition; this service matches and verifies transcripts.

HTTP: chapters, verses, session windows, /match (identify a verse), /verify (word-level check).
WebSocket: /ws/recite (guided session), /ws/detect (corpus-wide live detection).
"""
import logging
import threading
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

import config
import metrics.streaming_metrics as streaming_metrics
from core.chapters import get_all_chapters, get_chapter
from core.matching import VerseMatcher
from core.quran_data import QuranCorpus, get_corpus
from core.scoring import WORD_METRICS, map_words_to_original, verify_recitation
from streaming.session import make_policy
from streaming.websocket_server import build_ws_detect_handler, build_ws_recite_handler

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Quran Recitation API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class MatchRequest(BaseModel):
    text: str


class VerifyRequest(BaseModel):
    surah: int
    ayah: int
    text: str


def load_quran_corpus() -> QuranCorpus:
    """Dependency: the process-wide corpus from QURAN_DATA_PATH / quran.json."""
    return get_corpus(config.get_quran_path() or None)


def _current_corpus() -> QuranCorpus:
    # WebSocket handlers are not built through Depends; honour overrides the same way
    return app.dependency_overrides.get(load_quran_corpus, load_quran_corpus)()


_matcher_lock = threading.Lock()
_matcher: Optional[VerseMatcher] = None
_matcher_corpus: Optional[QuranCorpus] = None


def get_matcher(corpus: QuranCorpus) -> VerseMatcher:
    """One VerseMatcher per corpus; normalizing 6236 verses is done once."""
    global _matcher, _matcher_corpus
    with _matcher_lock:
        if _matcher is None or _matcher_corpus is not corpus:
            _matcher = VerseMatcher(
                corpus,
                min_confidence=config.MATCH_MIN_CONFIDENCE,
                max_candidates=config.MATCH_MAX_CANDIDATES,
                keyword_boost=config.KEYWORD_BOOST,
                keyword_min_matches=config.KEYWORD_MIN_MATCHES,
            )
            _matcher_corpus = corpus
        return _matcher


def build_policy(name: str):
    verify_options = config.verify_options()
    if verify_options["word_metric"] not in WORD_METRICS:
        raise ValueError(f"WORD_METRIC must be one of {WORD_METRICS}, got {verify_options['word_metric']!r}")
    if name == "sequential":
        return make_policy(name, detect_threshold=config.SEQUENTIAL_DETECT_THRESHOLD, **verify_options)
    if name == "best_match":
        return make_policy(
            name,
            floor=config.BEST_MATCH_FLOOR,
            progression_threshold=config.PROGRESSION_THRESHOLD,
            **verify_options,
        )
    return make_policy(name)


@app.get("/")
def health_check(corpus: QuranCorpus = Depends(load_quran_corpus)):
    return {
        "status": "ok",
        "message": "Quran Recitation API is running",
        "verses_loaded": len(corpus),
    }


@app.get("/chapters")
def list_chapters():
    return [c.to_dict() for c in get_all_chapters()]


@app.get("/chapters/{number}")
def chapter_detail(number: int, corpus: QuranCorpus = Depends(load_quran_corpus)):
    chapter = get_chapter(number)
    if chapter is None:
        raise HTTPException(status_code=404, detail=f"Chapter {number} not found")
    return {
        **chapter.to_dict(),
        "session_count": corpus.session_count(number, config.AYAHS_PER_SESSION),
    }


@app.get("/chapters/{surah}/sessions/{index}")
def chapter_session(surah: int, index: int, corpus: QuranCorpus = Depends(load_quran_corpus)):
    verses = corpus.session_window(surah, index, config.AYAHS_PER_SESSION)
    if not verses:
        raise HTTPException(status_code=404, detail=f"Session {index} of chapter {surah} not found")
    return {
        "surah": surah,
        "index": index,
        "session_count": corpus.session_count(surah, config.AYAHS_PER_SESSION),
        "verses": [v.to_dict() for v in verses],
    }


@app.get("/verses/{surah}/{ayah}")
def get_verse(surah: int, ayah: int, corpus: QuranCorpus = Depends(load_quran_corpus)):
    verse = corpus.get_verse(surah, ayah)
    if verse is None:
        raise HTTPException(status_code=404, detail=f"Ayah {surah}:{ayah} not found")
    next_verse = corpus.next_verse(verse)
    return {
        **verse.to_dict(),
        "words": [w for w in verse.text.split(" ") if w],
        "next_verse_key": next_verse.verse_key if next_verse else None,
    }


@app.post("/match")
def match(request: MatchRequest, corpus: QuranCorpus = Depends(load_quran_corpus)):
    candidates = get_matcher(corpus).match(request.text)
    return [c.to_dict() for c in candidates]


@app.post("/verify")
def verify(request: VerifyRequest, corpus: QuranCorpus = Depends(load_quran_corpus)):
    verse = corpus.get_verse(request.surah, request.ayah)
    if verse is None:
        raise HTTPException(status_code=404, detail=f"Ayah {request.surah}:{request.ayah} not found")
    result = verify_recitation(request.text, verse.text, **config.verify_options())
    return {
        "verse_key": verse.verse_key,
        **result.to_dict(),
        "words": map_words_to_original(verse.text, result.word_matches),
    }


_ws_recite_handler = build_ws_recite_handler(
    get_corpus=_current_corpus,
    build_policy=build_policy,
    session_size=config.AYAHS_PER_SESSION,
    min_eval_chars=config.MIN_EVAL_CHARS,
    verse_threshold=config.VERSE_CORRECT_THRESHOLD,
    idle_timeout=config.WS_IDLE_TIMEOUT,
    get_metrics=streaming_metrics,
)
app.websocket("/ws/recite")(_ws_recite_handler)

_ws_detect_handler = build_ws_detect_handler(
    get_matcher=lambda: get_matcher(_current_corpus()),
    idle_timeout=config.WS_IDLE_TIMEOUT,
    get_metrics=streaming_metrics,
)
app.websocket("/ws/detect")(_ws_detect_handler)


@app.get("/metrics/streaming", include_in_schema=False)
def metrics_streaming():
    """JSON snapshot: active sessions, evaluation latency, error counts, superseded evaluations."""
    return streaming_metrics.get_snapshot()


if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
