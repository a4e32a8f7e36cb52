"""
Service configuration via environment variables.
Loaded with python-dotenv; a .env file in the working directory is optional.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _float(name: str, default: float) -> float:
    return float(os.environ.get(name, str(default)))


def _int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


# ----- Server -----
PORT = _int("PORT", 8001)
HOST = os.environ.get("HOST", "0.0.0.0")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ----- Quran data -----
QURAN_DATA_PATH = os.environ.get("QURAN_DATA_PATH", "")
# If empty, we try quran.json then data/quran.json in cwd
def get_quran_path() -> str:
    if QURAN_DATA_PATH and os.path.isfile(QURAN_DATA_PATH):
        return QURAN_DATA_PATH
    for name in ("quran.json", os.path.join("data", "quran.json")):
        p = Path.cwd() / name
        if p.exists():
            return str(p)
    return ""

# ----- Verse matching -----
MATCH_MIN_CONFIDENCE = _float("MATCH_MIN_CONFIDENCE", 30.0)
MATCH_MAX_CANDIDATES = _int("MATCH_MAX_CANDIDATES", 3)
KEYWORD_BOOST = _float("KEYWORD_BOOST", 10.0)
KEYWORD_MIN_MATCHES = _int("KEYWORD_MIN_MATCHES", 3)

# ----- Verification (word 80 / verse 90 keep results comparable across versions) -----
WORD_CORRECT_THRESHOLD = _float("WORD_CORRECT_THRESHOLD", 80.0)
VERSE_CORRECT_THRESHOLD = _float("VERSE_CORRECT_THRESHOLD", 90.0)
# positional | levenshtein
WORD_METRIC = os.environ.get("WORD_METRIC", "positional")

# ----- Streaming sessions -----
SEQUENTIAL_DETECT_THRESHOLD = _float("SEQUENTIAL_DETECT_THRESHOLD", 70.0)
BEST_MATCH_FLOOR = _float("BEST_MATCH_FLOOR", 30.0)
PROGRESSION_THRESHOLD = _float("PROGRESSION_THRESHOLD", 35.0)
MIN_EVAL_CHARS = _int("MIN_EVAL_CHARS", 3)
AYAHS_PER_SESSION = _int("AYAHS_PER_SESSION", 10)
WS_IDLE_TIMEOUT = _float("WS_IDLE_TIMEOUT", 300.0)

# ----- CORS (production: set to specific origins) -----
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
def get_cors_origins() -> list:
    """Return list of allowed CORS origins from env."""
    if CORS_ORIGINS == "*":
        return ["*"]
    return [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]


def verify_options() -> dict:
    """Keyword arguments for verify_recitation / session policies."""
    return {
        "word_threshold": WORD_CORRECT_THRESHOLD,
        "verse_threshold": VERSE_CORRECT_THRESHOLD,
        "word_metric": WORD_METRIC,
    }
