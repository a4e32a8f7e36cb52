"""
Word-level verification of a recitation against one expected verse.

Positional alignment: recited word i is compared with expected word i.
- correct: word similarity above WORD_CORRECT_THRESHOLD
- wrong: both words present, similarity at or below the threshold
- missing: expected word with no recited word at that position
- extra: recited word past the end of the expected verse

accuracy = correct / expected words * 100 (extra words do not dilute it);
the verse passes at VERSE_CORRECT_THRESHOLD.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rapidfuzz.distance import Levenshtein

from core.normalization import normalize_arabic

WORD_CORRECT_THRESHOLD = 80.0    # strictly above → correct word
VERSE_CORRECT_THRESHOLD = 90.0   # at or above → verse recited correctly
FAST_PATH_MIN_LENGTH = 10        # both normalized texts must be longer than this

WORD_METRICS = ("positional", "levenshtein")

MISTAKE_MISSING = "missing"
MISTAKE_WRONG = "wrong"
MISTAKE_EXTRA = "extra"


@dataclass
class WordMatch:
    word: str
    position: int
    is_correct: bool
    confidence: float
    expected_word: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "position": self.position,
            "is_correct": self.is_correct,
            "confidence": round(self.confidence, 2),
            "expected_word": self.expected_word,
        }


@dataclass
class Mistake:
    position: int
    expected: str
    received: str
    type: str  # missing | wrong | extra

    def to_dict(self) -> Dict[str, Any]:
        return {"position": self.position, "expected": self.expected, "received": self.received, "type": self.type}


@dataclass
class VerificationResult:
    is_correct: bool
    accuracy: float
    word_matches: List[WordMatch] = field(default_factory=list)
    mistakes: List[Mistake] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_correct": self.is_correct,
            "accuracy": round(self.accuracy, 2),
            "word_matches": [w.to_dict() for w in self.word_matches],
            "mistakes": [m.to_dict() for m in self.mistakes],
        }


def word_similarity(word1: str, word2: str) -> float:
    """Same-position character matches over the longer word, as a percentage."""
    if word1 == word2:
        return 100.0
    max_len = max(len(word1), len(word2))
    if max_len == 0:
        return 100.0
    matches = sum(1 for a, b in zip(word1, word2) if a == b)
    return matches / max_len * 100.0


def _levenshtein_word_similarity(word1: str, word2: str) -> float:
    return Levenshtein.normalized_similarity(word1, word2) * 100.0


def _fast_path_result(recited_norm: str, expected_norm: str, expected_words: List[str]) -> VerificationResult:
    """
    Whole verse found inside the transcript. Expected words come first so that
    highlighting lines up with the verse; the surrounding noise words follow as
    unscored positions (not mistakes).
    """
    start = recited_norm.find(expected_norm)
    noise = recited_norm[:start].split() + recited_norm[start + len(expected_norm):].split()
    n_extra = max(0, len(recited_norm.split()) - len(expected_words))
    noise = (noise + [""] * n_extra)[:n_extra]

    word_matches = [
        WordMatch(word=w, position=i, is_correct=True, confidence=100.0, expected_word=w)
        for i, w in enumerate(expected_words)
    ]
    for j, w in enumerate(noise):
        word_matches.append(WordMatch(word=w, position=len(expected_words) + j, is_correct=False, confidence=0.0))
    return VerificationResult(is_correct=True, accuracy=100.0, word_matches=word_matches, mistakes=[])


def verify_recitation(
    recited_text: str,
    expected_text: str,
    word_threshold: float = WORD_CORRECT_THRESHOLD,
    verse_threshold: float = VERSE_CORRECT_THRESHOLD,
    word_metric: str = "positional",
) -> VerificationResult:
    """
    Verify recited text against the expected verse, word by word.
    Never raises on text input; unknown word_metric raises ValueError.
    """
    if word_metric not in WORD_METRICS:
        raise ValueError(f"word_metric must be one of {WORD_METRICS}, got {word_metric!r}")
    compare = word_similarity if word_metric == "positional" else _levenshtein_word_similarity

    recited_norm = normalize_arabic(recited_text)
    expected_norm = normalize_arabic(expected_text)
    expected_words = expected_norm.split()

    # The recognizer often captures the whole verse plus leading/trailing noise
    if (
        len(recited_norm) > FAST_PATH_MIN_LENGTH
        and len(expected_norm) > FAST_PATH_MIN_LENGTH
        and expected_norm in recited_norm
    ):
        return _fast_path_result(recited_norm, expected_norm, expected_words)

    recited_words = recited_norm.split()
    word_matches: List[WordMatch] = []
    mistakes: List[Mistake] = []
    correct_count = 0

    for i in range(max(len(recited_words), len(expected_words))):
        recited = recited_words[i] if i < len(recited_words) else ""
        expected = expected_words[i] if i < len(expected_words) else ""

        if not expected:
            word_matches.append(WordMatch(word=recited, position=i, is_correct=False, confidence=0.0))
            mistakes.append(Mistake(position=i, expected="", received=recited, type=MISTAKE_EXTRA))
        elif not recited:
            word_matches.append(
                WordMatch(word="", position=i, is_correct=False, confidence=0.0, expected_word=expected)
            )
            mistakes.append(Mistake(position=i, expected=expected, received="", type=MISTAKE_MISSING))
        else:
            sim = compare(recited, expected)
            is_correct = sim > word_threshold
            if is_correct:
                correct_count += 1
            else:
                mistakes.append(Mistake(position=i, expected=expected, received=recited, type=MISTAKE_WRONG))
            word_matches.append(
                WordMatch(word=recited, position=i, is_correct=is_correct, confidence=sim, expected_word=expected)
            )

    if expected_words:
        accuracy = correct_count / len(expected_words) * 100.0
    else:
        # Nothing to recite: only an empty recitation matches it
        accuracy = 100.0 if not recited_words else 0.0
    accuracy = max(0.0, min(100.0, accuracy))

    return VerificationResult(
        is_correct=accuracy >= verse_threshold,
        accuracy=accuracy,
        word_matches=word_matches,
        mistakes=mistakes,
    )


def map_words_to_original(original_text: str, word_matches: List[WordMatch]) -> List[Dict[str, Any]]:
    """
    Pair each original (diacritized) word with the status of the aligned position,
    for highlighting. Positions without a match count as incorrect.
    """
    original_words = [w for w in (original_text or "").split(" ") if w]
    out = []
    for i, word in enumerate(original_words):
        match = word_matches[i] if i < len(word_matches) else None
        out.append({
            "word": word,
            "is_correct": match.is_correct if match else False,
            "confidence": match.confidence if match else 0.0,
        })
    return out
