"""
Corpus-wide verse matching: edit-distance similarity, boosted by keyword overlap,
filtered by a confidence floor, top-N by descending confidence.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from core.metrics import normalized_similarity
from core.normalization import normalize_arabic
from core.quran_data import Verse

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 30.0      # strictly above this to be a candidate
MAX_CANDIDATES = 3
KEYWORD_BOOST = 10.0
KEYWORD_MIN_MATCHES = 3
KEYWORD_MIN_LENGTH = 3     # words of length <= 2 are not discriminative


@dataclass(frozen=True)
class MatchCandidate:
    verse: Verse
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verse_key": self.verse.verse_key,
            "confidence": round(self.confidence, 2),
            "verse": self.verse.to_dict(),
        }


def _content_words(normalized: str) -> List[str]:
    return [w for w in normalized.split(" ") if len(w) >= KEYWORD_MIN_LENGTH]


def _count_overlap(recognized_words: List[str], verse_words: List[str]) -> int:
    count = 0
    for word in recognized_words:
        if any(word in vw or vw in word for vw in verse_words):
            count += 1
    return count


def has_keyword_overlap(recognized_text: str, verse_text: str, min_matches: int = KEYWORD_MIN_MATCHES) -> bool:
    """
    True iff at least `min_matches` recognized content words appear in (or contain) some verse word.
    A booster only: on its own it admits too many short/common words.
    """
    recognized_words = _content_words(normalize_arabic(recognized_text))
    verse_words = _content_words(normalize_arabic(verse_text))
    return _count_overlap(recognized_words, verse_words) >= min_matches


class VerseMatcher:
    """
    Holds a corpus with each verse normalized once, so repeated matching
    (live transcripts) only pays for the distance computation.
    """

    def __init__(
        self,
        corpus: Iterable[Verse],
        min_confidence: float = MIN_CONFIDENCE,
        max_candidates: int = MAX_CANDIDATES,
        keyword_boost: float = KEYWORD_BOOST,
        keyword_min_matches: int = KEYWORD_MIN_MATCHES,
    ):
        self.min_confidence = min_confidence
        self.max_candidates = max_candidates
        self.keyword_boost = keyword_boost
        self.keyword_min_matches = keyword_min_matches
        self._entries: List[Tuple[Verse, str, List[str]]] = []
        for verse in corpus:
            norm = normalize_arabic(verse.text)
            self._entries.append((verse, norm, _content_words(norm)))

    def __len__(self) -> int:
        return len(self._entries)

    def match(self, recognized_text: str) -> List[MatchCandidate]:
        """
        Full linear scan. Returns at most `max_candidates`, sorted by descending confidence;
        ties keep corpus order. Empty list means "no match", not an error.
        """
        text_norm = normalize_arabic(recognized_text)
        recognized_words = _content_words(text_norm)
        candidates: List[MatchCandidate] = []
        for verse, verse_norm, verse_words in self._entries:
            sim = normalized_similarity(text_norm, verse_norm)
            if _count_overlap(recognized_words, verse_words) >= self.keyword_min_matches:
                confidence = min(100.0, sim + self.keyword_boost)
            else:
                confidence = sim
            if confidence > self.min_confidence:
                candidates.append(MatchCandidate(verse=verse, confidence=confidence))

        # sorted() is stable: equal confidences stay in corpus order
        candidates = sorted(candidates, key=lambda c: -c.confidence)[: self.max_candidates]
        if candidates:
            logger.debug(
                "Top match %s (%.1f) out of %d verses",
                candidates[0].verse.verse_key, candidates[0].confidence, len(self._entries),
            )
        return candidates


def match_verse(recognized_text: str, corpus: Iterable[Verse]) -> List[MatchCandidate]:
    """One-shot matching with default thresholds. Prefer VerseMatcher for repeated calls."""
    return VerseMatcher(corpus).match(recognized_text)
