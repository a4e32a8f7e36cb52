"""
Verse corpus: immutable records loaded once, kept in canonical Quran order.

The corpus file is the output of scripts/download_quran_data.py ({"ayahs": [...]}),
a bare list of verse records, or a raw AlQuran Cloud response ({"data": {"surahs": [...]}}).
"""
import json
import logging
import math
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

AYAHS_PER_SESSION = 10


@dataclass(frozen=True)
class Verse:
    """One ayah. `juz` and `page` are reference-only; matching reads `text`."""
    number: int
    text: str
    number_in_surah: int
    surah: int
    juz: int = 0
    page: int = 0

    @property
    def verse_key(self) -> str:
        return f"{self.surah}:{self.number_in_surah}"

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["verse_key"] = self.verse_key
        return out

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Verse":
        """Accept both the camelCase download format and snake_case."""
        try:
            return cls(
                number=int(record["number"]),
                text=str(record["text"]),
                number_in_surah=int(record.get("numberInSurah", record.get("number_in_surah"))),
                surah=int(record["surah"]),
                juz=int(record.get("juz") or 0),
                page=int(record.get("page") or 0),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed verse record: {record!r}") from e


class QuranCorpus:
    """Read-only, ordered collection of verses with lookups by reference and by surah."""

    def __init__(self, verses: Sequence[Verse]):
        self._verses: Tuple[Verse, ...] = tuple(verses)
        self._by_ref: Dict[Tuple[int, int], Verse] = {}
        self._by_surah: Dict[int, List[Verse]] = {}
        self._position: Dict[Tuple[int, int], int] = {}
        for i, v in enumerate(self._verses):
            key = (v.surah, v.number_in_surah)
            self._by_ref[key] = v
            self._position[key] = i
            self._by_surah.setdefault(v.surah, []).append(v)

    @classmethod
    def from_records(cls, records: Sequence[Dict[str, Any]]) -> "QuranCorpus":
        return cls([Verse.from_record(r) for r in records])

    @property
    def verses(self) -> Tuple[Verse, ...]:
        return self._verses

    def __len__(self) -> int:
        return len(self._verses)

    def __iter__(self) -> Iterator[Verse]:
        return iter(self._verses)

    def get_verse(self, surah: int, ayah: int) -> Optional[Verse]:
        return self._by_ref.get((surah, ayah))

    def get_surah(self, surah: int) -> List[Verse]:
        return list(self._by_surah.get(surah, []))

    def next_verse(self, verse: Verse) -> Optional[Verse]:
        """Next verse in canonical order (crosses surah boundaries); None after the last one."""
        i = self._position.get((verse.surah, verse.number_in_surah))
        if i is None or i + 1 >= len(self._verses):
            return None
        return self._verses[i + 1]

    def session_count(self, surah: int, size: int = AYAHS_PER_SESSION) -> int:
        n = len(self._by_surah.get(surah, []))
        return math.ceil(n / size) if size > 0 else 0

    def session_window(self, surah: int, index: int, size: int = AYAHS_PER_SESSION) -> List[Verse]:
        """Verses [index*size, index*size + size) of a surah. Empty when out of range."""
        if size <= 0 or index < 0:
            return []
        verses = self._by_surah.get(surah, [])
        start = index * size
        return list(verses[start:start + size])


def records_from_payload(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if isinstance(data.get("ayahs"), list):
            return data["ayahs"]
        surahs = (data.get("data") or {}).get("surahs") if isinstance(data.get("data"), dict) else None
        if isinstance(surahs, list):
            records = []
            number = 1
            for surah in surahs:
                for ayah in surah.get("ayahs", []):
                    records.append({
                        "number": ayah.get("number", number),
                        "text": ayah.get("text", ""),
                        "numberInSurah": ayah.get("numberInSurah"),
                        "juz": ayah.get("juz"),
                        "page": ayah.get("page"),
                        "surah": surah.get("number"),
                    })
                    number += 1
            return records
    raise ValueError("Unrecognized corpus format: expected a list, {'ayahs': [...]} or {'data': {'surahs': [...]}}")


def load_corpus(path: Union[str, Path]) -> QuranCorpus:
    """Read a corpus JSON file. Raises FileNotFoundError / ValueError; never returns partial data."""
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    corpus = QuranCorpus.from_records(records_from_payload(data))
    logger.info("Loaded %d verses from %s", len(corpus), p)
    return corpus


_cache: Dict[str, QuranCorpus] = {}
_cache_lock = threading.Lock()


def get_corpus(path: Optional[Union[str, Path]] = None) -> QuranCorpus:
    """
    Process-wide corpus, loaded on first use and reused afterwards (no teardown).
    With no path, returns a shared empty corpus.
    """
    key = str(Path(path).resolve()) if path else ""
    with _cache_lock:
        corpus = _cache.get(key)
        if corpus is None:
            if key:
                corpus = load_corpus(key)
            else:
                logger.warning("No Quran data path configured; using an empty corpus")
                corpus = QuranCorpus([])
            _cache[key] = corpus
    return corpus


def clear_corpus_cache() -> None:
    with _cache_lock:
        _cache.clear()
