"""
Benchmark runner: run verse matching and verification over labeled transcripts
and output a structured report (hit rates, accuracy distribution, worst cases).
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from core.matching import VerseMatcher
from core.quran_data import QuranCorpus, Verse
from core.scoring import verify_recitation

logger = logging.getLogger(__name__)


@dataclass
class SampleResult:
    """One labeled transcript: expected verse, top match, verification accuracy."""
    verse_key: str
    transcript: str
    top1: Optional[str]
    top3: List[str]
    accuracy: float

    @property
    def top1_hit(self) -> bool:
        return self.top1 == self.verse_key

    @property
    def top3_hit(self) -> bool:
        return self.verse_key in self.top3


@dataclass
class BenchmarkReport:
    n_samples: int = 0
    n_skipped: int = 0
    top1_hits: int = 0
    top3_hits: int = 0
    no_match_count: int = 0
    accuracy_mean: float = 0.0
    accuracy_median: float = 0.0
    accuracy_p95: float = 0.0
    worst_cases: List[Dict[str, Any]] = field(default_factory=list)  # lowest accuracy
    missed_matches: List[Dict[str, Any]] = field(default_factory=list)  # expected verse not in top 3

    @property
    def top1_rate(self) -> float:
        return self.top1_hits / self.n_samples if self.n_samples else 0.0

    @property
    def top3_rate(self) -> float:
        return self.top3_hits / self.n_samples if self.n_samples else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_samples": self.n_samples,
            "n_skipped": self.n_skipped,
            "top1_rate": round(self.top1_rate, 4),
            "top3_rate": round(self.top3_rate, 4),
            "no_match_count": self.no_match_count,
            "accuracy_mean": round(self.accuracy_mean, 2),
            "accuracy_median": round(self.accuracy_median, 2),
            "accuracy_p95": round(self.accuracy_p95, 2),
            "worst_cases": self.worst_cases,
            "missed_matches": self.missed_matches,
        }


def _percentile(sorted_values: List[float], p: float) -> float:
    """p in [0, 100], linear interpolation between closest ranks."""
    if not sorted_values:
        return 0.0
    k = (len(sorted_values) - 1) * p / 100.0
    f = int(k)
    c = f + 1 if f + 1 < len(sorted_values) else f
    return sorted_values[f] + (k - f) * (sorted_values[c] - sorted_values[f]) if c != f else sorted_values[f]


def _get_transcript(item: Dict[str, Any]) -> str:
    return (item.get("transcript") or item.get("hypothesis") or "").strip()


def _resolve_verse(item: Dict[str, Any], corpus: QuranCorpus) -> Optional[Verse]:
    key = item.get("verse_key")
    try:
        if key:
            surah, ayah = (int(part) for part in str(key).split(":"))
        else:
            surah, ayah = int(item["surah"]), int(item["ayah"])
    except (KeyError, TypeError, ValueError):
        return None
    return corpus.get_verse(surah, ayah)


def run_benchmark(
    samples: Sequence[Dict[str, Any]],
    corpus: QuranCorpus,
    matcher: Optional[VerseMatcher] = None,
    worst_n: int = 10,
    **verify_options: Any,
) -> BenchmarkReport:
    """
    samples: list of {"verse_key": "1:2" | "surah"+"ayah", "transcript": "..."}.
    Samples with no transcript or an unknown verse are skipped and counted.
    """
    matcher = matcher or VerseMatcher(corpus)
    report = BenchmarkReport()
    results: List[SampleResult] = []

    for i, item in enumerate(samples):
        transcript = _get_transcript(item)
        verse = _resolve_verse(item, corpus)
        if verse is None or not transcript:
            logger.warning("Skipping sample %d: unknown verse or empty transcript", i)
            report.n_skipped += 1
            continue
        candidates = matcher.match(transcript)
        keys = [c.verse.verse_key for c in candidates]
        accuracy = verify_recitation(transcript, verse.text, **verify_options).accuracy
        results.append(SampleResult(
            verse_key=verse.verse_key,
            transcript=transcript,
            top1=keys[0] if keys else None,
            top3=keys[:3],
            accuracy=accuracy,
        ))

    if not results:
        return report

    report.n_samples = len(results)
    report.top1_hits = sum(1 for r in results if r.top1_hit)
    report.top3_hits = sum(1 for r in results if r.top3_hit)
    report.no_match_count = sum(1 for r in results if r.top1 is None)

    accuracies = sorted(r.accuracy for r in results)
    report.accuracy_mean = sum(accuracies) / len(accuracies)
    report.accuracy_median = _percentile(accuracies, 50)
    report.accuracy_p95 = _percentile(accuracies, 95)

    by_accuracy = sorted(results, key=lambda r: r.accuracy)
    report.worst_cases = [
        {"verse_key": r.verse_key, "accuracy": round(r.accuracy, 2), "top1": r.top1, "transcript": r.transcript[:80]}
        for r in by_accuracy[:worst_n]
    ]
    report.missed_matches = [
        {"verse_key": r.verse_key, "top3": r.top3, "transcript": r.transcript[:80]}
        for r in results if not r.top3_hit
    ]
    for r in report.missed_matches:
        logger.info("Expected verse not in top 3: %s got %s", r["verse_key"], r["top3"])

    return report


def load_samples(dataset_path: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    with open(dataset_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Dataset must be a list of items")
    return data[:limit] if limit else data


def write_report(report: BenchmarkReport, output_path: str) -> None:
    """Write benchmark report to JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2)
    logger.info("Wrote benchmark report to %s", output_path)
