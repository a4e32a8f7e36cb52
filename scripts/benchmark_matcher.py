#!/usr/bin/env python3
"""
Benchmark verse matching and verification on labeled transcripts.

Usage:
  python scripts/benchmark_matcher.py dataset/transcripts.json
  python scripts/benchmark_matcher.py dataset/transcripts.json --quran data/quran.json --output report.json
  python scripts/benchmark_matcher.py dataset/transcripts.json --self-test   # verse text as transcript

Expects JSON: list of {"verse_key": "1:2", "transcript": "..."} (or "surah"/"ayah", "hypothesis").
"""
import argparse
import json
import os
import sys

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config
from core.matching import VerseMatcher
from core.quran_data import load_corpus
from evaluation.benchmark_runner import load_samples, run_benchmark, write_report


def with_verse_text(item: dict, corpus) -> dict:
    """Replace the transcript with the verse text itself (expect top-1 hits and 100% accuracy)."""
    try:
        surah, ayah = (int(p) for p in str(item.get("verse_key", "")).split(":"))
    except ValueError:
        return item
    verse = corpus.get_verse(surah, ayah)
    return dict(item, transcript=verse.text) if verse else item


def main():
    parser = argparse.ArgumentParser(description="Benchmark verse matching / verification")
    parser.add_argument("dataset", help="Path to dataset JSON")
    parser.add_argument("--quran", default=None, help="Corpus JSON (default: QURAN_DATA_PATH or quran.json)")
    parser.add_argument("--limit", type=int, default=None, help="Max number of items to process")
    parser.add_argument("--output", default=None, help="Write the JSON report here")
    parser.add_argument("--word-metric", default=config.WORD_METRIC, choices=["positional", "levenshtein"])
    parser.add_argument("--self-test", action="store_true", help="Use each verse's text as transcript")
    args = parser.parse_args()

    quran_path = args.quran or config.get_quran_path()
    if not quran_path:
        print("No Quran data found. Pass --quran or set QURAN_DATA_PATH.", file=sys.stderr)
        return 1
    corpus = load_corpus(quran_path)
    samples = load_samples(args.dataset, args.limit)
    if args.self_test:
        samples = [with_verse_text(item, corpus) for item in samples]

    matcher = VerseMatcher(
        corpus,
        min_confidence=config.MATCH_MIN_CONFIDENCE,
        max_candidates=config.MATCH_MAX_CANDIDATES,
        keyword_boost=config.KEYWORD_BOOST,
        keyword_min_matches=config.KEYWORD_MIN_MATCHES,
    )
    report = run_benchmark(
        samples,
        corpus,
        matcher=matcher,
        word_threshold=config.WORD_CORRECT_THRESHOLD,
        verse_threshold=config.VERSE_CORRECT_THRESHOLD,
        word_metric=args.word_metric,
    )
    if report.n_samples == 0:
        print("No usable samples. Each item needs a known verse_key and a transcript.")
        return 1

    print(f"Processed {report.n_samples} items ({report.n_skipped} skipped).")
    print(f"Top-1 hit rate: {report.top1_rate:.4f}")
    print(f"Top-3 hit rate: {report.top3_rate:.4f}")
    print(f"No match: {report.no_match_count}")
    print(f"Accuracy mean/median/p95: {report.accuracy_mean:.2f} / {report.accuracy_median:.2f} / {report.accuracy_p95:.2f}")
    if args.output:
        write_report(report, args.output)
    else:
        print(json.dumps(report.worst_cases, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
