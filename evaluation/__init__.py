"""
Evaluation: matcher/verifier benchmark over labeled transcripts.
"""
from evaluation.benchmark_runner import (
    BenchmarkReport,
    load_samples,
    run_benchmark,
    write_report,
)

__all__ = [
    "BenchmarkReport",
    "load_samples",
    "run_benchmark",
    "write_report",
]
