"""
Edit-distance scoring between normalized Arabic strings.
Levenshtein distance (unit-cost insert/delete/substitute) and a 0–100 similarity derived from it.
"""
from rapidfuzz.distance import Levenshtein

from core.normalization import normalize_arabic


def levenshtein_distance(a: str, b: str) -> int:
    """
    Classic DP over a (len(b)+1) x (len(a)+1) table.
    Reference implementation; the corpus scan uses rapidfuzz for the same number.
    """
    rows, cols = len(b), len(a)
    dp = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(rows + 1):
        dp[i][0] = i
    for j in range(cols + 1):
        dp[0][j] = j

    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            if b[i - 1] == a[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = min(
                    dp[i - 1][j - 1] + 1,  # substitution
                    dp[i][j - 1] + 1,      # insertion
                    dp[i - 1][j] + 1,      # deletion
                )
    return dp[rows][cols]


def _percentage(distance: int, max_len: int) -> float:
    similarity = (max_len - distance) / max_len * 100.0
    return max(0.0, min(100.0, similarity))


def normalized_similarity(a_norm: str, b_norm: str) -> float:
    """
    Similarity (0–100) of two strings that are ALREADY normalized.
    Hot path for corpus scans: verse texts are normalized once, up front.
    """
    max_len = max(len(a_norm), len(b_norm))
    if max_len == 0:
        return 100.0
    return _percentage(Levenshtein.distance(a_norm, b_norm), max_len)


def similarity(a: str, b: str) -> float:
    """
    ((maxLen - distance) / maxLen) * 100 over the normalized strings, clamped to [0, 100].
    Two strings that normalize to empty are identical (100).
    """
    a_norm = normalize_arabic(a)
    b_norm = normalize_arabic(b)
    max_len = max(len(a_norm), len(b_norm))
    if max_len == 0:
        return 100.0
    return _percentage(levenshtein_distance(a_norm, b_norm), max_len)
