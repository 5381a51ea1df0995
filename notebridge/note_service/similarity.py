"""Vector similarity used for semantic ranking."""

from __future__ import annotations

import math
from collections.abc import Sequence

NO_SIMILARITY = -1.0
"""Score for pairs without a defined direction; sorts below every real score."""


def cosine_similarity(a: Sequence[float | None] | None, b: Sequence[float | None] | None) -> float:
    """Cosine similarity of *a* and *b* over their common prefix.

    Total: never raises.  Vectors of different length are compared over the
    first ``min(len(a), len(b))`` entries and ``None`` entries count as 0.
    Returns ``-1`` when the common length is 0, when either side has zero
    norm, or when the inputs don't produce a finite score.
    """
    if not a or not b:
        return NO_SIMILARITY
    n = min(len(a), len(b))

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for i in range(n):
        va = _component(a[i])
        vb = _component(b[i])
        dot += va * vb
        norm_a += va * va
        norm_b += vb * vb

    if norm_a == 0 or norm_b == 0:
        return NO_SIMILARITY
    score = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    if not math.isfinite(score):
        return NO_SIMILARITY
    return score


def _component(value: float | None) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
