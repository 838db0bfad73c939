"""Vector similarity."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .errors import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between *a* and *b*, in [-1, 1].

    Returns 0.0 when either vector has zero magnitude, or when a NaN or
    infinite component makes the score undefined, so that rankings stay
    stable. Raises DimensionMismatch when the lengths differ.
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(va, vb)) / (norm_a * norm_b)
    if not math.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))
