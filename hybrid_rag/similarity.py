"""Semantic scoring: cosine similarity between embedding vectors."""

from typing import Sequence

import numpy as np


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 when the vectors are incomparable: different lengths,
    empty, or either one has zero magnitude.

    Examples:
        >>> cosine_similarity([1.0, 0.0], [1.0, 0.0])
        1.0
        >>> cosine_similarity([0.0, 0.0], [1.0, 0.0])
        0.0
        >>> cosine_similarity([1.0], [1.0, 0.0])
        0.0
    """
    if len(vec_a) != len(vec_b) or len(vec_a) == 0:
        return 0.0

    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(np.dot(a, b) / (norm_a * norm_b))
    # Floating point drift can push |cos| slightly past 1
    return max(-1.0, min(1.0, similarity))


def is_usable_embedding(embedding) -> bool:
    """True for a non-empty, finite, non-zero numeric vector."""
    if embedding is None or len(embedding) == 0:
        return False
    try:
        array = np.asarray(embedding, dtype=float)
    except (TypeError, ValueError):
        return False
    return array.ndim == 1 and bool(np.all(np.isfinite(array))) and bool(np.any(array))
