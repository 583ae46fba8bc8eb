"""
RRF (Reciprocal Rank Fusion) for combining lexical and semantic rankings.

RRF is a simple and effective method for combining results from multiple ranking systems.
It doesn't require normalization of scores and is robust to outliers: BM25 is
unbounded while cosine similarity lives in [-1, 1], yet only ranks are compared.

Formula:
    RRF(item, k=60) = 1/(k + rank_a(item)) + 1/(k + rank_b(item))

Where:
    k = constant (default: 60, from literature)
    rank_x = rank of item in x-th ranking (1-based, ties keep input order)

Both score lists are index-aligned with the candidate list; the fused list
keeps that alignment (no reordering happens here).

Reference: https://plg.uwaterloo.ca/~gvcormac/cormacksigir09-rrf.pdf
"""

from typing import List, Sequence


def scores_to_ranks(scores: Sequence[float]) -> List[int]:
    """
    Convert scores to 1-based ranks (rank 1 = highest score).

    Ties are broken by original position (stable sort).

    Example:
        >>> scores_to_ranks([0.2, 0.9, 0.2])
        [2, 1, 3]
    """
    order = sorted(range(len(scores)), key=lambda i: scores[i], reverse=True)
    ranks = [0] * len(scores)
    for rank, index in enumerate(order, start=1):
        ranks[index] = rank
    return ranks


def reciprocal_rank_fusion(
    scores_a: Sequence[float],
    scores_b: Sequence[float],
    k: float = 60,
) -> List[float]:
    """
    Fuse two index-aligned score lists using Reciprocal Rank Fusion.

    Args:
        scores_a: First signal (e.g. BM25 scores), one per item
        scores_b: Second signal (e.g. cosine similarities), one per item
        k: RRF constant (default: 60)
            Damps the advantage of top ranks; must be positive

    Returns:
        One fused score per item, same order as the inputs

    Raises:
        ValueError: If the lists differ in length or k is not positive

    Example:
        >>> fused = reciprocal_rank_fusion([1.0, 0.5, 0.1], [0.95, 0.4, 0.2])
        >>> max(range(3), key=fused.__getitem__)
        0
    """
    if len(scores_a) != len(scores_b):
        raise ValueError(
            f"Score lists must be index-aligned: {len(scores_a)} != {len(scores_b)}"
        )
    if k <= 0:
        raise ValueError(f"RRF constant k must be positive, got {k}")

    ranks_a = scores_to_ranks(scores_a)
    ranks_b = scores_to_ranks(scores_b)

    return [
        1.0 / (k + rank_a) + 1.0 / (k + rank_b)
        for rank_a, rank_b in zip(ranks_a, ranks_b)
    ]
