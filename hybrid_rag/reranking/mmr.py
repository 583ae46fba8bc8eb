"""
MMR (Maximal Marginal Relevance) selection for diverse top-K results.

Greedy selection trading relevance against redundancy with what is already
selected:

    MMR(c) = λ × relevance(c) - (1 - λ) × max(sim(c, s) for s in selected)

Where:
    λ = 1.0 → pure relevance ranking
    λ = 0.0 → pure novelty after the first (most relevant) pick
    sim = cosine similarity of candidate embeddings

Ties always go to the candidate that appears first in the input, so the
function is deterministic for a given input order.

Reference: Carbonell & Goldstein, SIGIR 1998
"""

import logging
from itertools import combinations
from typing import List, Optional, Protocol, Sequence, TypeVar

from ..similarity import cosine_similarity

logger = logging.getLogger(__name__)


class MMRCandidate(Protocol):
    """Anything with an embedding and a relevance score"""

    @property
    def embedding(self) -> Sequence[float]: ...

    @property
    def relevance_score(self) -> float: ...


C = TypeVar("C", bound=MMRCandidate)


def apply_mmr(
    candidates: Sequence[C],
    query_embedding: Optional[Sequence[float]],
    top_k: int,
    lambda_: float = 0.7,
) -> List[C]:
    """
    Select up to top_k candidates balancing relevance and diversity.

    Args:
        candidates: Candidate pool (each with embedding and relevance_score)
        query_embedding: Query vector; relevance is already folded into
            relevance_score, so it is accepted for interface parity only
        top_k: Number of items to select
        lambda_: Relevance/diversity trade-off in [0, 1]

    Returns:
        Selected candidates in selection order
        Length = min(top_k, len(candidates))

    Raises:
        ValueError: If lambda_ is outside [0, 1] or top_k is negative
    """
    if not 0.0 <= lambda_ <= 1.0:
        raise ValueError(f"MMR lambda must be in [0, 1], got {lambda_}")
    if top_k < 0:
        raise ValueError(f"top_k must be non-negative, got {top_k}")

    if top_k == 0 or not candidates:
        return []

    # Nothing to diversify
    if len(candidates) <= top_k:
        return list(candidates)

    remaining = list(range(len(candidates)))

    # Seed with the most relevant candidate (earliest on ties)
    seed = remaining[0]
    for index in remaining[1:]:
        if candidates[index].relevance_score > candidates[seed].relevance_score:
            seed = index
    selected = [seed]
    remaining.remove(seed)

    # Highest similarity of each remaining candidate to anything selected so far
    max_similarity = {
        index: cosine_similarity(candidates[index].embedding, candidates[seed].embedding)
        for index in remaining
    }

    while len(selected) < top_k and remaining:
        best_index = None
        best_score = float("-inf")

        for index in remaining:
            score = (
                lambda_ * candidates[index].relevance_score
                - (1 - lambda_) * max_similarity[index]
            )
            if score > best_score:
                best_score = score
                best_index = index

        selected.append(best_index)
        remaining.remove(best_index)

        for index in remaining:
            similarity = cosine_similarity(
                candidates[index].embedding, candidates[best_index].embedding
            )
            if similarity > max_similarity[index]:
                max_similarity[index] = similarity

    logger.debug(f"MMR selected {len(selected)} of {len(candidates)} candidates (lambda={lambda_})")
    return [candidates[index] for index in selected]


def diversity_score(items: Sequence[MMRCandidate]) -> float:
    """
    Mean pairwise (1 - cosine similarity) across items.

    0.0 for fewer than two items.
    """
    pairs = list(combinations(items, 2))
    if not pairs:
        return 0.0
    total = sum(1.0 - cosine_similarity(a.embedding, b.embedding) for a, b in pairs)
    return total / len(pairs)
