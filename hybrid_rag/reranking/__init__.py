"""
Reranking module: diversity-aware final selection.

Usage:
    from hybrid_rag.reranking import apply_mmr

    selected = apply_mmr(candidates, query_embedding, top_k=5, lambda_=0.7)
"""

from .mmr import MMRCandidate, apply_mmr, diversity_score

__all__ = [
    'MMRCandidate',
    'apply_mmr',
    'diversity_score',
]
