"""
Lexical half of hybrid retrieval.

Components:
- tokenizer: Text tokenization for term extraction
- stemmer: Optional Snowball stemming
- scorer: BM25 scoring with corpus-local IDF
- fusion: RRF (Reciprocal Rank Fusion) for combining BM25 and semantic rankings

The corpus is a single project's content history, fetched per retrieval call,
so IDF and average document length are computed from that snapshot rather
than from persisted global statistics.
"""

from .tokenizer import tokenize, STOPWORDS
from .stemmer import stem
from .scorer import BM25Scorer, compute_bm25_scores
from .fusion import reciprocal_rank_fusion, scores_to_ranks

__all__ = [
    "tokenize",
    "STOPWORDS",
    "stem",
    "BM25Scorer",
    "compute_bm25_scores",
    "reciprocal_rank_fusion",
    "scores_to_ranks",
]
