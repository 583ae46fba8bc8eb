"""
BM25 scorer over a per-call corpus.

BM25 (Best Match 25) is a probabilistic ranking function used for information retrieval.
The corpus is the project's content snapshot for one retrieval call, so corpus
statistics (document frequency, average length) are computed on the fly.

Formula:
    score(doc) = Σ idf(term) × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × dl/avgdl))
    idf(term)  = ln((N - df + 0.5) / (df + 0.5) + 1)

Where:
    tf = term frequency in document
    df = number of documents containing the term
    N = corpus size
    k1 = term frequency saturation parameter (default: 1.5)
    b = length normalization parameter (default: 0.75)
    dl = document length (number of tokens)
    avgdl = average document length across the corpus
"""

import logging
import math
from collections import Counter
from typing import Dict, List, Optional, Sequence

from ..config import BM25Params
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


class BM25Scorer:
    """
    Okapi BM25 with corpus-local IDF.

    Query terms absent from a document contribute nothing; a query with no
    surviving terms scores every document 0.
    """

    def __init__(self, k1: float = 1.5, b: float = 0.75):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
                Higher = more weight to repeated terms
                Default: 1.5

            b: Length normalization parameter
                Higher = more penalty for long documents
                Range: 0.0 - 1.0
                Default: 0.75
        """
        self.k1 = k1
        self.b = b

    @staticmethod
    def document_frequencies(tokenized_documents: Sequence[Sequence[str]]) -> Dict[str, int]:
        """Count documents containing each term (repeats within a document count once)."""
        df: Dict[str, int] = Counter()
        for tokens in tokenized_documents:
            df.update(set(tokens))
        return dict(df)

    @staticmethod
    def idf(df: int, corpus_size: int) -> float:
        """Smoothed inverse document frequency, always positive."""
        return math.log((corpus_size - df + 0.5) / (df + 0.5) + 1)

    def score_corpus(
        self,
        query_terms: Sequence[str],
        tokenized_documents: Sequence[Sequence[str]],
    ) -> List[float]:
        """
        Score every document against the query terms.

        Args:
            query_terms: Tokenized query
            tokenized_documents: Tokenized documents, scored in this order

        Returns:
            One score per document (higher = more relevant)

        Example:
            >>> scorer = BM25Scorer()
            >>> scorer.score_corpus(
            ...     ["technology"],
            ...     [["advanced", "technology"], ["hello", "world"]],
            ... )
            [0.693..., 0.0]
        """
        n_docs = len(tokenized_documents)
        if n_docs == 0:
            return []
        if not query_terms:
            return [0.0] * n_docs

        avgdl = sum(len(tokens) for tokens in tokenized_documents) / n_docs
        if avgdl == 0:
            return [0.0] * n_docs

        df = self.document_frequencies(tokenized_documents)

        scores = []
        for tokens in tokenized_documents:
            tf_map = Counter(tokens)
            length_norm = 1 - self.b + self.b * (len(tokens) / avgdl)

            score = 0.0
            for term in query_terms:
                tf = tf_map.get(term, 0)
                if tf == 0:
                    continue

                numerator = tf * (self.k1 + 1)
                denominator = tf + self.k1 * length_norm
                score += self.idf(df[term], n_docs) * numerator / denominator

            scores.append(score)

        return scores


def compute_bm25_scores(
    query: str,
    documents: Sequence[str],
    params: Optional[BM25Params] = None,
) -> List[float]:
    """
    Compute BM25 scores for raw query and document texts.

    Args:
        query: Free-text query
        documents: Document texts
        params: k1, b and stemming switch (defaults if omitted)

    Returns:
        One score per document, same order as `documents`
        Empty corpus → []; query without index terms → all zeros
    """
    params = params or BM25Params()

    query_terms = tokenize(query, stem=params.stem)
    tokenized_documents = [tokenize(text, stem=params.stem) for text in documents]

    scorer = BM25Scorer(k1=params.k1, b=params.b)
    scores = scorer.score_corpus(query_terms, tokenized_documents)

    logger.debug(f"BM25 scored {len(documents)} documents for {len(query_terms)} query terms")
    return scores
