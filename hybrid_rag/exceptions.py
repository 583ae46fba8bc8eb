"""Exceptions raised by retrieval collaborators.

None of these escape HybridRetriever.retrieve(); they surface only to code
that calls the content store or embedders directly.
"""


class RetrievalError(Exception):
    """Base class for hybrid_rag errors"""


class EmbeddingError(RetrievalError):
    """Embedding provider failed and no fallback was allowed"""


class ContentStoreError(RetrievalError):
    """Content store unavailable or query failed"""
