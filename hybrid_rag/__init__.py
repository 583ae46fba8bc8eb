"""
Hybrid retrieval engine for brand-grounded content generation.

Selects a small, relevant and non-redundant set of a project's prior content
(BM25 + embedding similarity, fused with RRF, diversified with MMR) to ground
the prompt-enhancement stage.

Usage:
    from hybrid_rag import HybridRetriever, Theme

    retriever = HybridRetriever(content_store, embedder)
    context = await retriever.retrieve(project_id, prompt, Theme("Bold", ["vivid"], ["Bauhaus"]))
"""

from .bm25 import compute_bm25_scores, reciprocal_rank_fusion, tokenize
from .config import BM25Params, RetrievalConfig, load_environment
from .database import ContentStore, PostgresContentStore
from .embeddings import (
    BaseEmbedder,
    EmbeddingProvider,
    HashEmbedder,
    SentenceTransformerEmbedder,
    VertexAIEmbedder,
    create_embedder,
)
from .exceptions import ContentStoreError, EmbeddingError, RetrievalError
from .models import (
    ContentRow,
    Document,
    RetrievalContext,
    RetrievalMethod,
    RetrievalMetrics,
    ScoredDocument,
    Theme,
)
from .reranking import apply_mmr
from .retriever import HybridRetriever, retrieve
from .similarity import cosine_similarity

__version__ = "0.1.0"

__all__ = [
    "BM25Params",
    "BaseEmbedder",
    "ContentRow",
    "ContentStore",
    "ContentStoreError",
    "Document",
    "EmbeddingError",
    "EmbeddingProvider",
    "HashEmbedder",
    "HybridRetriever",
    "PostgresContentStore",
    "RetrievalConfig",
    "RetrievalContext",
    "RetrievalError",
    "RetrievalMethod",
    "RetrievalMetrics",
    "ScoredDocument",
    "SentenceTransformerEmbedder",
    "Theme",
    "VertexAIEmbedder",
    "apply_mmr",
    "compute_bm25_scores",
    "cosine_similarity",
    "create_embedder",
    "load_environment",
    "reciprocal_rank_fusion",
    "retrieve",
    "tokenize",
]
