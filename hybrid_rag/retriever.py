"""
Hybrid retrieval orchestrator.

Selects a small, relevant and non-redundant set of a project's prior content
to ground prompt enhancement:

1. [Parallel] Embed query + fetch project content + embed theme description
2. [Parallel] Look up embeddings the content store did not bundle
3. BM25 scores over document texts, cosine similarity against the query
4. RRF fusion, truncation to the candidate pool, MMR selection
5. Summary metrics and result assembly

Fallback ladder (the `method` field records which level was reached):
    hybrid → semantic → bm25 → theme_only → fully empty

retrieve() never raises. Provider failures and timeouts degrade to a
theme-only context; anything unexpected degrades to a fully empty context.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, List, Optional, Sequence, TypeVar

from .bm25 import compute_bm25_scores, reciprocal_rank_fusion
from .config import RetrievalConfig
from .database import ContentStore
from .embeddings import BaseEmbedder
from .models import (
    ContentRow,
    Document,
    RetrievalContext,
    RetrievalMethod,
    RetrievalMetrics,
    ScoredDocument,
    Theme,
    empty_context,
)
from .reranking import apply_mmr, diversity_score
from .similarity import cosine_similarity, is_usable_embedding

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HybridRetriever:
    """
    Hybrid BM25 + semantic retrieval with MMR diversification.

    Collaborators are injected so retrieval can run against fakes in tests
    and against Postgres + Vertex AI in production. Instances hold no
    per-call state and are safe to share across concurrent calls.
    """

    def __init__(
        self,
        content_store: ContentStore,
        embedder: BaseEmbedder,
        config: Optional[RetrievalConfig] = None,
    ):
        self.content_store = content_store
        self.embedder = embedder
        self.config = config or RetrievalConfig()

    async def retrieve(
        self,
        project_id: str,
        query_text: str,
        theme: Theme,
        config: Optional[RetrievalConfig] = None,
    ) -> RetrievalContext:
        """
        Retrieve grounding context for a generation prompt.

        Args:
            project_id: Project whose content history is searched
            query_text: User prompt
            theme: Brand theme (always contributes a description + embedding)
            config: Per-call override of the retriever's default config

        Returns:
            RetrievalContext (never raises)
        """
        config = config or self.config
        logger.info(f"Retrieving context for project {project_id}")
        start = time.perf_counter()

        try:
            context = await self._retrieve(project_id, query_text, theme, config)
        except Exception:
            logger.exception(f"Retrieval failed for project {project_id}, returning empty context")
            return empty_context()

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Retrieved {len(context.relevant_documents)} items via {context.method.value}, "
            f"avg similarity: {context.average_similarity:.3f} ({elapsed_ms:.0f}ms)"
        )
        return context

    async def _retrieve(
        self,
        project_id: str,
        query_text: str,
        theme: Theme,
        config: RetrievalConfig,
    ) -> RetrievalContext:
        theme_description = theme.describe()

        query_result, rows_result, theme_result = await asyncio.gather(
            self._call_provider(self.embedder.embed_query(query_text), config, "query embedding"),
            self._call_provider(self.content_store.list_by_project(project_id), config, "content fetch"),
            self._call_provider(self.embedder.embed_document(theme_description), config, "theme embedding"),
            return_exceptions=True,
        )
        _reraise_non_exceptions(query_result, rows_result, theme_result)

        # Theme embedding is part of every non-empty result
        if isinstance(theme_result, Exception):
            raise theme_result
        theme_embedding = _as_vector(theme_result)

        if isinstance(rows_result, Exception):
            logger.warning(f"Content fetch failed, using theme only: {rows_result}")
            return _theme_only_context(theme_description, theme_embedding)

        if isinstance(query_result, Exception):
            logger.warning(f"Query embedding failed, using theme only: {query_result}")
            return _theme_only_context(theme_description, theme_embedding)

        documents = await self._load_documents(rows_result, config)
        if not documents:
            logger.info("No content with usable embeddings, using theme only")
            return _theme_only_context(theme_description, theme_embedding)

        return self._rank(
            query_text,
            _as_vector(query_result),
            documents,
            theme_description,
            theme_embedding,
            config,
        )

    async def _call_provider(self, awaitable: Awaitable[T], config: RetrievalConfig, label: str) -> T:
        """Await a provider call under the configured timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=config.provider_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{label} timed out after {config.provider_timeout}s")
            raise

    async def _load_documents(
        self,
        raw_rows: Optional[Sequence[Any]],
        config: RetrievalConfig,
    ) -> List[Document]:
        """
        Validate content rows and attach embeddings.

        Malformed rows and rows without a usable embedding are excluded.
        Input order is preserved (fusion ranks depend on it).
        """
        rows: List[ContentRow] = []
        for raw in raw_rows or []:
            row = _to_content_row(raw)
            if row is not None:
                rows.append(row)

        if not rows:
            return []

        missing = [row for row in rows if not row.has_embedding]
        if missing and not self.content_store.bundles_embeddings:
            looked_up = await asyncio.gather(
                *[
                    self._call_provider(
                        self.content_store.get_embedding(row.id), config, f"embedding lookup {row.id}"
                    )
                    for row in missing
                ],
                return_exceptions=True,
            )
            _reraise_non_exceptions(*looked_up)

            resolved = {}
            for row, result in zip(missing, looked_up):
                if isinstance(result, Exception):
                    logger.warning(f"Embedding lookup failed for content {row.id}: {result}")
                    continue
                if result is not None:
                    resolved[row.id] = ContentRow(
                        id=row.id, text=row.text, media_type=row.media_type, embedding=result
                    )

            rows = [row if row.has_embedding else resolved.get(row.id, row) for row in rows]

        documents = [row.to_document() for row in rows if row.has_embedding]
        excluded = len(rows) - len(documents)
        if excluded:
            logger.debug(f"Excluded {excluded} content rows without usable embeddings")
        return documents

    def _rank(
        self,
        query_text: str,
        query_embedding: List[float],
        documents: List[Document],
        theme_description: str,
        theme_embedding: List[float],
        config: RetrievalConfig,
    ) -> RetrievalContext:
        query_usable = is_usable_embedding(query_embedding)

        bm25_scores = compute_bm25_scores(query_text, [doc.text for doc in documents], config.bm25)
        if query_usable:
            semantic_scores = [cosine_similarity(query_embedding, doc.embedding) for doc in documents]
        else:
            logger.warning("Query embedding unusable, semantic scores set to 0")
            semantic_scores = [0.0] * len(documents)
        hybrid_scores = reciprocal_rank_fusion(bm25_scores, semantic_scores, config.rrf_k)

        lexical_signal = any(score > 0 for score in bm25_scores)
        if lexical_signal and query_usable:
            method, relevance_scores = RetrievalMethod.HYBRID, hybrid_scores
        elif query_usable:
            method, relevance_scores = RetrievalMethod.SEMANTIC, semantic_scores
        elif lexical_signal:
            # Scaled to [0, 1] so MMR's cosine redundancy penalty stays comparable
            top_bm25 = max(bm25_scores)
            method, relevance_scores = RetrievalMethod.BM25, [score / top_bm25 for score in bm25_scores]
        else:
            logger.info("Neither lexical nor semantic signal available, using theme only")
            return _theme_only_context(theme_description, theme_embedding)

        scored = [
            ScoredDocument(
                document=doc,
                bm25_score=bm25,
                semantic_score=semantic,
                hybrid_score=hybrid,
                relevance_score=relevance,
            )
            for doc, bm25, semantic, hybrid, relevance in zip(
                documents, bm25_scores, semantic_scores, hybrid_scores, relevance_scores
            )
        ]

        # Stable sort: equal relevance keeps original content order
        pool = sorted(scored, key=lambda item: item.relevance_score, reverse=True)
        pool = pool[:config.candidate_pool_size]
        logger.debug(
            f"Scored {len(scored)} documents ({method.value}), "
            f"candidate pool {len(pool)}, top_k {config.top_k}"
        )

        selected = apply_mmr(pool, query_embedding, config.top_k, config.mmr_lambda)

        average_similarity = (
            sum(item.semantic_score for item in selected) / len(selected) if selected else 0.0
        )
        metrics = RetrievalMetrics(
            top_bm25_score=max(bm25_scores),
            top_semantic_score=max(semantic_scores),
            top_hybrid_score=max(hybrid_scores),
            diversity_score=diversity_score(selected),
        )

        return RetrievalContext(
            relevant_documents=selected,
            supporting_descriptions=[item.text for item in selected],
            theme_description=theme_description,
            theme_embedding=theme_embedding,
            average_similarity=average_similarity,
            method=method,
            metrics=metrics,
        )


def _theme_only_context(theme_description: str, theme_embedding: List[float]) -> RetrievalContext:
    return RetrievalContext(
        relevant_documents=[],
        supporting_descriptions=[],
        theme_description=theme_description,
        theme_embedding=theme_embedding,
        average_similarity=1.0,
        method=RetrievalMethod.THEME_ONLY,
    )


def _as_vector(value: Any) -> List[float]:
    """Provider output as a plain float list (None → [])."""
    if value is None:
        return []
    return [float(x) for x in value]


def _to_content_row(raw: Any) -> Optional[ContentRow]:
    """Validate one store row; malformed rows are logged and skipped."""
    if isinstance(raw, ContentRow):
        return raw
    try:
        return ContentRow.model_validate(dict(raw))
    except (TypeError, ValueError) as e:
        logger.warning(f"Skipping malformed content row: {e}")
        return None


def _reraise_non_exceptions(*results: Any) -> None:
    """Cancellation (and other BaseExceptions) must not be turned into fallbacks."""
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result


async def retrieve(
    project_id: str,
    query_text: str,
    theme: Theme,
    config: Optional[RetrievalConfig] = None,
    *,
    content_store: ContentStore,
    embedder: BaseEmbedder,
) -> RetrievalContext:
    """One-shot retrieval without keeping a HybridRetriever around."""
    retriever = HybridRetriever(content_store, embedder, config)
    return await retriever.retrieve(project_id, query_text, theme)
