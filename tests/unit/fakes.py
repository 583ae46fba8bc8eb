"""In-memory collaborators for retriever unit tests"""

import asyncio
from typing import Dict, List, Optional, Sequence

from hybrid_rag.database import ContentStore
from hybrid_rag.embeddings import BaseEmbedder
from hybrid_rag.models import Theme


class InFlightTracker:
    """Counts overlapping awaits to prove calls were issued concurrently"""

    def __init__(self):
        self.current = 0
        self.peak = 0

    async def hold(self, seconds: float):
        self.current += 1
        self.peak = max(self.peak, self.current)
        try:
            await asyncio.sleep(seconds)
        finally:
            self.current -= 1


class FakeContentStore(ContentStore):
    """
    Content store backed by a list of rows.

    Rows are returned as-is (dicts or ContentRow), optionally after a delay,
    or an error is raised instead.
    """

    def __init__(
        self,
        rows: Sequence = (),
        error: Optional[Exception] = None,
        delay: float = 0.0,
        bundles_embeddings: bool = True,
        embeddings: Optional[Dict[str, Sequence[float]]] = None,
        lookup_errors: Sequence[str] = (),
        tracker: Optional[InFlightTracker] = None,
    ):
        self.rows = list(rows)
        self.error = error
        self.delay = delay
        self.bundles_embeddings = bundles_embeddings
        self.embeddings = embeddings or {}
        self.lookup_errors = set(lookup_errors)
        self.tracker = tracker
        self.list_calls: List[str] = []
        self.lookup_calls: List[str] = []

    async def list_by_project(self, project_id: str):
        self.list_calls.append(project_id)
        if self.tracker:
            await self.tracker.hold(self.delay or 0.02)
        elif self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.rows)

    async def get_embedding(self, content_id: str):
        self.lookup_calls.append(content_id)
        if self.tracker:
            await self.tracker.hold(0.02)
        if content_id in self.lookup_errors:
            raise ConnectionError(f"lookup failed for {content_id}")
        return self.embeddings.get(content_id)


class FakeEmbedder(BaseEmbedder):
    """
    Embedder returning fixed vectors per text.

    Unknown texts get `default`. `query_error` / `document_error` are raised
    from the matching method.
    """

    def __init__(
        self,
        vectors: Optional[Dict[str, Sequence[float]]] = None,
        default: Sequence[float] = (0.0, 0.0, 1.0),
        query_error: Optional[Exception] = None,
        document_error: Optional[Exception] = None,
        delay: float = 0.0,
        tracker: Optional[InFlightTracker] = None,
    ):
        self.vectors = vectors or {}
        self.default = list(default)
        self.query_error = query_error
        self.document_error = document_error
        self.delay = delay
        self.tracker = tracker
        self.query_calls: List[str] = []
        self.document_calls: List[str] = []

    async def _wait(self):
        if self.tracker:
            await self.tracker.hold(self.delay or 0.02)
        elif self.delay:
            await asyncio.sleep(self.delay)

    async def embed_query(self, text: str) -> List[float]:
        self.query_calls.append(text)
        await self._wait()
        if self.query_error:
            raise self.query_error
        return list(self.vectors.get(text, self.default))

    async def embed_document(self, text: str) -> List[float]:
        self.document_calls.append(text)
        if self.document_error:
            raise self.document_error
        return list(self.vectors.get(text, self.default))


QUERY = "technology innovation"

THEME = Theme(name="Bold Tech", tags=["modern", "vivid"], inspirations=["Bauhaus"])
THEME_TEXT = "Bold Tech: modern, vivid inspired by Bauhaus"
