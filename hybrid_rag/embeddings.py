"""
Embedding providers for hybrid retrieval.

Handles:
1. Query embeddings (task type RETRIEVAL_QUERY)
2. Document/theme embeddings (task type RETRIEVAL_DOCUMENT)

Providers:
- Vertex AI text-embedding-005 via the Google Gen AI SDK (default, 768 dims)
- sentence-transformers local models (384 dims for all-MiniLM-L6-v2)
- Deterministic hashed embedding (768 dims, no network)

Vertex AI falls back to the hashed embedding for document/theme embeddings
when the API fails, so content generation keeps working offline; the
fallback is logged at WARNING level. Query embeddings never fall back:
hashed vectors only compare meaningfully with other hashed vectors, and a
hashed query scored against stored Vertex AI vectors would produce
meaningless similarities. A failed query embedding raises EmbeddingError.
"""

import asyncio
import logging
import math
import os
import re
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from google import genai
from google.genai.types import EmbedContentConfig

from .exceptions import EmbeddingError

logger = logging.getLogger(__name__)

VERTEX_EMBEDDING_DIMENSION = 768


class EmbeddingProvider(Enum):
    """Supported embedding providers"""
    VERTEX_AI = "vertex_ai"  # Google Vertex AI text-embedding-005
    SENTENCE_TRANSFORMERS = "sentence_transformers"  # Local open-source models
    HASH = "hash"  # Deterministic offline embedding


class BaseEmbedder(ABC):
    """
    Abstract base class for embedding providers.

    All embedders must implement this interface to be swappable.
    """

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        """Embed a search query."""

    @abstractmethod
    async def embed_document(self, text: str) -> List[float]:
        """Embed a document (or theme description) for comparison with queries."""

    def get_model_info(self) -> dict:
        """Dict with keys: name, type, dimension"""
        return {"name": type(self).__name__, "type": "unknown", "dimension": None}

    def close(self):
        """Optional cleanup (close API clients, free memory, etc.)"""
        pass


def _hash_string(value: str) -> int:
    """32-bit rolling string hash (hash * 31 + char), absolute value."""
    h = 0
    for char in value:
        h = ((h << 5) - h + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class HashEmbedder(BaseEmbedder):
    """
    Deterministic hashed embedding (no model, no network).

    Features:
    - Word hashes, weighted 1/(position+1)
    - Character trigram hashes, 0.5 each
    - Text statistics in the first three slots (word count, char count, sentence marks)

    The result is L2-normalized.
    """

    def __init__(self, dimensions: int = VERTEX_EMBEDDING_DIMENSION):
        if dimensions < 3:
            raise ValueError(f"HashEmbedder needs at least 3 dimensions, got {dimensions}")
        self.dimensions = dimensions

    def embed(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions

        normalized = (text or "").lower().strip()
        words = normalized.split()

        for idx, word in enumerate(words):
            vector[_hash_string(word) % self.dimensions] += 1 / (idx + 1)

        for i in range(len(normalized) - 2):
            vector[_hash_string(normalized[i:i + 3]) % self.dimensions] += 0.5

        vector[0] = len(words) / 100
        vector[1] = len(normalized) / 1000
        vector[2] = len(re.findall(r"[.!?]", text or "")) / 10

        magnitude = math.sqrt(sum(v * v for v in vector))
        if magnitude == 0:
            return vector
        return [v / magnitude for v in vector]

    async def embed_query(self, text: str) -> List[float]:
        return self.embed(text)

    async def embed_document(self, text: str) -> List[float]:
        return self.embed(text)

    def get_model_info(self) -> dict:
        return {"name": "hash", "type": "hash", "dimension": self.dimensions}


class VertexAIEmbedder(BaseEmbedder):
    """Vertex AI text embeddings through the Google Gen AI SDK"""

    def __init__(
        self,
        genai_client: genai.Client,
        model: str = "text-embedding-005",
        fallback: bool = True,
    ):
        """
        Args:
            genai_client: Initialized client (vertexai=True)
            model: Vertex AI embedding model
            fallback: Use HashEmbedder for document embeddings when the API
                fails instead of raising (query embeddings always raise)
        """
        if genai_client is None:
            raise ValueError("genai_client required for Vertex AI embedding provider")
        self.genai_client = genai_client
        self.model = model
        self.fallback = fallback
        self._fallback_embedder = HashEmbedder(VERTEX_EMBEDDING_DIMENSION)

    async def _embed(self, text: str, task_type: str, allow_fallback: bool) -> List[float]:
        try:
            response = await self.genai_client.aio.models.embed_content(
                model=self.model,
                contents=text,
                config=EmbedContentConfig(task_type=task_type),
            )
            values = list(response.embeddings[0].values or []) if response.embeddings else []
        except Exception as e:
            if not allow_fallback:
                raise EmbeddingError(f"Vertex AI embedding failed ({task_type}): {e}") from e
            logger.warning(f"Vertex AI embedding failed ({task_type}), using hashed fallback: {e}")
            return self._fallback_embedder.embed(text)

        if not values:
            if not allow_fallback:
                raise EmbeddingError(f"Vertex AI returned no embedding ({task_type})")
            logger.warning(f"No embedding returned from Vertex AI ({task_type}), using hashed fallback")
            return self._fallback_embedder.embed(text)

        return values

    async def embed_query(self, text: str) -> List[float]:
        # Compared against stored Vertex AI vectors, so no hashed substitute
        return await self._embed(text, "RETRIEVAL_QUERY", allow_fallback=False)

    async def embed_document(self, text: str) -> List[float]:
        return await self._embed(text, "RETRIEVAL_DOCUMENT", allow_fallback=self.fallback)

    def get_model_info(self) -> dict:
        return {
            "name": self.model,
            "type": "vertex_ai",
            "dimension": VERTEX_EMBEDDING_DIMENSION,
            "fallback": self.fallback,
        }


class SentenceTransformerEmbedder(BaseEmbedder):
    """
    Local sentence-transformers model.

    Model loads once on first use and stays in memory; encoding runs in a
    worker thread so the event loop is not blocked.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self.model = None  # Lazy loading
        self._load_lock = threading.Lock()
        logger.info(f"SentenceTransformerEmbedder initialized (model will load on first use): {model_name}")

    def _ensure_loaded(self):
        """Lazy load model on first use (avoid startup overhead)"""
        if self.model is not None:
            return
        # Query and theme embeddings run in parallel worker threads
        with self._load_lock:
            if self.model is None:
                logger.info(f"Loading sentence-transformers model: {self.model_name}")
                from sentence_transformers import SentenceTransformer
                self.model = SentenceTransformer(self.model_name)

    def _encode(self, text: str) -> List[float]:
        self._ensure_loaded()
        return self.model.encode([text])[0].tolist()

    async def embed_query(self, text: str) -> List[float]:
        return await asyncio.to_thread(self._encode, text)

    async def embed_document(self, text: str) -> List[float]:
        return await asyncio.to_thread(self._encode, text)

    def get_model_info(self) -> dict:
        return {
            "name": self.model_name,
            "type": "sentence_transformers",
            "dimension": None if self.model is None else self.model.get_sentence_embedding_dimension(),
            "loaded": self.model is not None,
        }

    def close(self):
        """Free model memory."""
        if self.model is not None:
            logger.info(f"Closing model: {self.model_name}")
            del self.model
            self.model = None


def create_embedder(genai_client: Optional[genai.Client] = None) -> BaseEmbedder:
    """
    Create embedder based on environment configuration.

    Config (env vars):
        EMBEDDING_PROVIDER: "vertex_ai" | "sentence_transformers" | "hash" (default: vertex_ai)
        EMBEDDING_MODEL: Model identifier (provider-specific)
        EMBEDDING_FALLBACK: "false" to raise instead of using hashed fallback for
            document embeddings (vertex_ai only; query embeddings never fall back)
        GCP_PROJECT_ID / GCP_LOCATION: Vertex AI project and region

    Args:
        genai_client: Existing client to reuse (created from env if omitted)
    """
    provider_value = os.getenv("EMBEDDING_PROVIDER", EmbeddingProvider.VERTEX_AI.value).lower()
    try:
        provider = EmbeddingProvider(provider_value)
    except ValueError:
        raise ValueError(
            f"Unknown embedding provider: {provider_value}. "
            f"Valid options: {', '.join(p.value for p in EmbeddingProvider)}"
        ) from None

    model = os.getenv("EMBEDDING_MODEL")

    if provider == EmbeddingProvider.VERTEX_AI:
        if genai_client is None:
            project_id = os.getenv("GCP_PROJECT_ID")
            location = os.getenv("GCP_LOCATION", "us-central1")
            if not project_id:
                raise ValueError("GCP_PROJECT_ID environment variable is required for Vertex AI embeddings")
            logger.info(f"Initializing Google Gen AI (project={project_id}, location={location})...")
            genai_client = genai.Client(vertexai=True, project=project_id, location=location)
        fallback = os.getenv("EMBEDDING_FALLBACK", "true").lower() != "false"
        embedder = VertexAIEmbedder(genai_client, model=model or "text-embedding-005", fallback=fallback)
    elif provider == EmbeddingProvider.SENTENCE_TRANSFORMERS:
        embedder = SentenceTransformerEmbedder(model or "all-MiniLM-L6-v2")
    else:
        embedder = HashEmbedder()

    logger.info(f"Created embedder: {embedder.get_model_info()}")
    return embedder
