"""
Data model for hybrid retrieval.

ContentRow is the boundary type for whatever the content store returns; it is
validated with pydantic so that malformed rows degrade to "no embedding"
instead of failing the call. Everything past the boundary uses plain
dataclasses that live for a single retrieval call.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .similarity import is_usable_embedding


class RetrievalMethod(str, Enum):
    """Which code path produced a RetrievalContext"""
    HYBRID = "hybrid"          # BM25 + semantic fused with RRF
    SEMANTIC = "semantic"      # Query had no index terms, semantic ranking only
    BM25 = "bm25"              # Query embedding unusable, lexical ranking only
    THEME_ONLY = "theme_only"  # No usable content (or provider failure)


class ContentRow(BaseModel):
    """
    One content record as returned by the content store.

    `text` falls back to `prompt` for image-originated content whose
    text payload is empty. Unusable embeddings (empty, non-finite or all
    zeros) normalize to None.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    text: str = Field(default="", validation_alias=AliasChoices("text", "text_content"))
    prompt: Optional[str] = None
    media_type: Optional[str] = None
    embedding: Optional[Tuple[float, ...]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # UUID columns arrive as uuid.UUID from asyncpg
        return str(value) if value is not None else value

    @field_validator("text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("embedding", mode="before")
    @classmethod
    def _normalize_embedding(cls, value: Any) -> Optional[Tuple[float, ...]]:
        if value is None:
            return None
        try:
            vector = tuple(float(x) for x in value)
        except (TypeError, ValueError):
            return None
        if not is_usable_embedding(vector):
            return None
        return vector

    @model_validator(mode="before")
    @classmethod
    def _fallback_to_prompt(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        text = data.get("text") or data.get("text_content") or ""
        if not str(text).strip() and data.get("prompt"):
            data = {**data, "text": data["prompt"]}
            data.pop("text_content", None)
        return data

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None

    def to_document(self) -> "Document":
        if self.embedding is None:
            raise ValueError(f"Content {self.id} has no usable embedding")
        return Document(
            id=self.id,
            text=self.text,
            embedding=self.embedding,
            media_type=self.media_type,
        )


@dataclass(frozen=True)
class Document:
    """Immutable content snapshot participating in one retrieval call"""
    id: str
    text: str
    embedding: Tuple[float, ...]
    media_type: Optional[str] = None


@dataclass(frozen=True)
class ScoredDocument:
    """Document plus the scores derived for it during one call"""
    document: Document
    bm25_score: float
    semantic_score: float
    hybrid_score: float
    relevance_score: float  # Signal that drove MMR (hybrid, semantic or bm25)

    @property
    def id(self) -> str:
        return self.document.id

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def embedding(self) -> Tuple[float, ...]:
        return self.document.embedding


@dataclass(frozen=True)
class Theme:
    """Brand theme used as always-present grounding"""
    name: str
    tags: List[str] = field(default_factory=list)
    inspirations: List[str] = field(default_factory=list)

    def describe(self) -> str:
        """
        Synthesize the theme description used for grounding and embedding.

        Example:
            >>> Theme("Nordic Calm", ["minimal", "natural"], ["Scandinavian design"]).describe()
            'Nordic Calm: minimal, natural inspired by Scandinavian design'
        """
        return f"{self.name}: {', '.join(self.tags)} inspired by {', '.join(self.inspirations)}"


@dataclass(frozen=True)
class RetrievalMetrics:
    """Summary scores for observability"""
    top_bm25_score: float
    top_semantic_score: float
    top_hybrid_score: float
    diversity_score: float  # Mean pairwise (1 - cosine) over the selected set


@dataclass(frozen=True)
class RetrievalContext:
    """Result of one retrieval call, consumed by prompt enhancement"""
    relevant_documents: List[ScoredDocument] = field(default_factory=list)
    supporting_descriptions: List[str] = field(default_factory=list)
    theme_description: str = ""
    theme_embedding: List[float] = field(default_factory=list)
    average_similarity: float = 0.0
    method: RetrievalMethod = RetrievalMethod.THEME_ONLY
    metrics: Optional[RetrievalMetrics] = None

    @property
    def grounding_texts(self) -> List[str]:
        """Supporting descriptions followed by the theme description (if any)."""
        texts = list(self.supporting_descriptions)
        if self.theme_description:
            texts.append(self.theme_description)
        return texts

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable view (embeddings omitted except the theme's)."""
        return {
            "method": self.method.value,
            "average_similarity": self.average_similarity,
            "relevant_documents": [
                {
                    "id": item.id,
                    "text": item.text,
                    "media_type": item.document.media_type,
                    "bm25_score": item.bm25_score,
                    "semantic_score": item.semantic_score,
                    "hybrid_score": item.hybrid_score,
                    "relevance_score": item.relevance_score,
                }
                for item in self.relevant_documents
            ],
            "supporting_descriptions": list(self.supporting_descriptions),
            "theme_description": self.theme_description,
            "theme_embedding_dimension": len(self.theme_embedding),
            "metrics": None if self.metrics is None else {
                "top_bm25_score": self.metrics.top_bm25_score,
                "top_semantic_score": self.metrics.top_semantic_score,
                "top_hybrid_score": self.metrics.top_hybrid_score,
                "diversity_score": self.metrics.diversity_score,
            },
        }


def empty_context() -> RetrievalContext:
    """Fully empty context returned when retrieval fails unexpectedly."""
    return RetrievalContext()
