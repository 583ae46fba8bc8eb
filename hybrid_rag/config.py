"""
Configuration for hybrid retrieval.

Values come from environment variables, loaded from .env.local (local dev)
or .env (production) by load_environment(). RetrievalConfig is immutable and
validated by pydantic, so an out-of-range value fails at construction instead
of producing silently wrong rankings.

Environment variables:
    RAG_CANDIDATE_POOL_SIZE  Candidates kept before MMR (default: 20)
    RAG_TOP_K                Final result size (default: 5)
    RAG_MMR_LAMBDA           Relevance/diversity trade-off 0.0-1.0 (default: 0.7)
    RAG_RRF_K                RRF damping constant (default: 60)
    RAG_BM25_K1              BM25 term frequency saturation (default: 1.5)
    RAG_BM25_B               BM25 length normalization (default: 0.75)
    RAG_BM25_STEM            "true" to enable Snowball stemming (default: false)
    RAG_PROVIDER_TIMEOUT     Seconds allowed per provider call (default: 10)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


def load_environment(root: Optional[Path] = None) -> Optional[Path]:
    """
    Load .env.local first (highest priority), then .env as fallback.

    Returns:
        Path of the file that was loaded, or None when only system
        environment variables are available
    """
    root = root or PROJECT_ROOT
    env_local = root / ".env.local"
    env_file = root / ".env"

    if env_local.exists():
        load_dotenv(env_local, override=True)
        return env_local
    if env_file.exists():
        load_dotenv(env_file, override=True)
        return env_file

    logger.warning("No .env.local or .env file found - using system environment variables only")
    return None


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class BM25Params(BaseModel):
    """BM25 tuning parameters"""
    model_config = ConfigDict(frozen=True)

    k1: float = Field(default=1.5, ge=0.0, description="Term frequency saturation")
    b: float = Field(default=0.75, ge=0.0, le=1.0, description="Length normalization strength")
    stem: bool = Field(default=False, description="Apply Snowball stemming to terms")


class RetrievalConfig(BaseModel):
    """Immutable configuration for one retrieval call"""
    model_config = ConfigDict(frozen=True)

    candidate_pool_size: int = Field(
        default=20,
        ge=0,
        description="Documents considered before diversity selection",
    )
    top_k: int = Field(default=5, ge=0, description="Final result size")
    mmr_lambda: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="1.0 = pure relevance, 0.0 = pure novelty",
    )
    rrf_k: float = Field(default=60, gt=0, description="Rank fusion damping constant")
    bm25: BM25Params = Field(default_factory=BM25Params)
    provider_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds allowed per embedding/content-store call",
    )

    @classmethod
    def from_env(cls) -> "RetrievalConfig":
        """Build config from RAG_* environment variables (unset = default)."""
        values = {}
        for field_name, env_name, cast in (
            ("candidate_pool_size", "RAG_CANDIDATE_POOL_SIZE", int),
            ("top_k", "RAG_TOP_K", int),
            ("mmr_lambda", "RAG_MMR_LAMBDA", float),
            ("rrf_k", "RAG_RRF_K", float),
            ("provider_timeout", "RAG_PROVIDER_TIMEOUT", float),
        ):
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = cast(raw)

        bm25_values = {}
        if os.getenv("RAG_BM25_K1"):
            bm25_values["k1"] = float(os.environ["RAG_BM25_K1"])
        if os.getenv("RAG_BM25_B"):
            bm25_values["b"] = float(os.environ["RAG_BM25_B"])
        bm25_values["stem"] = _env_bool("RAG_BM25_STEM")

        config = cls(bm25=BM25Params(**bm25_values), **values)
        logger.debug(f"Retrieval config from environment: {config}")
        return config
