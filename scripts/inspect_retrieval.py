#!/usr/bin/env python3
"""
Run one hybrid retrieval against the configured database and print the context.

Useful for checking what grounding a prompt would receive for a project
without going through the generation pipeline.

Uses DATABASE_URL, EMBEDDING_PROVIDER, GCP_PROJECT_ID and the RAG_* tuning
variables from .env.local / .env.
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hybrid_rag import (  # noqa: E402
    HybridRetriever,
    PostgresContentStore,
    RetrievalConfig,
    Theme,
    create_embedder,
    load_environment,
)
from hybrid_rag.logging_config import setup_logging  # noqa: E402


def _split_list(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


async def inspect(project_id: str, prompt: str, theme: Theme) -> dict:
    """Retrieve context for one prompt and return it as a dict."""
    embedder = create_embedder()
    store = PostgresContentStore()
    await store.connect()
    try:
        retriever = HybridRetriever(store, embedder, RetrievalConfig.from_env())
        context = await retriever.retrieve(project_id, prompt, theme)
        return {"embedder": embedder.get_model_info(), **context.to_dict()}
    finally:
        embedder.close()
        await store.disconnect()


def main():
    """Main entry point."""
    if len(sys.argv) < 4:
        print("Usage:")
        print('  python scripts/inspect_retrieval.py <project_id> "<prompt>" "<theme name>" ["tag1,tag2"] ["inspiration1,inspiration2"]')
        print("\nExample:")
        print('  python scripts/inspect_retrieval.py 3f1c... "Launch post for our new app" "Bold Tech" "modern,vivid" "Bauhaus"')
        sys.exit(1)

    load_environment(project_root)
    log_level = os.getenv("LOG_LEVEL", "WARNING").upper()
    setup_logging(
        log_file="logs/inspect-retrieval.log",
        console_level=getattr(logging, log_level, logging.WARNING),
    )

    project_id, prompt, theme_name = sys.argv[1:4]
    tags = _split_list(sys.argv[4]) if len(sys.argv) > 4 else []
    inspirations = _split_list(sys.argv[5]) if len(sys.argv) > 5 else []

    result = asyncio.run(inspect(project_id, prompt, Theme(theme_name, tags, inspirations)))
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
