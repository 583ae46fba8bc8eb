"""Unit test configuration - in-memory collaborators for isolated testing"""

import pytest

from fakes import QUERY, THEME, THEME_TEXT, FakeContentStore, FakeEmbedder


@pytest.fixture
def theme():
    return THEME


@pytest.fixture
def content_rows():
    """Project history: two on-topic items and one unrelated greeting"""
    return [
        {"id": "c1", "text": "Advanced technology solutions", "embedding": [0.9, 0.1, 0.0]},
        {"id": "c2", "text": "Simple greeting hello world", "embedding": [0.0, 1.0, 0.0]},
        {"id": "c3", "text": "Innovation and technology trends", "embedding": [0.8, 0.0, 0.2]},
    ]


@pytest.fixture
def embedder():
    """Query points along the on-topic axis, theme along its own axis"""
    return FakeEmbedder(
        vectors={
            QUERY: [1.0, 0.0, 0.0],
            THEME_TEXT: [0.0, 0.0, 1.0],
        }
    )


@pytest.fixture
def store(content_rows):
    return FakeContentStore(content_rows)
