"""
Unit tests for cosine similarity and embedding checks.
"""

import math

import numpy as np
import pytest
from hybrid_rag.similarity import cosine_similarity, is_usable_embedding


class TestCosineSimilarity:
    """Test semantic scoring boundaries"""

    @pytest.mark.parametrize("vector", [
        [1.0, 2.0, 3.0],
        [-0.5, 0.25, 8.0, 0.0],
        [1e-6, 3e-6],
    ])
    def test_self_similarity_is_one(self, vector):
        """Test cos(v, v) ≈ 1 for non-zero vectors"""
        assert cosine_similarity(vector, vector) == pytest.approx(1.0)

    def test_zero_vector(self):
        """Test zero magnitude is incomparable"""
        assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
        assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0

    def test_mismatched_lengths(self):
        """Test vectors of different lengths score 0"""
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0

    def test_empty_vectors(self):
        """Test empty vectors score 0"""
        assert cosine_similarity([], []) == 0.0

    def test_orthogonal_and_opposite(self):
        """Test the range endpoints"""
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_scale_independent(self):
        """Test magnitude does not matter"""
        assert cosine_similarity([1.0, 1.0], [10.0, 10.0]) == pytest.approx(1.0)

    def test_known_angle(self):
        """Test 45 degrees"""
        assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(1 / math.sqrt(2))

    def test_accepts_tuples_and_arrays(self):
        """Test sequence types are interchangeable"""
        assert cosine_similarity((1.0, 0.0), np.array([1.0, 0.0])) == pytest.approx(1.0)

    def test_result_within_bounds(self):
        """Test floating point drift is clipped"""
        vector = [0.1] * 768
        assert -1.0 <= cosine_similarity(vector, vector) <= 1.0


class TestIsUsableEmbedding:
    """Test query embedding validation"""

    def test_regular_vector(self):
        assert is_usable_embedding([0.1, 0.2])

    def test_none_and_empty(self):
        assert not is_usable_embedding(None)
        assert not is_usable_embedding([])

    def test_zero_vector(self):
        assert not is_usable_embedding([0.0, 0.0])

    def test_non_finite(self):
        assert not is_usable_embedding([0.1, float("nan")])
        assert not is_usable_embedding([float("inf"), 0.2])

    def test_non_numeric(self):
        assert not is_usable_embedding(["a", "b"])
