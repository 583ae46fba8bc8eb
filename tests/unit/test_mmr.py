"""
Unit tests for MMR diversity selection.
"""

from dataclasses import dataclass
from typing import Tuple

import pytest
from hybrid_rag.reranking.mmr import apply_mmr, diversity_score


@dataclass(frozen=True)
class Candidate:
    name: str
    relevance_score: float
    embedding: Tuple[float, ...]


def names(items):
    return [item.name for item in items]


@pytest.fixture
def redundant_pool():
    """Two near-duplicates on top, one distinct item below"""
    return [
        Candidate("a", 1.0, (1.0, 0.0)),
        Candidate("b", 0.95, (1.0, 0.0)),
        Candidate("c", 0.5, (0.0, 1.0)),
    ]


class TestApplyMMR:
    """Test greedy relevance/diversity selection"""

    def test_diversity_beats_duplicate(self, redundant_pool):
        """Test a distinct item displaces a near-duplicate when λ < 1"""
        selected = apply_mmr(redundant_pool, [1.0, 0.0], top_k=2, lambda_=0.5)

        assert names(selected) == ["a", "c"]

    def test_pure_relevance(self, redundant_pool):
        """Test λ = 1 reduces to relevance ordering"""
        selected = apply_mmr(redundant_pool, [1.0, 0.0], top_k=2, lambda_=1.0)

        assert names(selected) == ["a", "b"]

    def test_pure_novelty_after_seed(self):
        """Test λ = 0 picks the least similar item after the seed"""
        pool = [
            Candidate("a", 0.9, (1.0, 0.0)),
            Candidate("b", 0.8, (0.9, 0.1)),
            Candidate("c", 0.1, (0.0, 1.0)),
        ]

        selected = apply_mmr(pool, None, top_k=2, lambda_=0.0)

        assert names(selected) == ["a", "c"]

    def test_first_pick_is_most_relevant(self):
        """Test the seed is the highest relevance, not the first item"""
        pool = [
            Candidate("low", 0.1, (1.0, 0.0)),
            Candidate("high", 0.9, (0.0, 1.0)),
            Candidate("mid", 0.5, (1.0, 1.0)),
        ]

        selected = apply_mmr(pool, None, top_k=1)

        assert names(selected) == ["high"]

    def test_seed_tie_goes_to_earliest(self):
        """Test equal relevance seeds with the earlier candidate"""
        pool = [
            Candidate("first", 0.5, (1.0, 0.0)),
            Candidate("second", 0.5, (0.0, 1.0)),
            Candidate("third", 0.1, (1.0, 1.0)),
        ]

        assert names(apply_mmr(pool, None, top_k=1)) == ["first"]

    def test_score_tie_goes_to_earliest(self):
        """Test equal MMR scores keep input order"""
        pool = [
            Candidate("seed", 1.0, (1.0, 0.0, 0.0)),
            Candidate("x", 0.5, (0.0, 1.0, 0.0)),
            Candidate("y", 0.5, (0.0, 0.0, 1.0)),
        ]

        selected = apply_mmr(pool, None, top_k=2, lambda_=0.7)

        assert names(selected) == ["seed", "x"]

    def test_no_duplicates_and_bounded_length(self):
        """Test output is a subset of the input without repeats"""
        pool = [
            Candidate(str(i), 1.0 / (i + 1), (float(i % 3), 1.0, float(i % 2)))
            for i in range(10)
        ]

        selected = apply_mmr(pool, None, top_k=5, lambda_=0.7)

        assert len(selected) == 5
        assert len(set(names(selected))) == 5
        assert all(item in pool for item in selected)
        assert selected[0].name == "0"  # Highest relevance seeds the selection

    def test_small_pool_returned_unchanged(self, redundant_pool):
        """Test nothing is reordered when the pool fits in top_k"""
        reversed_pool = list(reversed(redundant_pool))

        assert apply_mmr(reversed_pool, None, top_k=3) == reversed_pool
        assert apply_mmr(reversed_pool, None, top_k=10) == reversed_pool

    def test_zero_top_k(self, redundant_pool):
        """Test top_k = 0 selects nothing"""
        assert apply_mmr(redundant_pool, None, top_k=0) == []

    def test_empty_candidates(self):
        """Test an empty pool selects nothing"""
        assert apply_mmr([], [1.0, 0.0], top_k=3) == []

    def test_deterministic(self, redundant_pool):
        """Test repeated calls give the same selection"""
        first = apply_mmr(redundant_pool, None, top_k=2, lambda_=0.6)
        second = apply_mmr(redundant_pool, None, top_k=2, lambda_=0.6)

        assert first == second

    @pytest.mark.parametrize("lambda_", [-0.1, 1.5])
    def test_lambda_out_of_range(self, redundant_pool, lambda_):
        """Test λ outside [0, 1] is rejected"""
        with pytest.raises(ValueError):
            apply_mmr(redundant_pool, None, top_k=2, lambda_=lambda_)

    def test_negative_top_k(self, redundant_pool):
        """Test negative top_k is rejected"""
        with pytest.raises(ValueError):
            apply_mmr(redundant_pool, None, top_k=-1)


class TestDiversityScore:
    """Test the selection diversity metric"""

    def test_identical_items(self):
        items = [Candidate("a", 1.0, (1.0, 0.0)), Candidate("b", 1.0, (2.0, 0.0))]
        assert diversity_score(items) == pytest.approx(0.0)

    def test_orthogonal_items(self):
        items = [Candidate("a", 1.0, (1.0, 0.0)), Candidate("b", 1.0, (0.0, 1.0))]
        assert diversity_score(items) == pytest.approx(1.0)

    def test_mean_over_pairs(self, redundant_pool):
        # Pairs: (a, b) = 0, (a, c) = 1, (b, c) = 1
        assert diversity_score(redundant_pool) == pytest.approx(2 / 3)

    def test_fewer_than_two_items(self):
        assert diversity_score([]) == 0.0
        assert diversity_score([Candidate("a", 1.0, (1.0, 0.0))]) == 0.0
