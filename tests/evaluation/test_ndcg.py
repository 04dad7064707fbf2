"""
Tests for NDCG scoring.

The scorer tests use a fake backend returning canned package IDs, so no
HTTP requests are made.
"""

import math

import pytest

from search_scorer.domain.exceptions import NdcgInvariantError
from search_scorer.domain.value_objects import (
    QuerySource,
    QueryWithJudgments,
    RelevanceJudgment,
    SearchHit,
    SearchResponse,
)
from search_scorer.evaluation import ndcg
from search_scorer.evaluation.ndcg import NdcgScorer, compute_ndcg, dcg, resolve_grades


class FakeBackend:
    """Returns the same package IDs for every query and records the calls."""

    def __init__(self, package_ids):
        self.package_ids = package_ids
        self.calls = []

    def search(self, base_url, query, take):
        self.calls.append((base_url, query, take))
        hits = tuple(SearchHit(package_id) for package_id in self.package_ids[:take])
        return SearchResponse(total_hits=len(self.package_ids), hits=hits)


# ============================================================================
# DCG
# ============================================================================

class TestDcg:
    """Tests for discounted cumulative gain."""

    def test_first_rank_is_not_discounted(self):
        assert dcg([3]) == 3

    def test_discount_by_log2_of_rank_plus_one(self):
        expected = 3 + 2 / math.log2(3) + 1 / math.log2(4)

        assert dcg([3, 2, 1]) == pytest.approx(expected)

    def test_empty(self):
        assert dcg([]) == 0


# ============================================================================
# COMPUTE NDCG
# ============================================================================

class TestComputeNdcg:
    """Tests for the pure NDCG computation."""

    def test_ideal_ordering_scores_one(self):
        """Results in ideal order score exactly 1.0."""
        judgment = RelevanceJudgment({"A": 4, "B": 3, "C": 1})

        assert compute_ndcg(judgment, ["A", "B", "C"], k=5) == pytest.approx(1.0)

    def test_reversed_ordering_scores_below_one(self):
        judgment = RelevanceJudgment({"A": 4, "B": 3, "C": 1})

        score = compute_ndcg(judgment, ["C", "B", "A"], k=5)

        assert 0.0 < score < 1.0

    def test_no_relevant_results_scores_zero(self):
        judgment = RelevanceJudgment({"A": 4})

        assert compute_ndcg(judgment, ["X", "Y"], k=5) == 0.0

    def test_empty_judgment_scores_zero(self):
        """Degenerate case: nothing judged."""
        assert compute_ndcg(RelevanceJudgment({}), ["A"], k=5) == 0.0

    def test_all_zero_grades_score_zero(self):
        """Degenerate case: every grade is 0, so the ideal DCG is 0."""
        assert compute_ndcg(RelevanceJudgment({"A": 0, "B": 0}), ["A", "B"], k=5) == 0.0

    def test_empty_response_scores_zero(self):
        assert compute_ndcg(RelevanceJudgment({"A": 4}), [], k=5) == 0.0

    def test_only_top_k_results_count(self):
        """A relevant result below the cutoff does not count."""
        judgment = RelevanceJudgment({"A": 4})

        assert compute_ndcg(judgment, ["X", "Y", "A"], k=2) == 0.0

    def test_ideal_uses_whole_judgment(self):
        """The ideal ranking draws on all judged packages, not only returned ones."""
        judgment = RelevanceJudgment({"A": 4, "B": 4})

        score = compute_ndcg(judgment, ["B"], k=5)

        assert score == pytest.approx(4 / (4 + 4 / math.log2(3)))

    def test_exact_match_ignores_case(self):
        judgment = RelevanceJudgment({"Newtonsoft.Json": 4})

        assert compute_ndcg(judgment, ["newtonsoft.json"], k=5) == pytest.approx(1.0)

    def test_score_stays_within_bounds(self):
        judgment = RelevanceJudgment({"A": 1, "B": 2, "C": 3, "D.*": 4})
        responses = [["A", "B", "C"], ["D.x", "D.y", "A"], ["C", "X", "D.z", "B"], []]

        for package_ids in responses:
            assert 0.0 <= compute_ndcg(judgment, package_ids, k=5) <= 1.0

    def test_invalid_k(self):
        with pytest.raises(ValueError, match="k must be"):
            compute_ndcg(RelevanceJudgment({"A": 1}), ["A"], k=0)

    def test_score_above_one_raises(self, monkeypatch):
        """A score above 1.0 is never clamped."""
        monkeypatch.setattr(ndcg, "resolve_grades", lambda judgment, package_ids, k: [4, 4])
        judgment = RelevanceJudgment({"A": 4})

        with pytest.raises(NdcgInvariantError, match="cannot be greater than 1.0"):
            compute_ndcg(judgment, ["A", "A"], k=5)


# ============================================================================
# WILDCARD GRADES
# ============================================================================

class TestResolveGrades:
    """Tests for grading response IDs with exact keys and patterns."""

    def test_longest_pattern_wins(self):
        """The most specific pattern grades the result."""
        judgment = RelevanceJudgment({"foo*": 1, "foo.bar*": 3})

        assert resolve_grades(judgment, ["foo.bar.baz"], k=5) == [3]

    def test_pattern_is_consumed_once(self):
        """A pattern grades at most one result per query."""
        judgment = RelevanceJudgment({"Serilog.*": 4})

        assert resolve_grades(judgment, ["Serilog.A", "Serilog.B"], k=5) == [4, 0]

    def test_shorter_pattern_grades_after_longer_is_consumed(self):
        judgment = RelevanceJudgment({"foo*": 1, "foo.bar*": 3})

        assert resolve_grades(judgment, ["foo.bar.a", "foo.bar.b"], k=5) == [3, 1]

    def test_exact_match_takes_precedence(self):
        """An exact key is used before any pattern and consumes nothing."""
        judgment = RelevanceJudgment({"Foo.Bar": 2, "Foo.*": 4})

        assert resolve_grades(judgment, ["Foo.Bar", "Foo.Baz"], k=5) == [2, 4]

    def test_zero_grade_patterns_are_ignored(self):
        judgment = RelevanceJudgment({"Foo.*": 0, "Foo*": 2})

        assert resolve_grades(judgment, ["Foo.Bar"], k=5) == [2]

    def test_unmatched_results_grade_zero(self):
        judgment = RelevanceJudgment({"A": 4})

        assert resolve_grades(judgment, ["X", "A", "Y"], k=5) == [0, 4, 0]

    def test_consumption_does_not_leak_between_calls(self):
        """Patterns are consumed per call; the judgment is never modified."""
        judgment = RelevanceJudgment({"Serilog.*": 4})

        first = resolve_grades(judgment, ["Serilog.A"], k=5)
        second = resolve_grades(judgment, ["Serilog.B"], k=5)

        assert first == second == [4]
        assert judgment.grades == {"Serilog.*": 4}


# ============================================================================
# SCORER
# ============================================================================

class TestNdcgScorer:
    """Tests for scoring a query against a backend."""

    def test_score_fetches_k_results(self):
        backend = FakeBackend(["A", "B", "C", "D", "E", "F"])
        scorer = NdcgScorer(backend)
        query = QueryWithJudgments("json", QuerySource.CURATED, RelevanceJudgment({"A": 4}))

        result = scorer.score(query, "http://control", 5)

        assert backend.calls == [("http://control", "json", 5)]
        assert result.score == pytest.approx(1.0)
        assert result.input is query
        assert result.response.package_ids == ["A", "B", "C", "D", "E"]

    def test_backend_error_propagates(self):
        class FailingBackend:
            def search(self, base_url, query, take):
                raise RuntimeError("down")

        scorer = NdcgScorer(FailingBackend())
        query = QueryWithJudgments("json", QuerySource.CURATED, RelevanceJudgment({"A": 4}))

        with pytest.raises(RuntimeError, match="down"):
            scorer.score(query, "http://control", 5)
