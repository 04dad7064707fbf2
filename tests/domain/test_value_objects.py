"""
Tests for domain value objects.
"""

import pytest

from search_scorer.domain.value_objects import (
    MAX_GRADE,
    CuratedSearchQuery,
    FeedbackSearchQuery,
    QuerySource,
    QueryWithJudgments,
    RelevanceJudgment,
    SearchHit,
    SearchResponse,
    SearchSelectionCount,
)


class TestRelevanceJudgment:
    """Tests for the RelevanceJudgment value object."""

    def test_lookup_is_case_insensitive(self):
        """Test that package IDs match regardless of casing."""
        judgment = RelevanceJudgment({"Newtonsoft.Json": 4})

        assert judgment.get("newtonsoft.json") == 4
        assert judgment.get("NEWTONSOFT.JSON") == 4
        assert judgment.get("Other") is None

    def test_keeps_original_key_casing(self):
        """Test that grades keep the keys as they were written."""
        judgment = RelevanceJudgment({"Newtonsoft.Json": 4})

        assert list(judgment.grades) == ["Newtonsoft.Json"]

    def test_duplicate_keys_differing_in_case_are_rejected(self):
        """Test that two keys equal ignoring case raise ValueError."""
        with pytest.raises(ValueError, match="duplicate"):
            RelevanceJudgment({"Foo": 1, "foo": 2})

    @pytest.mark.parametrize("grade", [-1, MAX_GRADE + 1])
    def test_grade_out_of_range(self, grade):
        """Test that grades outside [0, MAX_GRADE] raise ValueError."""
        with pytest.raises(ValueError, match="Grade must be"):
            RelevanceJudgment({"Foo": grade})

    def test_non_integer_grade(self):
        """Test that non-integer grades raise ValueError."""
        with pytest.raises(ValueError, match="integer"):
            RelevanceJudgment({"Foo": 2.5})

    def test_empty_package_id(self):
        """Test that an empty key raises ValueError."""
        with pytest.raises(ValueError, match="empty"):
            RelevanceJudgment({" ": 1})

    def test_grades_are_read_only(self):
        """Test that the grades mapping cannot be mutated."""
        judgment = RelevanceJudgment({"Foo": 1})

        with pytest.raises(TypeError):
            judgment.grades["Bar"] = 2

    def test_source_mapping_changes_do_not_leak(self):
        """Test that the judgment is a snapshot of the input mapping."""
        source = {"Foo": 1}
        judgment = RelevanceJudgment(source)
        source["Bar"] = 2

        assert len(judgment) == 1

    def test_max_grade_and_empty(self):
        """Test max_grade and is_empty helpers."""
        assert RelevanceJudgment({}).is_empty() is True
        assert RelevanceJudgment({}).max_grade() == 0
        assert RelevanceJudgment({"A": 1, "B": 3}).max_grade() == 3

    def test_wildcard_grades(self):
        """Test that only pattern keys are returned as wildcards."""
        judgment = RelevanceJudgment({"Foo": 1, "Foo.*": 2, "Ba?": 3})

        assert sorted(judgment.wildcard_grades()) == [("Ba?", 3), ("Foo.*", 2)]

    def test_ideal_grades(self):
        """Test that the ideal ordering is the top k grades descending."""
        judgment = RelevanceJudgment({"A": 1, "B": 4, "C": 2, "D": 3})

        assert judgment.ideal_grades(3) == [4, 3, 2]
        assert judgment.ideal_grades(10) == [4, 3, 2, 1]

    def test_equal_judgments_hash_equal(self):
        """Test that judgments hash by their grades, regardless of key order."""
        judgment = RelevanceJudgment({"A": 4, "B": 2})

        assert hash(judgment) == hash(RelevanceJudgment({"B": 2, "A": 4}))
        assert len({judgment, RelevanceJudgment({"A": 4, "B": 2}), RelevanceJudgment({"A": 3})}) == 2


class TestQueryWithJudgments:
    """Tests for the QueryWithJudgments value object."""

    def test_create(self):
        """Test creating a query with its judgments and record."""
        record = CuratedSearchQuery("json", {"Newtonsoft.Json": 4})
        query = QueryWithJudgments(
            query="json",
            source=QuerySource.CURATED,
            judgment=RelevanceJudgment(record.package_id_to_score),
            record=record,
        )

        assert query.query == "json"
        assert query.source == QuerySource.CURATED
        assert query.record is record

    def test_hashable_with_curated_record(self):
        """Test that a query can be used as a set member or dict key."""
        record = CuratedSearchQuery("json", {"Newtonsoft.Json": 4})
        query = QueryWithJudgments("json", QuerySource.CURATED, RelevanceJudgment(record.package_id_to_score), record)
        same = QueryWithJudgments("json", QuerySource.CURATED, RelevanceJudgment({"Newtonsoft.Json": 4}), record)

        assert {query: 1}[same] == 1

    def test_empty_query(self):
        """Test that an empty query raises ValueError."""
        with pytest.raises(ValueError, match="query cannot be empty"):
            QueryWithJudgments(query="  ", source=QuerySource.CURATED, judgment=RelevanceJudgment({}))


class TestSearchResponse:
    """Tests for the SearchResponse value object."""

    def test_package_ids_in_ranked_order(self):
        """Test that package_ids preserves hit order."""
        response = SearchResponse(total_hits=10, hits=(SearchHit("B"), SearchHit("A", "1.0.0")))

        assert response.package_ids == ["B", "A"]

    def test_negative_total_hits(self):
        """Test that a negative total raises ValueError."""
        with pytest.raises(ValueError, match="total_hits"):
            SearchResponse(total_hits=-1)


class TestDatasetRecords:
    """Tests for the dataset record value objects."""

    def test_curated_scores_are_read_only(self):
        """Test that curated scores cannot be mutated."""
        record = CuratedSearchQuery("json", {"Newtonsoft.Json": 4})

        with pytest.raises(TypeError):
            record.package_id_to_score["Other"] = 1

    def test_feedback_str(self):
        """Test the readable representation of feedback."""
        feedback = FeedbackSearchQuery(
            source="Survey",
            feedback_disposition="Accepted",
            search_query="logging",
            most_relevant_package_ids=("Serilog", "NLog"),
        )

        assert str(feedback) == "logging => Serilog | NLog"

    def test_negative_selection_count(self):
        """Test that negative click counts raise ValueError."""
        with pytest.raises(ValueError, match="count"):
            SearchSelectionCount("Foo", -1)
