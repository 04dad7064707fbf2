"""
Tests for the dataset CSV readers.

Every test writes its fixture file to pytest's tmp_path.
"""

import pytest

from search_scorer.domain.exceptions import DatasetValidationError
from search_scorer.infrastructure.datasets.csv_readers import (
    read_curated_search_queries,
    read_feedback_search_queries,
    read_search_referrals,
    read_top_client_search_queries,
    read_top_search_queries,
    read_top_search_selections,
)


CURATED_HEADER = "SearchQuery,ID0,S0,ID1,S1,ID2,S2,ID3,S3,ID4,S4\n"


def write(tmp_path, name: str, content: str):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


# ============================================================================
# CURATED
# ============================================================================

class TestReadCuratedSearchQueries:
    """Tests for the curated judgments file."""

    def test_reads_judgments(self, tmp_path):
        path = write(
            tmp_path,
            "curated.csv",
            CURATED_HEADER
            + "json,Newtonsoft.Json,4,System.Text.Json,3,,,,,,\n"
            + "logging,Serilog*,2,,,,,,,,\n",
        )

        queries = read_curated_search_queries(path)

        assert [query.search_query for query in queries] == ["json", "logging"]
        assert dict(queries[0].package_id_to_score) == {"Newtonsoft.Json": 4, "System.Text.Json": 3}
        assert dict(queries[1].package_id_to_score) == {"Serilog*": 2}

    def test_empty_rows_are_skipped(self, tmp_path):
        path = write(tmp_path, "curated.csv", CURATED_HEADER + "json,,,,,,,,,,\n")

        assert read_curated_search_queries(path) == []

    def test_empty_rows_kept_when_requested(self, tmp_path):
        path = write(tmp_path, "curated.csv", CURATED_HEADER + "json,,,,,,,,,,\n")

        [query] = read_curated_search_queries(path, include_empty=True)

        assert query.search_query == "json"
        assert dict(query.package_id_to_score) == {}

    @pytest.mark.parametrize("row,message", [
        ("json,A,4,,,,,,,,\njson,B,4,,,,,,,,\n", "is a duplicate"),
        ("json,A,4,a,3,,,,,,\n", "is duplicate for search query"),
        ("json,A,,,,,,,,,\n", "missing score"),
        ("json,A,high,,,,,,,,\n", "invalid score"),
        ("json,A,5,,,,,,,,\n", "out of range"),
        ("json,A,0,,,,,,,,\n", "out of range"),
        ("json,,3,,,,,,,,\n", "score without a package ID"),
    ])
    def test_validation_errors(self, tmp_path, row, message):
        path = write(tmp_path, "curated.csv", CURATED_HEADER + row)

        with pytest.raises(DatasetValidationError, match=message):
            read_curated_search_queries(path)

    def test_error_names_file_and_line(self, tmp_path):
        path = write(tmp_path, "curated.csv", CURATED_HEADER + "json,A,4,,,,,,,,\nxml,B,9,,,,,,,,\n")

        with pytest.raises(DatasetValidationError) as exc_info:
            read_curated_search_queries(path)

        assert exc_info.value.line_number == 3
        assert str(exc_info.value).endswith(f"in file, line 3: {path}")


# ============================================================================
# FEEDBACK AND SELECTIONS
# ============================================================================

class TestReadFeedbackSearchQueries:
    """Tests for the feedback file."""

    def test_pipe_delimited_columns(self, tmp_path):
        path = write(
            tmp_path,
            "feedback.csv",
            "Source,FeedbackDisposition,SearchQuery,Buckets,MostRelevantPackageIds\n"
            "Survey,Accepted,logging,Hit|Miss,Serilog | NLog\n",
        )

        [feedback] = read_feedback_search_queries(path)

        assert feedback.search_query == "logging"
        assert feedback.buckets == ("Hit", "Miss")
        assert feedback.most_relevant_package_ids == ("Serilog", "NLog")


class TestReadTopSearchSelections:
    """Tests for the click log file."""

    def test_reads_selection_counts(self, tmp_path):
        path = write(
            tmp_path,
            "selections.csv",
            'SearchQuery,Selections\njson,"[""Newtonsoft.Json:601"", ""System.Text.Json:79""]"\n',
        )

        [query] = read_top_search_selections(path)

        assert query.search_query == "json"
        assert [(s.package_id, s.count) for s in query.selections] == [
            ("Newtonsoft.Json", 601),
            ("System.Text.Json", 79),
        ]

    def test_malformed_selection(self, tmp_path):
        path = write(tmp_path, "selections.csv", 'SearchQuery,Selections\njson,"[""Newtonsoft.Json""]"\n')

        with pytest.raises(DatasetValidationError, match="Invalid selections"):
            read_top_search_selections(path)

    @pytest.mark.parametrize("cell", [
        '"[1, 2]"',
        '"{""Newtonsoft.Json"": 601}"',
    ])
    def test_selections_of_wrong_shape(self, tmp_path, cell):
        """Test that valid JSON of the wrong shape is reported with its line."""
        path = write(tmp_path, "selections.csv", f"SearchQuery,Selections\njson,{cell}\n")

        with pytest.raises(DatasetValidationError, match="Invalid selections") as exc_info:
            read_top_search_selections(path)

        assert exc_info.value.line_number == 2


# ============================================================================
# QUERY FREQUENCIES
# ============================================================================

class TestReadQueryCounts:
    """Tests for the top query files."""

    def test_top_search_queries(self, tmp_path):
        path = write(tmp_path, "top.csv", "Query,QueryCount\njson,300\nlogging,100\n")

        assert read_top_search_queries(path) == {"json": 300, "logging": 100}

    def test_client_queries_skip_unknown(self, tmp_path):
        path = write(tmp_path, "client.csv", "Query,QueryCount\n<UNKNOWN QUERY>,999\njson,3\n")

        assert read_top_client_search_queries(path) == {"json": 3}

    def test_invalid_count(self, tmp_path):
        path = write(tmp_path, "top.csv", "Query,QueryCount\njson,many\n")

        with pytest.raises(DatasetValidationError, match="invalid query count"):
            read_top_search_queries(path)


class TestReadSearchReferrals:
    """Tests for the analytics referrals export."""

    def test_first_page_sessions_summed_per_term(self, tmp_path):
        path = write(
            tmp_path,
            "referrals.csv",
            "# ----------------------------------------\n"
            "# Search referrals\n"
            "# Landing pages\n"
            "# 20240101-20240131\n"
            "# ----------------------------------------\n"
            "\n"
            "Landing Page,Search Term,Sessions\n"
            '/packages?q=json,json,"1,200"\n'
            "/packages?q=json&page=1,json,30\n"
            "/packages?q=json&page=2,json,500\n"
            "/packages?q=xml,xml,7\n",
        )

        assert read_search_referrals(path) == {"json": 1230, "xml": 7}
