"""
Readers for the CSV datasets an evaluation run consumes.

Files and their columns:

- curated search queries: SearchQuery, ID0, S0, ... ID4, S4
- feedback search queries: Source, FeedbackDisposition, SearchQuery,
  Buckets, MostRelevantPackageIds (list columns are pipe-delimited)
- top search queries / top client search queries: Query, QueryCount
- top search selections: SearchQuery, Selections (a JSON list of
  "packageid:count" strings)
- search referrals: an analytics export with leading '#' comment lines,
  then Landing Page, Search Term, Sessions

Malformed judgment data raises DatasetValidationError naming the file and
line. Rows that are merely empty are skipped with a warning.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Tuple
from urllib.parse import parse_qs, urlsplit

from search_scorer.domain.exceptions import DatasetValidationError
from search_scorer.domain.value_objects import (
    MAX_GRADE,
    CuratedSearchQuery,
    FeedbackSearchQuery,
    SearchQueryWithSelections,
    SearchSelectionCount,
)


logger = logging.getLogger(__name__)

CURATED_JUDGMENT_COLUMNS = 5
UNKNOWN_CLIENT_QUERY = "<UNKNOWN QUERY>"


def _open_csv(path: str | Path) -> Iterator[Tuple[int, Dict[str, str]]]:
    """Yield (line_number, row) for each record of a CSV file with a header."""
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield reader.line_num, row


def _field(row: Dict[str, str], name: str) -> str:
    return (row.get(name) or "").strip()


def _split_pipe_delimited(text: str) -> Tuple[str, ...]:
    return tuple(piece.strip() for piece in text.split("|") if piece.strip())


def _warn_empty(search_query: str) -> None:
    logger.warning("Skipping search query '%s' since it has no scores.", search_query)


# =============================================================================
# Judgment datasets
# =============================================================================


def read_curated_search_queries(
    path: str | Path,
    *,
    include_empty: bool = False,
) -> List[CuratedSearchQuery]:
    """
    Read expert-curated relevance judgments.

    Args:
        path: CSV file path
        include_empty: Keep queries without any judged package. The client
                      curated file uses this so empty rows can fall back to
                      the main curated file.

    Returns:
        Curated queries in file order

    Raises:
        DatasetValidationError: On a duplicate query, a duplicate package ID
            within a query, a missing or non-integer score, a score outside
            [1, MAX_GRADE], or a score without a package ID
    """
    path = str(path)
    seen_queries = set()
    output: List[CuratedSearchQuery] = []

    for line_number, row in _open_csv(path):
        search_query = _field(row, "SearchQuery")
        if search_query in seen_queries:
            raise DatasetValidationError(
                f"The search query '{search_query}' is a duplicate", path, line_number
            )

        package_id_to_score: Dict[str, int] = {}
        seen_ids = set()
        for i in range(CURATED_JUDGMENT_COLUMNS):
            package_id = _field(row, f"ID{i}")
            raw_score = _field(row, f"S{i}")

            if not package_id:
                if raw_score:
                    raise DatasetValidationError(
                        f"There is a score without a package ID for search query '{search_query}'",
                        path,
                        line_number,
                    )
                continue

            if package_id.lower() in seen_ids:
                raise DatasetValidationError(
                    f"The package ID '{package_id}' is duplicate for search query '{search_query}'",
                    path,
                    line_number,
                )

            if not raw_score:
                raise DatasetValidationError(
                    f"The package ID '{package_id}' has a missing score for search query '{search_query}'",
                    path,
                    line_number,
                )

            try:
                score = int(raw_score)
            except ValueError:
                raise DatasetValidationError(
                    f"The package ID '{package_id}' has an invalid score for search query '{search_query}'",
                    path,
                    line_number,
                ) from None

            if not (1 <= score <= MAX_GRADE):
                raise DatasetValidationError(
                    f"The package ID '{package_id}' has a score out of range [1, {MAX_GRADE}] "
                    f"for search query '{search_query}'",
                    path,
                    line_number,
                )

            seen_ids.add(package_id.lower())
            package_id_to_score[package_id] = score

        if include_empty or package_id_to_score:
            seen_queries.add(search_query)
            output.append(CuratedSearchQuery(search_query, package_id_to_score))
        else:
            _warn_empty(search_query)

    return output


def read_feedback_search_queries(path: str | Path) -> List[FeedbackSearchQuery]:
    """Read field feedback naming the most relevant package IDs per query."""
    return [
        FeedbackSearchQuery(
            source=_field(row, "Source"),
            feedback_disposition=_field(row, "FeedbackDisposition"),
            search_query=_field(row, "SearchQuery"),
            buckets=_split_pipe_delimited(_field(row, "Buckets")),
            most_relevant_package_ids=_split_pipe_delimited(_field(row, "MostRelevantPackageIds")),
        )
        for _, row in _open_csv(path)
    ]


def read_top_search_selections(path: str | Path) -> List[SearchQueryWithSelections]:
    """Read per-query click counts from the search selection logs."""
    path = str(path)
    output: List[SearchQueryWithSelections] = []

    for line_number, row in _open_csv(path):
        try:
            pairs = json.loads(_field(row, "Selections") or "[]")
            if not isinstance(pairs, list):
                raise ValueError("expected a JSON list of 'PackageId:Count' strings")

            selections = []
            for pair in pairs:
                if not isinstance(pair, str):
                    raise ValueError(f"expected a 'PackageId:Count' string, got {pair!r}")
                package_id, count = pair.split(":", 1)
                selections.append(SearchSelectionCount(package_id.strip(), int(count)))
        except ValueError as e:
            raise DatasetValidationError(
                f"Invalid selections for search query '{_field(row, 'SearchQuery')}' ({e})",
                path,
                line_number,
            ) from e

        output.append(SearchQueryWithSelections(_field(row, "SearchQuery"), tuple(selections)))

    return output


# =============================================================================
# Query frequency datasets
# =============================================================================


def _read_query_counts(path: str, skip_queries: Tuple[str, ...] = ()) -> Dict[str, int]:
    output: Dict[str, int] = {}
    for line_number, row in _open_csv(path):
        query = row.get("Query") or ""
        if not query or query in skip_queries:
            continue

        try:
            output[query] = int(_field(row, "QueryCount"))
        except ValueError:
            raise DatasetValidationError(
                f"The search query '{query}' has an invalid query count", path, line_number
            ) from None

    return output


def read_top_search_queries(path: str | Path) -> Dict[str, int]:
    """Read historical query counts from the website search logs."""
    return _read_query_counts(str(path))


def read_top_client_search_queries(path: str | Path) -> Dict[str, int]:
    """Read historical query counts from client (IDE) searches."""
    return _read_query_counts(str(path), skip_queries=(UNKNOWN_CLIENT_QUERY,))


def read_search_referrals(path: str | Path) -> Dict[str, int]:
    """
    Read sessions that landed on the search page from an external referral.

    Only first-page landings count. Sessions are summed per search term.

    Returns:
        Search term -> session count
    """
    path = str(path)
    output: Dict[str, int] = {}

    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        lines = [line for line in f if line.strip() and not line.lstrip().startswith("#")]

    reader = csv.DictReader(lines)
    for row in reader:
        landing_page = _field(row, "Landing Page")
        query_string = parse_qs(urlsplit("http://example" + landing_page).query)
        page = (query_string.get("page") or [""])[0]
        if page.isdigit() and int(page) != 1:
            continue

        search_term = row.get("Search Term") or ""
        try:
            sessions = int(_field(row, "Sessions").replace(",", ""))
        except ValueError:
            raise DatasetValidationError(
                f"The search term '{search_term}' has an invalid session count", path
            ) from None

        output[search_term] = output.get(search_term, 0) + sessions

    return output
