"""
Builds QueryWithJudgments from the different dataset shapes.

- Curated queries carry explicit grades and are used as-is.
- Client curated queries fall back to the curated grades of the same query
  when they have none of their own.
- Feedback queries only name the most relevant packages; each gets the
  maximum grade and everything else is implicitly 0.
- Click log queries carry selection counts, which are bucketed into
  grades relative to the most clicked package.
"""

import logging
import math
from typing import Dict, Iterable, List

from search_scorer.domain.exceptions import DatasetValidationError
from search_scorer.domain.value_objects import (
    MAX_GRADE,
    CuratedSearchQuery,
    FeedbackSearchQuery,
    QuerySource,
    QueryWithJudgments,
    RelevanceJudgment,
    SearchQueryWithSelections,
)


logger = logging.getLogger(__name__)


def from_curated_queries(
    queries: Iterable[CuratedSearchQuery],
    source: QuerySource = QuerySource.CURATED,
) -> List[QueryWithJudgments]:
    """Wrap curated records, keeping their grades unchanged."""
    return [
        QueryWithJudgments(
            query=query.search_query,
            source=source,
            judgment=RelevanceJudgment(query.package_id_to_score),
            record=query,
        )
        for query in queries
    ]


def from_client_curated_queries(
    client_queries: Iterable[CuratedSearchQuery],
    fallback_queries: Iterable[CuratedSearchQuery],
) -> List[QueryWithJudgments]:
    """
    Build client curated judgments, filling gaps from the curated dataset.

    The first non-empty source wins: a client query with its own grades
    keeps them, an empty one takes the curated grades for the same query
    text, and a query empty in both is skipped.

    Args:
        client_queries: Records from the client curated file, empty ones included
        fallback_queries: Records from the main curated file

    Returns:
        Judgments tagged QuerySource.CLIENT_CURATED
    """
    fallback_by_query: Dict[str, CuratedSearchQuery] = {}
    for query in fallback_queries:
        if query.package_id_to_score:
            fallback_by_query.setdefault(query.search_query, query)

    resolved: List[CuratedSearchQuery] = []
    for query in client_queries:
        if query.package_id_to_score:
            resolved.append(query)
        elif query.search_query in fallback_by_query:
            resolved.append(fallback_by_query[query.search_query])
        else:
            logger.warning(
                "Skipping search query '%s' since it has no scores.", query.search_query
            )

    return from_curated_queries(resolved, source=QuerySource.CLIENT_CURATED)


def from_feedback_queries(feedback: Iterable[FeedbackSearchQuery]) -> List[QueryWithJudgments]:
    """
    Give every package named in the feedback the maximum grade.

    Raises:
        DatasetValidationError: If a package ID is named twice for one query,
            ignoring case
    """
    output: List[QueryWithJudgments] = []
    for item in feedback:
        grades: Dict[str, int] = {}
        seen = set()
        for package_id in item.most_relevant_package_ids:
            if package_id.lower() in seen:
                raise DatasetValidationError(
                    f"The package ID '{package_id}' is a duplicate for search query '{item.search_query}'"
                )
            seen.add(package_id.lower())
            grades[package_id] = MAX_GRADE

        output.append(
            QueryWithJudgments(
                query=item.search_query,
                source=QuerySource.FEEDBACK,
                judgment=RelevanceJudgment(grades),
                record=item,
            )
        )

    return output


def click_count_to_grade(clicks: int, max_clicks: int) -> int:
    """
    Map a click count to a grade relative to the most clicked package.

    The ratio clicks / max_clicks is placed into MAX_GRADE + 1 equal-width
    buckets over [0, 1]. With MAX_GRADE = 4:

        [0.00, 0.20) -> 0, [0.20, 0.40) -> 1, ..., [0.80, 1.00] -> 4

    This is a heuristic. Users may click a result because the current
    ranking put it on top, not because it is the best answer, so grades
    derived from clicks are an educated guess and not ground truth.

    Args:
        clicks: Clicks on the package for the query
        max_clicks: Clicks on the most clicked package for the same query

    Returns:
        Grade in [0, MAX_GRADE]
    """
    if max_clicks <= 0:
        return 0

    bucket_width = 1.0 / (MAX_GRADE + 1)
    ratio = clicks / max_clicks
    grade = math.ceil(ratio / bucket_width) - 1
    return max(0, min(MAX_GRADE, grade))


def from_top_search_selections(
    selections: Iterable[SearchQueryWithSelections],
) -> List[QueryWithJudgments]:
    """Derive grades from historical click counts (see click_count_to_grade)."""
    output: List[QueryWithJudgments] = []
    for query in selections:
        if not query.selections:
            logger.warning("Skipping search query '%s' since it has no selections.", query.search_query)
            continue

        max_clicks = max(selection.count for selection in query.selections)
        grades = {
            selection.package_id: click_count_to_grade(selection.count, max_clicks)
            for selection in query.selections
        }

        output.append(
            QueryWithJudgments(
                query=query.search_query,
                source=QuerySource.CLICK_LOG,
                judgment=RelevanceJudgment(grades),
                record=query,
            )
        )

    return output
