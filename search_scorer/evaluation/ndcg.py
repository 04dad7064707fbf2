"""
Normalized Discounted Cumulative Gain scoring.

NDCG@k compares the grades of the top k results a backend returned with
the best possible ordering of the judged packages:

    DCG  = sum(grade_i / log2(i + 1)) for i = 1..k
    NDCG = DCG(actual) / DCG(ideal)

Judgment keys may be wildcard patterns. A result ID with no exact match
is tested against the patterns from longest to shortest (the most specific
pattern wins) and each pattern can grade at most one result per query.
"""

import logging
import math
import re
from typing import Iterable, List, Sequence, Tuple

from search_scorer.domain.entities import SCORE_EPSILON, ScoreResult
from search_scorer.domain.exceptions import NdcgInvariantError
from search_scorer.domain.ports import SearchBackend
from search_scorer.domain.utils.wildcard import wildcard_to_regex
from search_scorer.domain.value_objects import QueryWithJudgments, RelevanceJudgment


logger = logging.getLogger(__name__)


def dcg(grades: Iterable[int]) -> float:
    """Discounted cumulative gain. The first rank is divided by log2(2) = 1."""
    return sum(grade / math.log2(i + 1) for i, grade in enumerate(grades, start=1))


def resolve_grades(
    judgment: RelevanceJudgment,
    package_ids: Sequence[str],
    k: int,
) -> List[int]:
    """
    Grade each of the first k package IDs of a response.

    Args:
        judgment: Relevance grades for the query
        package_ids: Response package IDs in ranked order
        k: Number of results to grade

    Returns:
        One grade per graded result, in ranked order
    """
    # Local to this call: a matched pattern is removed so it grades one result only.
    patterns: List[Tuple[str, re.Pattern, int]] = [
        (pattern, wildcard_to_regex(pattern), grade)
        for pattern, grade in judgment.wildcard_grades()
        if grade > 0
    ]
    patterns.sort(key=lambda item: len(item[0]), reverse=True)

    grades: List[int] = []
    for package_id in package_ids[:k]:
        grade = judgment.get(package_id)
        if grade is not None:
            grades.append(grade)
            continue

        for i, (_, regex, pattern_grade) in enumerate(patterns):
            if regex.match(package_id):
                grades.append(pattern_grade)
                del patterns[i]
                break
        else:
            grades.append(0)

    return grades


def compute_ndcg(
    judgment: RelevanceJudgment,
    package_ids: Sequence[str],
    k: int,
) -> float:
    """
    Compute NDCG@k for one response.

    Args:
        judgment: Relevance grades for the query
        package_ids: Response package IDs in ranked order
        k: Cutoff position (results "above the fold")

    Returns:
        NDCG in [0, 1]. 0.0 when the judgment is empty or every grade is 0.

    Raises:
        NdcgInvariantError: If the computed score is above 1.0
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")

    if judgment.is_empty() or judgment.max_grade() == 0:
        return 0.0

    grades = resolve_grades(judgment, package_ids, k)
    ideal_grades = judgment.ideal_grades(k)

    score = dcg(grades) / dcg(ideal_grades)

    if score > 1.0 + SCORE_EPSILON:
        raise NdcgInvariantError(
            f"An NDCG score cannot be greater than 1.0, got {score} "
            f"(grades={grades}, ideal={ideal_grades})"
        )

    return score


class NdcgScorer:
    """
    Scores a query against a backend by fetching its results and computing NDCG.
    """

    def __init__(self, search_backend: SearchBackend) -> None:
        """
        Args:
            search_backend: Client used to run the query
        """
        self._search_backend = search_backend

    def score(
        self,
        query: QueryWithJudgments,
        base_url: str,
        results_to_evaluate: int,
    ) -> ScoreResult:
        """
        Run the query against base_url and score the top results.

        Args:
            query: Query with its relevance judgments
            base_url: Backend to evaluate
            results_to_evaluate: NDCG cutoff k; also the number of results requested

        Returns:
            ScoreResult holding the score and the raw response

        Raises:
            SearchClientError: If the backend request fails
            NdcgInvariantError: If the score is above 1.0
        """
        response = self._search_backend.search(base_url, query.query, results_to_evaluate)
        score = compute_ndcg(query.judgment, response.package_ids, results_to_evaluate)
        logger.debug("NDCG@%s for '%s' on %s: %s", results_to_evaluate, query.query, base_url, score)

        return ScoreResult(score=score, input=query, response=response)
