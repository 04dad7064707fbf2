"""
Relevancy evaluation of search backends.

Scores every curated, client curated and feedback query against one
backend and weights the results into QuerySetReports:

- curated and client curated sets are weighted by historical query
  frequency, so popular queries dominate the aggregate;
- the feedback set is weighted "evenly" (see weight_evenly).

Running this against a control and a treatment backend produces the
ComparisonReport used to decide whether a ranking change is an improvement.
"""

import logging
from typing import Iterable, List, Mapping, Optional

from search_scorer.domain.entities import (
    ComparisonReport,
    QuerySetReport,
    ScoreResult,
    VariantReport,
    WeightedScoreResult,
)
from search_scorer.domain.ports import SearchBackend
from search_scorer.domain.value_objects import QueryWithJudgments, SearchQueryWithSelections
from search_scorer.evaluation import judgment_builder
from search_scorer.evaluation.comparison import build_comparison_report
from search_scorer.evaluation.ndcg import NdcgScorer
from search_scorer.evaluation.types import EvaluationDatasets
from search_scorer.evaluation.worker_pool import run_workers


logger = logging.getLogger(__name__)

RESULTS_TO_EVALUATE = 5
"""NDCG cutoff: the number of results visible above the fold"""

SCORING_WORKERS = 8


# =============================================================================
# Weighting policies
# =============================================================================


def weight_by_top_queries(
    top_queries: Mapping[str, int],
    results: Iterable[ScoreResult],
) -> QuerySetReport:
    """
    Weight each result by its share of the historical query count.

    weight = count(query) / sum of counts of every result in the batch.
    Queries missing from `top_queries` get weight 0: they stay in the
    report for per-query analysis but do not move the aggregate.
    """
    counted = [(result, top_queries.get(result.query, 0)) for result in results]
    total_count = sum(count for _, count in counted)

    return QuerySetReport(
        tuple(
            WeightedScoreResult(
                result=result,
                weight=(count / total_count) if total_count else 0.0,
            )
            for result, count in counted
        )
    )


def weight_evenly(results: Iterable[ScoreResult]) -> QuerySetReport:
    """
    Weight each result by its own score divided by the number of results.

    This reproduces the established feedback weighting. It is not a uniform
    1/count weighting: higher scoring queries carry more weight.
    """
    results = list(results)
    total_count = len(results)

    return QuerySetReport(
        tuple(
            WeightedScoreResult(result=result, weight=result.score / total_count)
            for result in results
        )
    )


def adjust_top_queries_for_referrals(
    top_queries: Mapping[str, int],
    search_referrals: Mapping[str, int],
) -> dict:
    """
    Remove search sessions that landed from an external referral.

    Those searches were not typed by a user on the site, so they are
    subtracted from the query count, never going below the smallest count
    in the dataset.

    Returns:
        Query -> adjusted query count
    """
    if not top_queries:
        return {}

    min_query_count = min(top_queries.values())
    adjusted = {}
    for query, count in top_queries.items():
        if query in search_referrals:
            adjusted[query] = max(count - search_referrals[query], min_query_count)
        else:
            adjusted[query] = count

    return adjusted


# =============================================================================
# Evaluator
# =============================================================================


class RelevancyScoreEvaluator:
    """
    Orchestrates concurrent NDCG scoring of the evaluation datasets.

    Usage:
        evaluator = RelevancyScoreEvaluator(SearchClient())
        report = evaluator.get_report(control_url, treatment_url, datasets)
    """

    def __init__(
        self,
        search_backend: SearchBackend,
        *,
        results_to_evaluate: int = RESULTS_TO_EVALUATE,
        worker_count: int = SCORING_WORKERS,
        scorer: Optional[NdcgScorer] = None,
    ) -> None:
        """
        Args:
            search_backend: Client used to run queries (shared by every worker)
            results_to_evaluate: NDCG cutoff k
            worker_count: Number of scoring threads
            scorer: Optional scorer override, mainly for tests
        """
        if results_to_evaluate < 1:
            raise ValueError(f"results_to_evaluate must be >= 1, got {results_to_evaluate}")

        self._scorer = scorer if scorer is not None else NdcgScorer(search_backend)
        self._results_to_evaluate = results_to_evaluate
        self._worker_count = worker_count

    def process(self, queries: Iterable[QueryWithJudgments], base_url: str) -> List[ScoreResult]:
        """
        Score every query against base_url using the worker pool.

        Returns:
            One ScoreResult per query, in input order

        Raises:
            The first scoring error. The whole batch is aborted.
        """

        def score(query: QueryWithJudgments) -> ScoreResult:
            try:
                result = self._scorer.score(query, base_url, self._results_to_evaluate)
            except Exception as e:
                logger.error("[%s] %s => %s", base_url, query.query, e)
                raise

            logger.info("[%s] %s => %s", base_url, query.query, result.score)
            return result

        return run_workers(queries, score, self._worker_count, name="scorer")

    def get_curated_report(self, base_url: str, datasets: EvaluationDatasets) -> QuerySetReport:
        top_queries = adjust_top_queries_for_referrals(
            datasets.top_queries, datasets.search_referrals
        )
        queries = judgment_builder.from_curated_queries(datasets.curated_queries)
        return weight_by_top_queries(top_queries, self.process(queries, base_url))

    def get_client_curated_report(self, base_url: str, datasets: EvaluationDatasets) -> QuerySetReport:
        queries = judgment_builder.from_client_curated_queries(
            datasets.client_curated_queries, datasets.curated_queries
        )
        return weight_by_top_queries(datasets.top_client_queries, self.process(queries, base_url))

    def get_feedback_report(self, base_url: str, datasets: EvaluationDatasets) -> QuerySetReport:
        queries = judgment_builder.from_feedback_queries(datasets.feedback_queries)
        return weight_evenly(self.process(queries, base_url))

    def get_click_log_report(
        self,
        base_url: str,
        selections: Iterable[SearchQueryWithSelections],
        top_queries: Mapping[str, int],
    ) -> QuerySetReport:
        """
        Score judgments derived from click counts, weighted by query frequency.

        Click grades are a heuristic (see judgment_builder.click_count_to_grade),
        so this set is reported on its own and never enters a VariantReport.
        """
        queries = judgment_builder.from_top_search_selections(selections)
        return weight_by_top_queries(top_queries, self.process(queries, base_url))

    def get_variant_report(self, base_url: str, datasets: EvaluationDatasets) -> VariantReport:
        """Score all three datasets against one backend."""
        logger.info("Scoring variant %s", base_url)
        return VariantReport(
            base_url=base_url,
            curated=self.get_curated_report(base_url, datasets),
            client_curated=self.get_client_curated_report(base_url, datasets),
            feedback=self.get_feedback_report(base_url, datasets),
        )

    def get_report(
        self,
        control_url: str,
        treatment_url: str,
        datasets: EvaluationDatasets,
    ) -> ComparisonReport:
        """Score both variants and compare them."""
        control = self.get_variant_report(control_url, datasets)
        treatment = self.get_variant_report(treatment_url, datasets)
        return build_comparison_report(control, treatment)
