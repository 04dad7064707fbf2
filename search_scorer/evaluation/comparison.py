"""
Control versus treatment comparison.

Per-query changes are computed on raw NDCG scores, so a query with weight 0
(absent from the frequency table) can still show up as a winner or loser
even though it does not move the aggregate score.
"""

from typing import Dict, List, Sequence

from search_scorer.domain.entities import (
    ComparisonReport,
    DatasetComparison,
    QueryScoreChange,
    QuerySetReport,
    VariantReport,
    WeightedScoreResult,
)


TOP_CHANGES = 10


def _first_score_by_query(report: QuerySetReport) -> Dict[str, float]:
    scores: Dict[str, float] = {}
    for item in report:
        scores.setdefault(item.result.query, item.result.score)
    return scores


def score_changes(control: QuerySetReport, treatment: QuerySetReport) -> List[QueryScoreChange]:
    """
    Pair up each query present in both reports.

    Duplicate queries keep their first occurrence. Queries present on only
    one side are ignored.

    Returns:
        Changes sorted by query text
    """
    control_scores = _first_score_by_query(control)
    treatment_scores = _first_score_by_query(treatment)

    return [
        QueryScoreChange(
            query=query,
            control_score=control_scores[query],
            treatment_score=treatment_scores[query],
        )
        for query in sorted(control_scores)
        if query in treatment_scores
    ]


def biggest_winners(changes: Sequence[QueryScoreChange], limit: int = TOP_CHANGES) -> List[QueryScoreChange]:
    """Queries that improved the most, biggest improvement first."""
    winners = [change for change in changes if change.delta > 0]
    winners.sort(key=lambda change: change.delta, reverse=True)
    return winners[:limit]


def biggest_losers(changes: Sequence[QueryScoreChange], limit: int = TOP_CHANGES) -> List[QueryScoreChange]:
    """Queries that regressed the most, biggest regression first."""
    losers = [change for change in changes if change.delta < 0]
    losers.sort(key=lambda change: change.delta)
    return losers[:limit]


def lowest_scores(report: QuerySetReport, limit: int = TOP_CHANGES) -> List[WeightedScoreResult]:
    """Worst performing queries: lowest score first, then the most heavily weighted."""
    return sorted(report, key=lambda item: (item.result.score, -item.weight))[:limit]


def compare_query_sets(
    name: str,
    control: QuerySetReport,
    treatment: QuerySetReport,
    limit: int = TOP_CHANGES,
) -> DatasetComparison:
    changes = score_changes(control, treatment)
    return DatasetComparison(
        name=name,
        control_score=control.score,
        treatment_score=treatment.score,
        winners=tuple(biggest_winners(changes, limit)),
        losers=tuple(biggest_losers(changes, limit)),
        lowest_treatment_scores=tuple(lowest_scores(treatment, limit)),
    )


def build_comparison_report(control: VariantReport, treatment: VariantReport) -> ComparisonReport:
    """Compare the two variants dataset by dataset."""
    treatment_sets = treatment.query_sets()
    comparisons = {
        name: compare_query_sets(name, control_set, treatment_sets[name])
        for name, control_set in control.query_sets().items()
    }

    return ComparisonReport(control=control, treatment=treatment, comparisons=comparisons)
