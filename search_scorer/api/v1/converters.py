"""
Converters between domain reports and API schemas.

This module centralizes all conversion logic between the domain layer
and the API layer.
"""

from search_scorer.domain import entities as domain
from search_scorer.api.v1 import schemas as api


def domain_weighted_result_to_api(item: domain.WeightedScoreResult) -> api.QueryScore:
    return api.QueryScore(
        query=item.result.query,
        source=item.result.input.source.value,
        score=item.result.score,
        weight=item.weight,
        weighted_score=item.score,
        total_hits=item.result.response.total_hits,
        package_ids=item.result.response.package_ids,
    )


def domain_query_set_to_api(report: domain.QuerySetReport) -> api.QuerySetScore:
    return api.QuerySetScore(
        score=report.score,
        queries=[domain_weighted_result_to_api(item) for item in report],
    )


def domain_variant_report_to_api(report: domain.VariantReport) -> api.VariantReportResponse:
    """
    Convert a domain VariantReport to an API VariantReportResponse.

    Args:
        report: Domain VariantReport

    Returns:
        API VariantReportResponse model
    """
    return api.VariantReportResponse(
        base_url=report.base_url,
        curated=domain_query_set_to_api(report.curated),
        client_curated=domain_query_set_to_api(report.client_curated),
        feedback=domain_query_set_to_api(report.feedback),
    )


def domain_score_change_to_api(change: domain.QueryScoreChange) -> api.ScoreChange:
    return api.ScoreChange(
        query=change.query,
        control_score=change.control_score,
        treatment_score=change.treatment_score,
        delta=change.delta,
    )


def domain_comparison_to_api(comparison: domain.DatasetComparison) -> api.DatasetComparisonResponse:
    return api.DatasetComparisonResponse(
        name=comparison.name,
        control_score=comparison.control_score,
        treatment_score=comparison.treatment_score,
        score_delta=comparison.score_delta,
        winners=[domain_score_change_to_api(change) for change in comparison.winners],
        losers=[domain_score_change_to_api(change) for change in comparison.losers],
        lowest_treatment_scores=[
            domain_weighted_result_to_api(item) for item in comparison.lowest_treatment_scores
        ],
    )


def domain_comparison_report_to_api(report: domain.ComparisonReport) -> api.ComparisonReportResponse:
    """
    Convert a domain ComparisonReport to an API ComparisonReportResponse.

    Args:
        report: Domain ComparisonReport

    Returns:
        API ComparisonReportResponse model, comparisons in dataset order
    """
    return api.ComparisonReportResponse(
        control=domain_variant_report_to_api(report.control),
        treatment=domain_variant_report_to_api(report.treatment),
        comparisons=[domain_comparison_to_api(comparison) for comparison in report.comparisons.values()],
    )
