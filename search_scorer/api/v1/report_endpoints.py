"""
API endpoints for relevancy reports.

This module defines the FastAPI routes that score backends and compare
them. It handles HTTP concerns and delegates to the evaluator.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from search_scorer.config import ScorerSettings
from search_scorer.domain.exceptions import DatasetValidationError, NdcgInvariantError
from search_scorer.evaluation.relevancy_evaluator import RelevancyScoreEvaluator
from search_scorer.evaluation.types import EvaluationDatasets
from search_scorer.api.v1 import schemas as api
from search_scorer.api.v1.converters import (
    domain_comparison_report_to_api,
    domain_variant_report_to_api,
)
from search_scorer.api.v1.dependencies import get_datasets, get_evaluator, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, (DatasetValidationError, NdcgInvariantError)):
        logger.error("Report failed: %s", e)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    if isinstance(e, ValueError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(e),
    )


@router.post("/reports/compare", response_model=api.ComparisonReportResponse)
def compare_variants(
    request: api.CompareRequest,
    evaluator: RelevancyScoreEvaluator = Depends(get_evaluator),
    datasets: EvaluationDatasets = Depends(get_datasets),
    settings: ScorerSettings = Depends(get_settings),
) -> api.ComparisonReportResponse:
    """
    Score the control and treatment backends and compare them.

    Args:
        request: Optional backend URLs overriding the configured ones

    Returns:
        ComparisonReportResponse with per-dataset scores, winners and losers

    Raises:
        400: A backend URL is missing
        500: The datasets are invalid or a score broke the NDCG bounds
        503: A backend could not be queried
    """
    control_url = request.control_url or settings.control_base_url
    treatment_url = request.treatment_url or settings.treatment_base_url
    if not control_url or not treatment_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both a control and a treatment URL are required",
        )

    try:
        report = evaluator.get_report(control_url, treatment_url, datasets)
    except (ValueError, RuntimeError, NdcgInvariantError) as e:
        raise _to_http_error(e)

    return domain_comparison_report_to_api(report)


@router.post("/reports/variant", response_model=api.VariantReportResponse)
def score_variant(
    request: api.VariantRequest,
    evaluator: RelevancyScoreEvaluator = Depends(get_evaluator),
    datasets: EvaluationDatasets = Depends(get_datasets),
) -> api.VariantReportResponse:
    """
    Score a single backend without a comparison.

    Raises:
        500: The datasets are invalid or a score broke the NDCG bounds
        503: The backend could not be queried
    """
    try:
        report = evaluator.get_variant_report(request.base_url, datasets)
    except (ValueError, RuntimeError, NdcgInvariantError) as e:
        raise _to_http_error(e)

    return domain_variant_report_to_api(report)


@router.get("/health")
def health_check(
    settings: ScorerSettings = Depends(get_settings),
) -> dict:
    """
    Check that the backends and the datasets are configured.

    Returns:
    - control / treatment: whether each base URL is set
    - data_dir: whether the data directory exists
    - overall: True only if all of them are
    """
    components = {
        "control": bool(settings.control_base_url),
        "treatment": bool(settings.treatment_base_url),
        "data_dir": settings.resolve(".").is_dir(),
    }
    overall = all(components.values())

    return {
        "status": "ok" if overall else "degraded",
        "components": components,
        "overall": overall,
    }
