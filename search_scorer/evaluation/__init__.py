"""
Evaluation module: NDCG scoring, weighting and variant comparison.
"""

from .types import EvaluationDatasets
from .ndcg import NdcgScorer, compute_ndcg
from .relevancy_evaluator import RelevancyScoreEvaluator
from .package_id_validator import PackageIdPatternValidator

__all__ = [
    "EvaluationDatasets",
    "NdcgScorer",
    "compute_ndcg",
    "RelevancyScoreEvaluator",
    "PackageIdPatternValidator",
]
