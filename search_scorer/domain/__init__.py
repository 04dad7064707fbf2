"""
Domain layer - Core evaluation entities and value objects.

This layer contains the relevance judgments, scores and reports, and
defines the ports (interfaces) that the infrastructure layer must implement.

It has NO dependencies on external frameworks or HTTP libraries.
"""

from .entities import (
    ComparisonReport,
    DatasetComparison,
    QueryScoreChange,
    QuerySetReport,
    ScoreResult,
    VariantReport,
    WeightedScoreResult,
)
from .value_objects import (
    MAX_GRADE,
    QuerySource,
    QueryWithJudgments,
    RelevanceJudgment,
    SearchHit,
    SearchResponse,
)

__all__ = [
    # Entities
    "ComparisonReport",
    "DatasetComparison",
    "QueryScoreChange",
    "QuerySetReport",
    "ScoreResult",
    "VariantReport",
    "WeightedScoreResult",
    # Value Objects
    "MAX_GRADE",
    "QuerySource",
    "QueryWithJudgments",
    "RelevanceJudgment",
    "SearchHit",
    "SearchResponse",
]
