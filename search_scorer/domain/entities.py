"""
Domain entities for the relevancy evaluation.

These are the results an evaluation run produces: a score per query per
backend, the weighted reports built from them, and the control versus
treatment comparison. All of them are created once per run and are
read-only afterwards.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

from .value_objects import QueryWithJudgments, SearchResponse


SCORE_EPSILON = 1e-9
"""Tolerance for floating point error when checking score bounds"""


@dataclass(frozen=True)
class ScoreResult:
    """
    The NDCG score of one query against one backend.
    """

    score: float
    """NDCG in [0, 1]"""

    input: QueryWithJudgments
    """The query and judgments that were scored"""

    response: SearchResponse
    """The backend response the score was computed from"""

    def __post_init__(self) -> None:
        if not (0.0 <= self.score <= 1.0 + SCORE_EPSILON):
            raise ValueError(f"score must be in [0, 1], got {self.score}")

    @property
    def query(self) -> str:
        return self.input.query


@dataclass(frozen=True)
class WeightedScoreResult:
    """A ScoreResult with the weight it carries in its query set."""

    result: ScoreResult
    weight: float

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"weight cannot be negative, got {self.weight}")

    @property
    def score(self) -> float:
        """Contribution to the query set aggregate: weight * score."""
        return self.weight * self.result.score


@dataclass(frozen=True)
class QuerySetReport:
    """
    Weighted results for one dataset scored against one backend.
    """

    results: Tuple[WeightedScoreResult, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))

    def __iter__(self) -> Iterator[WeightedScoreResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def score(self) -> float:
        """Aggregate score: the sum of every weighted contribution."""
        return sum(result.score for result in self.results)


@dataclass(frozen=True)
class VariantReport:
    """
    The three query set reports for one backend ("variant").
    """

    base_url: str
    curated: QuerySetReport
    client_curated: QuerySetReport
    feedback: QuerySetReport

    def query_sets(self) -> Dict[str, QuerySetReport]:
        """Reports keyed by dataset name, in display order."""
        return {
            "curated": self.curated,
            "client_curated": self.client_curated,
            "feedback": self.feedback,
        }


@dataclass(frozen=True)
class QueryScoreChange:
    """How one query's score moved from control to treatment."""

    query: str
    control_score: float
    treatment_score: float

    @property
    def delta(self) -> float:
        return self.treatment_score - self.control_score


@dataclass(frozen=True)
class DatasetComparison:
    """
    Control versus treatment for one dataset.

    Winners and losers are per-query deltas; lowest_treatment_scores lists
    the worst treatment queries regardless of how they moved.
    """

    name: str
    control_score: float
    treatment_score: float
    winners: Tuple[QueryScoreChange, ...] = ()
    losers: Tuple[QueryScoreChange, ...] = ()
    lowest_treatment_scores: Tuple[WeightedScoreResult, ...] = ()

    @property
    def score_delta(self) -> float:
        return self.treatment_score - self.control_score


@dataclass(frozen=True)
class ComparisonReport:
    """
    Control and treatment variant reports with a comparison per dataset.
    """

    control: VariantReport
    treatment: VariantReport
    comparisons: Mapping[str, DatasetComparison] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "comparisons", MappingProxyType(dict(self.comparisons)))

    def __hash__(self) -> int:
        return hash((self.control, self.treatment, tuple(sorted(self.comparisons.items()))))
