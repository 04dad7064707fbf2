"""
Value objects for the evaluation layer.
"""

from dataclasses import dataclass, field
from typing import Mapping, Tuple

from search_scorer.domain.value_objects import CuratedSearchQuery, FeedbackSearchQuery


@dataclass(frozen=True)
class EvaluationDatasets:
    """
    Every parsed dataset an evaluation run needs.

    The same bundle is scored against each variant so both sides see
    identical queries, judgments and weights.
    """

    curated_queries: Tuple[CuratedSearchQuery, ...]
    """Expert-curated judgments"""

    client_curated_queries: Tuple[CuratedSearchQuery, ...]
    """Client curated judgments, empty rows included for fallback"""

    feedback_queries: Tuple[FeedbackSearchQuery, ...]
    """Field feedback naming the most relevant packages"""

    top_queries: Mapping[str, int] = field(default_factory=dict)
    """Website query -> historical query count"""

    top_client_queries: Mapping[str, int] = field(default_factory=dict)
    """Client query -> historical query count"""

    search_referrals: Mapping[str, int] = field(default_factory=dict)
    """Search term -> sessions landing from an external referral"""

    def __post_init__(self) -> None:
        object.__setattr__(self, "curated_queries", tuple(self.curated_queries))
        object.__setattr__(self, "client_curated_queries", tuple(self.client_curated_queries))
        object.__setattr__(self, "feedback_queries", tuple(self.feedback_queries))

        for name in ("top_queries", "top_client_queries", "search_referrals"):
            for query, count in getattr(self, name).items():
                if count < 0:
                    raise ValueError(f"{name} count cannot be negative, got {count} for '{query}'")

    def __hash__(self) -> int:
        return hash((
            self.curated_queries,
            self.client_curated_queries,
            self.feedback_queries,
            tuple(sorted(self.top_queries.items())),
            tuple(sorted(self.top_client_queries.items())),
            tuple(sorted(self.search_referrals.items())),
        ))
