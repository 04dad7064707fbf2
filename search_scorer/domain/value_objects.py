"""
Value objects for the domain layer.

Value objects are immutable objects that represent descriptive aspects
of the domain with no conceptual identity: queries, relevance judgments,
dataset records and backend responses.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .utils.wildcard import is_wildcard


MAX_GRADE = 4
"""
Highest relevance grade. Grades run from 0 to MAX_GRADE, giving the five
levels { bad, fair, good, excellent, perfect } used in graded-relevance
metrics such as NDCG and ERR.
"""


class QuerySource(str, Enum):
    """Provenance of a query and its relevance judgments."""

    CURATED = "curated"
    CLIENT_CURATED = "client_curated"
    FEEDBACK = "feedback"
    CLICK_LOG = "click_log"


@dataclass(frozen=True)
class RelevanceJudgment:
    """
    Relevance grades for one query.

    Maps a package ID, or a package ID wildcard pattern such as
    ``Newtonsoft.*``, to a grade in [0, MAX_GRADE]. Keys are compared
    case-insensitively and the mapping is read-only after construction.
    """

    grades: Mapping[str, int] = field(default_factory=dict)
    """Package ID or pattern -> grade, keys in their original casing"""

    _by_lower_key: Mapping[str, int] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        """Validate grades and freeze the mapping."""
        original: Dict[str, int] = {}
        by_lower_key: Dict[str, int] = {}

        for package_id, grade in dict(self.grades).items():
            if not package_id or not package_id.strip():
                raise ValueError("package ID cannot be empty")

            if isinstance(grade, bool) or not isinstance(grade, int):
                raise ValueError(
                    f"Grade must be an integer, got {grade!r} for package '{package_id}'"
                )

            if not (0 <= grade <= MAX_GRADE):
                raise ValueError(
                    f"Grade must be 0-{MAX_GRADE}, got {grade} for package '{package_id}'"
                )

            key = package_id.lower()
            if key in by_lower_key:
                raise ValueError(f"The package ID '{package_id}' is a duplicate")

            original[package_id] = grade
            by_lower_key[key] = grade

        object.__setattr__(self, "grades", MappingProxyType(original))
        object.__setattr__(self, "_by_lower_key", MappingProxyType(by_lower_key))

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.grades.items())))

    def __len__(self) -> int:
        return len(self.grades)

    def get(self, package_id: str) -> Optional[int]:
        """Exact, case-insensitive lookup. Returns None when not judged."""
        return self._by_lower_key.get(package_id.lower())

    def is_empty(self) -> bool:
        return not self.grades

    def max_grade(self) -> int:
        """Highest grade in the judgment, 0 when empty."""
        return max(self.grades.values(), default=0)

    def wildcard_grades(self) -> List[Tuple[str, int]]:
        """(pattern, grade) pairs for keys containing '*' or '?'."""
        return [(key, grade) for key, grade in self.grades.items() if is_wildcard(key)]

    def ideal_grades(self, k: int) -> List[int]:
        """The k highest grades in descending order."""
        return sorted(self.grades.values(), reverse=True)[:k]


@dataclass(frozen=True)
class QueryWithJudgments:
    """
    A query ready to be scored.

    Keeps the dataset record the judgments were built from so that reports
    can trace a score back to its source row.
    """

    query: str
    """The search query text sent to the backend"""

    source: QuerySource
    """Which dataset the query came from"""

    judgment: RelevanceJudgment
    """Relevance grades for this query"""

    record: Any = None
    """Original dataset record (CuratedSearchQuery, FeedbackSearchQuery, ...)"""

    def __post_init__(self) -> None:
        if not self.query or not self.query.strip():
            raise ValueError("query cannot be empty")


@dataclass(frozen=True)
class SearchHit:
    """One result row returned by the search backend."""

    id: str
    version: Optional[str] = None


@dataclass(frozen=True)
class SearchResponse:
    """An ordered page of search results from one backend."""

    total_hits: int
    hits: Tuple[SearchHit, ...] = ()

    def __post_init__(self) -> None:
        if self.total_hits < 0:
            raise ValueError(f"total_hits cannot be negative, got {self.total_hits}")

    @property
    def package_ids(self) -> List[str]:
        """Package IDs in ranked order."""
        return [hit.id for hit in self.hits]


# =============================================================================
# Dataset records
# =============================================================================


@dataclass(frozen=True)
class CuratedSearchQuery:
    """A row from an expert-curated judgments file."""

    search_query: str
    package_id_to_score: Mapping[str, int]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "package_id_to_score", MappingProxyType(dict(self.package_id_to_score))
        )

    def __hash__(self) -> int:
        return hash((self.search_query, tuple(sorted(self.package_id_to_score.items()))))


@dataclass(frozen=True)
class FeedbackSearchQuery:
    """A row from the field feedback file naming the most relevant packages."""

    source: str
    feedback_disposition: str
    search_query: str
    buckets: Tuple[str, ...] = ()
    most_relevant_package_ids: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.search_query} => {' | '.join(self.most_relevant_package_ids)}"


@dataclass(frozen=True)
class SearchSelectionCount:
    """How many times a package was clicked for a query."""

    package_id: str
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"count cannot be negative, got {self.count}")


@dataclass(frozen=True)
class SearchQueryWithSelections:
    """A query from the click logs with the packages users selected."""

    search_query: str
    selections: Tuple[SearchSelectionCount, ...] = ()
