"""
Request and response models for the reporting API.
"""

from pydantic import BaseModel, Field


# request bodies

class CompareRequest(BaseModel):
    """
    Request body for POST /reports/compare.

    URLs left out fall back to the configured control and treatment backends.
    """
    control_url: str | None = Field(default=None, description="Control backend base URL")
    treatment_url: str | None = Field(default=None, description="Treatment backend base URL")


class VariantRequest(BaseModel):
    """
    Request body for POST /reports/variant.
    """
    base_url: str = Field(min_length=1, description="Backend base URL to score")


# response bodies

class QueryScore(BaseModel):
    """
    Score of one query against one backend.
    """
    query: str
    source: str = Field(description="Dataset the query came from")
    score: float = Field(ge=0.0, description="NDCG of the top results")
    weight: float = Field(ge=0.0, description="Weight of the query in its dataset")
    weighted_score: float = Field(description="weight * score")
    total_hits: int
    package_ids: list[str] = Field(default_factory=list, description="Returned package IDs in ranked order")


class QuerySetScore(BaseModel):
    score: float = Field(description="Aggregate score: the sum of every weighted score")
    queries: list[QueryScore] = Field(default_factory=list)


class VariantReportResponse(BaseModel):
    """
    The three dataset scores for one backend.
    """
    base_url: str
    curated: QuerySetScore
    client_curated: QuerySetScore
    feedback: QuerySetScore


class ScoreChange(BaseModel):
    query: str
    control_score: float
    treatment_score: float
    delta: float


class DatasetComparisonResponse(BaseModel):
    """
    Control versus treatment for one dataset.
    """
    name: str
    control_score: float
    treatment_score: float
    score_delta: float
    winners: list[ScoreChange] = Field(default_factory=list)
    losers: list[ScoreChange] = Field(default_factory=list)
    lowest_treatment_scores: list[QueryScore] = Field(default_factory=list)


class ComparisonReportResponse(BaseModel):
    """
    Response body for POST /reports/compare.
    """
    control: VariantReportResponse
    treatment: VariantReportResponse
    comparisons: list[DatasetComparisonResponse] = Field(default_factory=list)
