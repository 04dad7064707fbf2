"""
Runtime configuration.

Settings come from environment variables; the CLI overrides them with its
flags. Dataset paths are relative to DATA_DIR unless given as absolute
paths.
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from search_scorer.evaluation.types import EvaluationDatasets
from search_scorer.infrastructure.datasets import (
    read_curated_search_queries,
    read_feedback_search_queries,
    read_search_referrals,
    read_top_client_search_queries,
    read_top_search_queries,
)


logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = "data"
DEFAULT_CURATED_SEARCH_QUERIES_CSV = "curatedsearchqueries.csv"
DEFAULT_FEEDBACK_SEARCH_QUERIES_CSV = "feedbacksearchqueries.csv"
DEFAULT_TOP_SEARCH_QUERIES_CSV = "topsearchqueries.csv"
DEFAULT_TOP_CLIENT_SEARCH_QUERIES_CSV = "topclientsearchqueries.csv"
DEFAULT_SEARCH_REFERRALS_CSV = "GoogleAnalyticsSearchReferrals.csv"
DEFAULT_TOP_SEARCH_SELECTIONS_CSV = "topsearchselections.csv"


@dataclass(frozen=True)
class ScorerSettings:
    """
    Backend URLs and dataset locations for an evaluation run.
    """

    control_base_url: Optional[str] = None
    treatment_base_url: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR
    curated_search_queries_csv: str = DEFAULT_CURATED_SEARCH_QUERIES_CSV
    client_curated_search_queries_csv: str = DEFAULT_CURATED_SEARCH_QUERIES_CSV
    feedback_search_queries_csv: str = DEFAULT_FEEDBACK_SEARCH_QUERIES_CSV
    top_search_queries_csv: str = DEFAULT_TOP_SEARCH_QUERIES_CSV
    top_client_search_queries_csv: str = DEFAULT_TOP_CLIENT_SEARCH_QUERIES_CSV
    search_referrals_csv: str = DEFAULT_SEARCH_REFERRALS_CSV
    top_search_selections_csv: str = DEFAULT_TOP_SEARCH_SELECTIONS_CSV

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScorerSettings":
        """Build settings from environment variables, falling back to the defaults."""
        env = os.environ if environ is None else environ
        return cls(
            control_base_url=env.get("CONTROL_BASE_URL") or None,
            treatment_base_url=env.get("TREATMENT_BASE_URL") or None,
            data_dir=env.get("DATA_DIR", DEFAULT_DATA_DIR),
            curated_search_queries_csv=env.get(
                "CURATED_SEARCH_QUERIES_CSV", DEFAULT_CURATED_SEARCH_QUERIES_CSV
            ),
            client_curated_search_queries_csv=env.get(
                "CLIENT_CURATED_SEARCH_QUERIES_CSV", DEFAULT_CURATED_SEARCH_QUERIES_CSV
            ),
            feedback_search_queries_csv=env.get(
                "FEEDBACK_SEARCH_QUERIES_CSV", DEFAULT_FEEDBACK_SEARCH_QUERIES_CSV
            ),
            top_search_queries_csv=env.get("TOP_SEARCH_QUERIES_CSV", DEFAULT_TOP_SEARCH_QUERIES_CSV),
            top_client_search_queries_csv=env.get(
                "TOP_CLIENT_SEARCH_QUERIES_CSV", DEFAULT_TOP_CLIENT_SEARCH_QUERIES_CSV
            ),
            search_referrals_csv=env.get("SEARCH_REFERRALS_CSV", DEFAULT_SEARCH_REFERRALS_CSV),
            top_search_selections_csv=env.get(
                "TOP_SEARCH_SELECTIONS_CSV", DEFAULT_TOP_SEARCH_SELECTIONS_CSV
            ),
        )

    def with_overrides(self, **overrides: Optional[str]) -> "ScorerSettings":
        """Copy with every non-None override applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    def resolve(self, file_name: str) -> Path:
        """Dataset path relative to data_dir, unless already absolute."""
        path = Path(file_name)
        return path if path.is_absolute() else Path(self.data_dir) / path


def load_datasets(settings: ScorerSettings) -> EvaluationDatasets:
    """
    Read every dataset an evaluation run needs.

    The referrals export is optional: without it curated weights are not
    adjusted.

    Raises:
        DatasetValidationError: If a judgment file is malformed
        FileNotFoundError: If a required file is missing
    """
    curated_path = settings.resolve(settings.curated_search_queries_csv)
    client_curated_path = settings.resolve(settings.client_curated_search_queries_csv)
    feedback_path = settings.resolve(settings.feedback_search_queries_csv)
    top_queries_path = settings.resolve(settings.top_search_queries_csv)
    top_client_queries_path = settings.resolve(settings.top_client_search_queries_csv)
    referrals_path = settings.resolve(settings.search_referrals_csv)

    logger.info("Loading datasets from %s", settings.data_dir)

    if referrals_path.exists():
        search_referrals = read_search_referrals(referrals_path)
    else:
        logger.warning("Search referrals not found at %s (curated weights will not be adjusted)", referrals_path)
        search_referrals = {}

    datasets = EvaluationDatasets(
        curated_queries=read_curated_search_queries(curated_path),
        client_curated_queries=read_curated_search_queries(client_curated_path, include_empty=True),
        feedback_queries=read_feedback_search_queries(feedback_path),
        top_queries=read_top_search_queries(top_queries_path),
        top_client_queries=read_top_client_search_queries(top_client_queries_path),
        search_referrals=search_referrals,
    )

    logger.info(
        "Loaded %s curated, %s client curated and %s feedback queries",
        len(datasets.curated_queries),
        len(datasets.client_curated_queries),
        len(datasets.feedback_queries),
    )
    return datasets
