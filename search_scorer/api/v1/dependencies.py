"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the settings, HTTP session and
datasets for use with FastAPI's Depends() system. Each request gets its own
evaluator so backend responses are cached for one report only.

Note: We use module-level singletons instead of @lru_cache with Depends()
parameters, which is an antipattern that can cause unexpected behavior.
"""

from typing import Optional

import requests

from search_scorer.config import ScorerSettings, load_datasets
from search_scorer.evaluation.relevancy_evaluator import RelevancyScoreEvaluator
from search_scorer.evaluation.types import EvaluationDatasets
from search_scorer.infrastructure.external.search_client import SearchClient

# Module-level singletons (initialized lazily)
_settings: Optional[ScorerSettings] = None
_session: Optional[requests.Session] = None
_datasets: Optional[EvaluationDatasets] = None


def get_settings() -> ScorerSettings:
    """Provide settings read from the environment."""
    global _settings
    if _settings is None:
        _settings = ScorerSettings.from_env()
    return _settings


def get_session() -> requests.Session:
    """Provide a singleton HTTP session so connections are pooled across requests."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def get_evaluator() -> RelevancyScoreEvaluator:
    """Provide a new evaluator with an empty response cache."""
    return RelevancyScoreEvaluator(SearchClient(get_session()))


def get_datasets() -> EvaluationDatasets:
    """Provide the datasets, read once from the configured data directory."""
    global _datasets
    if _datasets is None:
        _datasets = load_datasets(get_settings())
    return _datasets


def reset_dependencies() -> None:
    """
    Reset all singletons. Useful for testing.

    This allows tests to inject fake dependencies by resetting
    the module state between test cases.
    """
    global _settings, _session, _datasets

    _settings = None
    _session = None
    _datasets = None
