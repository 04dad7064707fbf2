#!/usr/bin/env python3
"""
Package ID Validation Script.

Checks that every package ID and pattern judged in the curated and feedback
datasets (and optionally the click log) exists on both the control and the
treatment backend, and lists the ones that do not.

Usage:
    python -m scripts.validate_package_ids \
        --control-url https://control.example/api \
        --treatment-url https://treatment.example/api \
        --data-dir data
"""

import argparse
import logging
import sys
from typing import List

from search_scorer.config import ScorerSettings
from search_scorer.domain.exceptions import (
    DatasetValidationError,
    InconsistentAvailabilityError,
    SearchClientError,
)
from search_scorer.evaluation.package_id_validator import PackageIdPatternValidator
from search_scorer.infrastructure.datasets import (
    read_curated_search_queries,
    read_feedback_search_queries,
    read_top_search_selections,
)
from search_scorer.infrastructure.external.search_client import SearchClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def collect_package_ids(settings: ScorerSettings, include_selections: bool = False) -> List[str]:
    """Every judged package ID or pattern, in dataset order."""
    package_ids: List[str] = []

    for path in (
        settings.resolve(settings.curated_search_queries_csv),
        settings.resolve(settings.client_curated_search_queries_csv),
    ):
        for query in read_curated_search_queries(path):
            package_ids.extend(query.package_id_to_score)

    for feedback in read_feedback_search_queries(settings.resolve(settings.feedback_search_queries_csv)):
        package_ids.extend(feedback.most_relevant_package_ids)

    if include_selections:
        for query in read_top_search_selections(settings.resolve(settings.top_search_selections_csv)):
            package_ids.extend(selection.package_id for selection in query.selections)

    return package_ids


def main(settings: ScorerSettings, include_selections: bool = False) -> int:
    """
    Main entry point for the validation script.

    Returns:
        Number of package IDs missing from both backends
    """
    if not (settings.control_base_url and settings.treatment_base_url):
        logger.error("Both a control and a treatment URL are required")
        sys.exit(1)

    try:
        package_ids = collect_package_ids(settings, include_selections)
        validator = PackageIdPatternValidator(
            SearchClient(),
            settings.control_base_url,
            settings.treatment_base_url,
        )
        missing = validator.get_non_existent_package_ids(package_ids)
    except (DatasetValidationError, InconsistentAvailabilityError, SearchClientError, ValueError) as e:
        logger.error(f"Validation failed: {e}")
        sys.exit(1)

    if missing:
        logger.warning("%s package IDs do not exist:", len(missing))
        for package_id in missing:
            print(package_id)
    else:
        logger.info("All package IDs exist")

    return len(missing)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Find judged package IDs missing from the search backends")
    parser.add_argument(
        "--control-url",
        type=str,
        default=None,
        help="Control backend base URL (default: $CONTROL_BASE_URL)"
    )
    parser.add_argument(
        "--treatment-url",
        type=str,
        default=None,
        help="Treatment backend base URL (default: $TREATMENT_BASE_URL)"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory with the dataset CSV files (default: $DATA_DIR or 'data')"
    )
    parser.add_argument(
        "--include-selections",
        action="store_true",
        help="Also check package IDs from the click log"
    )

    args = parser.parse_args()
    settings = ScorerSettings.from_env().with_overrides(
        control_base_url=args.control_url,
        treatment_base_url=args.treatment_url,
        data_dir=args.data_dir,
    )
    main(settings, args.include_selections)
