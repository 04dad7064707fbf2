#!/usr/bin/env python3
"""
Evaluation Job comparing the relevancy of two search backends.

Scores the curated, client curated and feedback datasets against a
control and a treatment deployment and prints the aggregate scores with
the biggest winners, losers and lowest treatment scores per dataset.

Usage:
    python -m search_scorer.evaluation.evaluation_job \
        --control-url https://control.example/api \
        --treatment-url https://treatment.example/api \
        --data-dir data \
        --output data/evaluation/comparison.json

    # Aggregate scores of a single backend, no comparison
    python -m search_scorer.evaluation.evaluation_job --variant-url https://custom.example/api

    # Also score judgments derived from the click log
    python -m search_scorer.evaluation.evaluation_job --variant-url https://custom.example/api --click-log
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from search_scorer.api.v1.converters import (
    domain_comparison_report_to_api,
    domain_query_set_to_api,
    domain_variant_report_to_api,
)
from search_scorer.config import ScorerSettings, load_datasets
from search_scorer.domain.exceptions import (
    DatasetValidationError,
    NdcgInvariantError,
    SearchClientError,
)
from search_scorer.evaluation.relevancy_evaluator import RelevancyScoreEvaluator
from search_scorer.evaluation.reporting import (
    format_click_log_reports,
    format_comparison_report,
    format_variant_report,
)
from search_scorer.infrastructure.datasets import read_top_search_selections
from search_scorer.infrastructure.external.search_client import SearchClient


logger = logging.getLogger(__name__)


def _write_json(payload: dict, output_path: str) -> None:
    output_path_obj = Path(output_path)
    output_path_obj.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path_obj, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    logger.info("Saved report to %s", output_path_obj)


def main(
    settings: ScorerSettings,
    variant_url: Optional[str] = None,
    output_path: Optional[str] = None,
    evaluator: Optional[RelevancyScoreEvaluator] = None,
    include_click_log: bool = False,
) -> None:
    """
    Main entry point for the evaluation job.

    Steps:
    1. Load the datasets
    2. Score every dataset against each backend
    3. Optionally score the click log against the same backends
    4. Print the report and optionally save it as JSON
    """
    if variant_url is None and not (settings.control_base_url and settings.treatment_base_url):
        raise ValueError("Both a control and a treatment URL are required (or a --variant-url)")

    logger.info("=" * 70)
    logger.info("EVALUATION JOB")
    logger.info("=" * 70)

    logger.info("Step 1: Loading datasets...")
    datasets = load_datasets(settings)

    if evaluator is None:
        evaluator = RelevancyScoreEvaluator(SearchClient())

    if variant_url is not None:
        logger.info("Step 2: Scoring variant %s...", variant_url)
        variant_report = evaluator.get_variant_report(variant_url, datasets)
        print(format_variant_report(variant_report))
        payload = domain_variant_report_to_api(variant_report).model_dump(mode="json")
        base_urls = [variant_url]
    else:
        logger.info("Step 2: Scoring control and treatment...")
        report = evaluator.get_report(
            settings.control_base_url,
            settings.treatment_base_url,
            datasets,
        )
        print(format_comparison_report(report))
        payload = domain_comparison_report_to_api(report).model_dump(mode="json")
        base_urls = [settings.control_base_url, settings.treatment_base_url]

    if include_click_log:
        logger.info("Step 3: Scoring the click log...")
        selections = read_top_search_selections(settings.resolve(settings.top_search_selections_csv))
        click_log = {
            base_url: evaluator.get_click_log_report(base_url, selections, datasets.top_queries)
            for base_url in base_urls
        }
        print(format_click_log_reports(click_log))
        payload["click_log"] = {
            base_url: domain_query_set_to_api(query_set).model_dump(mode="json")
            for base_url, query_set in click_log.items()
        }

    if output_path is not None:
        logger.info("Step 4: Saving report...")
        _write_json(payload, output_path)

    logger.info("=" * 70)
    logger.info("EVALUATION COMPLETE")
    logger.info("=" * 70)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare the relevancy of a control and a treatment search backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--control-url",
        type=str,
        default=None,
        help="Control backend base URL (default: $CONTROL_BASE_URL)",
    )
    parser.add_argument(
        "--treatment-url",
        type=str,
        default=None,
        help="Treatment backend base URL (default: $TREATMENT_BASE_URL)",
    )
    parser.add_argument(
        "--variant-url",
        type=str,
        default=None,
        help="Score a single backend instead of comparing control and treatment",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory with the dataset CSV files (default: $DATA_DIR or 'data')",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional path for the JSON report",
    )
    parser.add_argument(
        "--click-log",
        action="store_true",
        help="Also score judgments derived from the search selection click log",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = ScorerSettings.from_env().with_overrides(
        control_base_url=args.control_url,
        treatment_base_url=args.treatment_url,
        data_dir=args.data_dir,
    )

    try:
        main(
            settings,
            variant_url=args.variant_url,
            output_path=args.output,
            include_click_log=args.click_log,
        )
    except KeyboardInterrupt:
        logger.info("Evaluation interrupted by user")
        return 130
    except (SearchClientError, DatasetValidationError, NdcgInvariantError) as e:
        logger.error("Evaluation failed: %s", e)
        return 1
    except Exception as e:
        logger.error("Evaluation failed: %s", e, exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(run())
