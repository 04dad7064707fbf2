"""
Console rendering of evaluation reports.

JSON output goes through the API schemas (see api/v1/converters.py) so the
file written by the evaluation job matches the HTTP responses.
"""

from typing import List, Mapping, Sequence

from search_scorer.domain.entities import (
    ComparisonReport,
    DatasetComparison,
    QueryScoreChange,
    QuerySetReport,
    VariantReport,
    WeightedScoreResult,
)


DATASET_TITLES = {
    "curated": "Curated Search Queries",
    "client_curated": "Client Curated Search Queries",
    "feedback": "Feedback",
    "click_log": "Click Log Search Queries",
}


def heading(text: str, fence: str) -> List[str]:
    return ["", text, fence * len(text)]


def _format_changes(title: str, changes: Sequence[QueryScoreChange]) -> List[str]:
    lines = heading(f"{title} ({len(changes)})", "-")
    if not changes:
        lines.append("(none)")
        return lines

    width = max(len(change.query) for change in changes)
    for change in changes:
        lines.append(f"{change.query:<{width}} => {change.delta:+.4f}")
    return lines


def _format_lowest_scores(results: Sequence[WeightedScoreResult]) -> List[str]:
    lines = heading(f"Lowest Treatment Scores ({len(results)})", "-")
    if not results:
        lines.append("(none)")
        return lines

    width = max(len(item.result.query) for item in results)
    for item in results:
        lines.append(
            f"{item.result.query:<{width}} => {item.result.score:.4f} (weight {item.weight:.4f})"
        )
    return lines


def format_dataset_comparison(comparison: DatasetComparison) -> List[str]:
    lines = heading(DATASET_TITLES.get(comparison.name, comparison.name), "=")
    lines.append(f"Control:   {comparison.control_score:.4f}")
    lines.append(f"Treatment: {comparison.treatment_score:.4f}")
    lines.extend(_format_changes("Biggest Winners", comparison.winners))
    lines.extend(_format_changes("Biggest Losers", comparison.losers))
    lines.extend(_format_lowest_scores(comparison.lowest_treatment_scores))
    return lines


def format_comparison_report(report: ComparisonReport) -> str:
    """Render every dataset comparison as plain text."""
    lines = [
        f"Control:   {report.control.base_url}",
        f"Treatment: {report.treatment.base_url}",
    ]
    for comparison in report.comparisons.values():
        lines.extend(format_dataset_comparison(comparison))
    return "\n".join(lines)


def _format_query_set(label: str, query_set: QuerySetReport) -> str:
    return f"{label}: {query_set.score:.4f} ({len(query_set)} queries)"


def format_variant_report(report: VariantReport) -> str:
    """Render the aggregate scores of a single variant."""
    lines = heading(f"Variant: {report.base_url}", "=")
    for name, query_set in report.query_sets().items():
        lines.append(_format_query_set(DATASET_TITLES.get(name, name), query_set))
    return "\n".join(lines)


def format_click_log_reports(reports: Mapping[str, QuerySetReport]) -> str:
    """Render click log scores keyed by backend base URL."""
    lines = heading(DATASET_TITLES["click_log"], "=")
    for base_url, query_set in reports.items():
        lines.append(_format_query_set(base_url, query_set))
    return "\n".join(lines)

