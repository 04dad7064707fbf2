"""
Checks that judged package IDs and patterns exist on both backends.

A judgment for a package that a backend cannot return silently lowers the
best achievable score, so stale IDs should be found and removed from the
datasets before comparing variants.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List

from search_scorer.domain.exceptions import InconsistentAvailabilityError
from search_scorer.domain.ports import SearchBackend
from search_scorer.domain.utils.wildcard import is_valid_package_id, matches
from search_scorer.evaluation.worker_pool import run_workers


logger = logging.getLogger(__name__)

VALIDATION_WORKERS = 16
PATTERN_SEPARATORS = ".-_"
EXACT_MATCH_TAKE = 1
PREFIX_MATCH_TAKE = 1000


class PackageIdPatternValidator:
    """
    Looks up package IDs and trailing-wildcard patterns on the control and
    treatment backends.
    """

    def __init__(
        self,
        search_backend: SearchBackend,
        control_url: str,
        treatment_url: str,
        *,
        worker_count: int = VALIDATION_WORKERS,
    ) -> None:
        self._search_backend = search_backend
        self._control_url = control_url
        self._treatment_url = treatment_url
        self._worker_count = worker_count

    def get_non_existent_package_ids(self, package_ids: Iterable[str]) -> List[str]:
        """
        Find the IDs and patterns that match nothing on either backend.

        Args:
            package_ids: IDs or patterns; duplicates differing in case are checked once

        Returns:
            Missing IDs, sorted ignoring case

        Raises:
            InconsistentAvailabilityError: If an ID exists on only one backend
            ValueError: If an entry is neither an ID nor a prefix pattern
        """
        distinct: List[str] = []
        seen = set()
        for package_id in package_ids:
            if package_id.lower() not in seen:
                seen.add(package_id.lower())
                distinct.append(package_id)

        logger.info("Checking %s package IDs", len(distinct))
        exists = run_workers(distinct, self.does_package_id_exist, self._worker_count, name="validator")

        missing = [package_id for package_id, found in zip(distinct, exists) if not found]
        return sorted(missing, key=str.lower)

    def does_package_id_exist(self, package_id_pattern: str) -> bool:
        """
        Check one ID or pattern against both backends concurrently.

        An exact ID is looked up with a 'packageid:' query. A pattern ending
        in '*' is looked up by the words of its prefix and any returned ID
        matching the pattern counts.

        Raises:
            InconsistentAvailabilityError: If the backends disagree
            ValueError: If the pattern is not supported
        """
        if is_valid_package_id(package_id_pattern):
            query = f"packageid:{package_id_pattern}"
            take = EXACT_MATCH_TAKE
        elif package_id_pattern.endswith("*"):
            prefix = package_id_pattern[:-1].rstrip(PATTERN_SEPARATORS)
            if not is_valid_package_id(prefix):
                raise ValueError(
                    f"The package ID '{package_id_pattern}' looks like a pattern but the part "
                    "before the wildcard is not a valid package ID."
                )

            pieces = prefix
            for separator in PATTERN_SEPARATORS:
                pieces = pieces.replace(separator, " ")
            query = " ".join(pieces.split())
            take = PREFIX_MATCH_TAKE
        else:
            raise ValueError(f"The package ID pattern '{package_id_pattern}' is not supported.")

        with ThreadPoolExecutor(max_workers=2) as executor:
            control_task = executor.submit(
                self._exists_in_query, package_id_pattern, self._control_url, query, take
            )
            treatment_task = executor.submit(
                self._exists_in_query, package_id_pattern, self._treatment_url, query, take
            )
            in_control = control_task.result()
            in_treatment = treatment_task.result()

        if in_control != in_treatment:
            raise InconsistentAvailabilityError(
                f"The package ID '{package_id_pattern}' has inconsistent availability. "
                f"Exists in control: {in_control}. "
                f"Exists in treatment: {in_treatment}."
            )

        return in_control

    def _exists_in_query(self, package_id_pattern: str, base_url: str, query: str, take: int) -> bool:
        response = self._search_backend.search(base_url, query, take)
        return any(matches(package_id, package_id_pattern) for package_id in response.package_ids)
