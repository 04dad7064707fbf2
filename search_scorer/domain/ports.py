"""
Port interfaces (protocols) for the domain layer.

Ports define the contracts between the domain and infrastructure layers.
They are implemented by adapters in the infrastructure layer, allowing
the scoring logic to be tested without a live search backend.
"""

from typing import Protocol

from .value_objects import SearchResponse


class SearchBackend(Protocol):
    """
    Port for executing a search query against a backend deployment.

    Implementations must be safe to call from many threads at once. The
    evaluation scores the same query under several configurations, so
    implementations are expected to deduplicate identical requests.
    """

    def search(self, base_url: str, query: str, take: int) -> SearchResponse:
        """
        Run one query and return the top results.

        Args:
            base_url: Base URL of the deployment (control or treatment)
            query: Raw search query text
            take: Number of results to request

        Returns:
            SearchResponse with package IDs in ranked order

        Raises:
            SearchClientError: If the backend keeps failing after retries
        """
        ...
