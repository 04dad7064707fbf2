"""
Search backend client implementing the SearchBackend port.

Executes package search queries over HTTP with two extra guarantees:

1. Single-flight caching: every distinct request URL is fetched at most
   once per client. Concurrent callers for the same URL block on the same
   pending slot and all receive the same response (or the same error).
   The cache lives as long as the client and is never evicted.

2. Retries: a failed request (transport error, timeout, non-2xx status,
   malformed JSON) is retried up to 3 attempts in total with a fixed
   1 second delay. The last failure is raised as SearchClientError.

The constructor accepts an optional `session` so tests can inject a fake
that returns canned responses instead of making network calls.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field

from search_scorer.domain.exceptions import SearchClientError
from search_scorer.domain.ports import SearchBackend
from search_scorer.domain.value_objects import SearchHit, SearchResponse


logger = logging.getLogger(__name__)


# =============================================================================
# Wire format
# =============================================================================


class SearchHitPayload(BaseModel):
    """One entry of the `data` array in a search response."""

    model_config = ConfigDict(extra="ignore")

    id: str
    version: str | None = None


class SearchResponsePayload(BaseModel):
    """JSON body returned by the search query endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    total_hits: int = Field(alias="totalHits", ge=0)
    data: List[SearchHitPayload] = Field(default_factory=list)

    def to_domain(self) -> SearchResponse:
        return SearchResponse(
            total_hits=self.total_hits,
            hits=tuple(SearchHit(id=hit.id, version=hit.version) for hit in self.data),
        )


# =============================================================================
# Client
# =============================================================================


class _PendingSearch:
    """Write-once result slot shared by every caller of one request URL."""

    def __init__(self) -> None:
        self._done = threading.Event()
        self._response: Optional[SearchResponse] = None
        self._error: Optional[BaseException] = None

    def set_response(self, response: SearchResponse) -> None:
        self._response = response
        self._done.set()

    def set_error(self, error: BaseException) -> None:
        self._error = error
        self._done.set()

    def wait(self) -> SearchResponse:
        self._done.wait()
        if self._error is not None:
            raise self._error
        return self._response


class SearchClient(SearchBackend):
    """
    HTTP client for the package search query endpoint.

    Usage:
        client = SearchClient()
        response = client.search("https://search.example.org", "json", take=5)
        response.package_ids  # ['Newtonsoft.Json', ...]

        # Testing (with fake session and no retry delay)
        client = SearchClient(session=fake_session, sleep=lambda s: None)
    """

    QUERY_PATH = "/query"
    MAX_ATTEMPTS = 3
    RETRY_DELAY_S = 1.0

    def __init__(
        self,
        session: Optional[Any] = None,
        *,
        timeout: Optional[float] = None,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay_s: float = RETRY_DELAY_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the search client.

        Args:
            session: Optional HTTP session for dependency injection.
                    If None, creates a new requests.Session().
            timeout: Per-request timeout in seconds. None leaves it to the
                    transport defaults.
            max_attempts: Total attempts per request, including the first
            retry_delay_s: Fixed delay between attempts
            sleep: Function used to wait between attempts
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

        self._session = session if session is not None else requests.Session()
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._retry_delay_s = retry_delay_s
        self._sleep = sleep

        self._cache: Dict[str, _PendingSearch] = {}
        self._cache_lock = threading.Lock()

    @property
    def cached_request_count(self) -> int:
        """Number of distinct request URLs seen so far."""
        with self._cache_lock:
            return len(self._cache)

    def build_request_url(self, base_url: str, query: str, take: int) -> str:
        """
        Build the fully encoded request URL. This is also the cache key.

        Args:
            base_url: Base URL of the search deployment
            query: Raw query text
            take: Number of results to request

        Returns:
            Absolute URL including the encoded query string
        """
        if not base_url or not base_url.strip():
            raise ValueError("base_url cannot be empty")

        if take < 1:
            raise ValueError(f"take must be >= 1, got {take}")

        params = {
            "q": query,
            "skip": 0,
            "take": take,
            "prerelease": "true",
            "semVerLevel": "2.0.0",
        }
        request = requests.Request(
            "GET", base_url.strip().rstrip("/") + self.QUERY_PATH, params=params
        )
        return request.prepare().url

    def search(self, base_url: str, query: str, take: int) -> SearchResponse:
        """
        Run a search query, fetching it at most once per distinct request.

        Args:
            base_url: Base URL of the search deployment
            query: Raw query text
            take: Number of results to request

        Returns:
            SearchResponse with package IDs in ranked order

        Raises:
            ValueError: If base_url is empty or take < 1
            SearchClientError: If every attempt failed
        """
        url = self.build_request_url(base_url, query, take)

        with self._cache_lock:
            pending = self._cache.get(url)
            is_owner = pending is None
            if is_owner:
                pending = _PendingSearch()
                self._cache[url] = pending

        if is_owner:
            try:
                pending.set_response(self._get_with_retries(url, query))
            except Exception as e:
                pending.set_error(e)
            except BaseException as e:
                # Interrupted: wake the waiters but let a later call fetch again.
                with self._cache_lock:
                    self._cache.pop(url, None)
                pending.set_error(e)
                raise

        return pending.wait()

    # =========================================================================
    # Private helper methods
    # =========================================================================

    def _get_with_retries(self, url: str, query: str) -> SearchResponse:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._session.get(url, timeout=self._timeout)
                response.raise_for_status()
                payload = SearchResponsePayload.model_validate(response.json())
                return payload.to_domain()
            except Exception as e:
                if attempt < self._max_attempts:
                    logger.warning(
                        "Search query '%s' failed (attempt %s/%s): %s; retrying in %.1fs",
                        query,
                        attempt,
                        self._max_attempts,
                        e,
                        self._retry_delay_s,
                    )
                    self._sleep(self._retry_delay_s)
                    continue
                raise SearchClientError(
                    f"Search query '{query}' failed after {attempt} attempts: {e}"
                ) from e
