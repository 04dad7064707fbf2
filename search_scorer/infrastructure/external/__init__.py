"""
External service adapters.

- SearchClient: HTTP client for the package search backend
"""

from .search_client import SearchClient

__all__ = ["SearchClient"]
