"""
Domain utilities module.

Provides shared utilities for the domain layer that remain
independent of infrastructure concerns.
"""

from .wildcard import is_valid_package_id, is_wildcard, matches, wildcard_to_regex

__all__ = ["is_valid_package_id", "is_wildcard", "matches", "wildcard_to_regex"]
