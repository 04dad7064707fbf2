"""
Package ID and wildcard pattern helpers.

Patterns support '?' (exactly one character) and '*' (any run of
characters) and always match the whole package ID, ignoring case.
"""

import re
from functools import lru_cache
from typing import Pattern


_PACKAGE_ID_REGEX = re.compile(r"^\w+([.-]\w+)*$")
MAX_PACKAGE_ID_LENGTH = 100


def is_wildcard(value: str) -> bool:
    """Check if a judgment key is a pattern rather than a literal package ID."""
    return "*" in value or "?" in value


@lru_cache(maxsize=None)
def wildcard_to_regex(pattern: str) -> Pattern[str]:
    """
    Compile a package ID pattern into an anchored, case-insensitive regex.

    Args:
        pattern: Pattern such as 'Microsoft.Extensions.*' or 'xunit.?unner'

    Returns:
        Compiled regex matching the full package ID
    """
    escaped = re.escape(pattern).replace(r"\?", ".").replace(r"\*", ".*")
    return re.compile(f"^{escaped}$", re.IGNORECASE)


def matches(package_id: str, pattern: str) -> bool:
    """Check a package ID against a literal ID or a wildcard pattern."""
    if not is_wildcard(pattern):
        return package_id.lower() == pattern.lower()

    return wildcard_to_regex(pattern).match(package_id) is not None


def is_valid_package_id(package_id: str) -> bool:
    """Check package ID syntax: word runs joined by '.' or '-', max 100 chars."""
    if not package_id or len(package_id) > MAX_PACKAGE_ID_LENGTH:
        return False

    return _PACKAGE_ID_REGEX.match(package_id) is not None
