"""
Dataset readers for judgment and query frequency files.
"""

from .csv_readers import (
    read_curated_search_queries,
    read_feedback_search_queries,
    read_search_referrals,
    read_top_client_search_queries,
    read_top_search_queries,
    read_top_search_selections,
)

__all__ = [
    "read_curated_search_queries",
    "read_feedback_search_queries",
    "read_search_referrals",
    "read_top_client_search_queries",
    "read_top_search_queries",
    "read_top_search_selections",
]
