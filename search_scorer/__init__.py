"""
search_scorer - relevancy evaluation for package search backends.

Replays curated and real-world queries against a control and a treatment
search deployment, scores each with NDCG and compares the two.
"""

__version__ = "1.0.0"
