"""High-level services for the face search engine.

This package contains the search pipeline that orchestrates
descriptor extraction, candidate evaluation and ranking.
"""

from face_search.services.search import (
    CandidateEvaluator,
    MatchAggregator,
    SearchService,
)

__all__ = [
    "CandidateEvaluator",
    "MatchAggregator",
    "SearchService",
]
