"""Exception hierarchy for the face search engine.

Only failures that make the query unusable, or the whole corpus
unreachable, leave :meth:`SearchService.search`. Anything scoped to a
single candidate is contained by the evaluator.
"""

from __future__ import annotations


class FaceSearchError(Exception):
    """Base class for all face search errors."""


class DecodeError(FaceSearchError):
    """Image bytes could not be decoded into pixels."""


class QueryDecodeError(DecodeError):
    """The uploaded query image itself is unusable."""


class ExtractionError(FaceSearchError):
    """The descriptor model failed on a decoded image."""


class StorageError(FaceSearchError):
    """The corpus location could not be listed."""
