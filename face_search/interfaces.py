"""Core interfaces and data structures for the face search engine.

This module defines the data classes that flow through a search and the
Protocols for the two external collaborators the engine depends on:

- DescriptorSource: turns raw image bytes into face records
- CorpusEnumerator: lists the stored images to compare against

Components depend on these abstractions rather than on the dlib backend
or the filesystem, so tests can drive the engine with synthetic
descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Protocol, Tuple, runtime_checkable

import numpy as np

NO_FACES_MESSAGE = "No faces found in uploaded image"


@dataclass(frozen=True)
class FaceRecord:
    """A single detected face.

    Attributes:
        descriptor: Fixed-length descriptor vector, shape [D] (128 for dlib)
        landmarks: Backend specific landmark data (opaque to the engine)
        location: Optional face box as (top, right, bottom, left)
    """

    descriptor: np.ndarray
    landmarks: Any = None
    location: Optional[Tuple[int, int, int, int]] = None

    def __post_init__(self) -> None:
        """Validate and freeze the descriptor."""
        descriptor = np.array(self.descriptor, dtype=np.float64)
        if descriptor.ndim != 1:
            raise ValueError(
                f"descriptor must be a 1-D vector, got shape {descriptor.shape}"
            )
        descriptor.setflags(write=False)
        object.__setattr__(self, "descriptor", descriptor)

    @property
    def dimension(self) -> int:
        """Length of the descriptor vector."""
        return int(self.descriptor.shape[0])

    def __repr__(self) -> str:
        """String representation of face record."""
        return f"FaceRecord(dim={self.dimension}, location={self.location})"


@dataclass(frozen=True)
class Candidate:
    """One stored image to be checked against the query.

    Bytes are fetched lazily through ``fetch`` so that an unreadable file
    only fails its own evaluation.

    Attributes:
        id: Candidate identifier (file name for directory corpora)
        fetch: Zero-argument callable returning the raw image bytes
    """

    id: str
    fetch: Callable[[], bytes] = field(repr=False, compare=False)

    def read_bytes(self) -> bytes:
        """Return the candidate's raw bytes (may block on I/O)."""
        return self.fetch()

    @classmethod
    def from_bytes(cls, candidate_id: str, data: bytes) -> Candidate:
        """Build a candidate whose bytes are already in memory."""
        return cls(id=candidate_id, fetch=lambda: data)


@dataclass(frozen=True)
class MatchResult:
    """A candidate that matched the query.

    Attributes:
        candidate_id: Identifier of the matching candidate
        similarity: Integer percentage in [0, 100], higher = more similar
        distance: Euclidean distance of the qualifying face pair
        payload: Candidate's raw bytes, passed through for display
    """

    candidate_id: str
    similarity: int
    distance: float
    payload: bytes = field(repr=False)


@dataclass(frozen=True)
class CandidateEvaluation:
    """Outcome of evaluating one candidate.

    ``match`` is None when no face pair qualified. ``error`` carries the
    diagnostic message when the candidate could not be read or decoded.
    """

    candidate_id: str
    match: Optional[MatchResult] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class SearchOutcome:
    """Result of a search request.

    Attributes:
        matches: Matches sorted by similarity descending, ties in
                 corpus enumeration order
        detected_faces: Number of faces found in the query image
        compared_files: Number of candidates enumerated
        successful_comparisons: Number of matches
        failed_files: Ids of candidates that could not be evaluated
        error: Message for the "no faces in query" outcome
    """

    matches: List[MatchResult] = field(default_factory=list)
    detected_faces: int = 0
    compared_files: int = 0
    successful_comparisons: int = 0
    failed_files: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def no_faces(cls) -> SearchOutcome:
        """Outcome for a query image without any detectable face."""
        return cls(error=NO_FACES_MESSAGE)

    @property
    def found_faces(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        """String representation."""
        if not self.found_faces:
            return f"SearchOutcome(error='{self.error}')"
        return (
            f"SearchOutcome(matches={len(self.matches)}, "
            f"detected_faces={self.detected_faces}, "
            f"compared_files={self.compared_files}, "
            f"failed_files={len(self.failed_files)})"
        )


@runtime_checkable
class DescriptorSource(Protocol):
    """Protocol for face descriptor extraction.

    A DescriptorSource takes encoded image bytes and returns one
    FaceRecord per detected face, in detection order.
    """

    def extract_faces(self, image_bytes: bytes) -> List[FaceRecord]:
        """Extract face records from an encoded image.

        Args:
            image_bytes: Encoded image (JPEG, PNG, ...)

        Returns:
            List of FaceRecord objects. May be empty if no face is found.

        Raises:
            DecodeError: If the bytes cannot be decoded as an image.

        Example:
            >>> source = DlibDescriptorSource()
            >>> faces = source.extract_faces(Path("group.jpg").read_bytes())
            >>> print(f"Found {len(faces)} faces")
        """
        ...


@runtime_checkable
class CorpusEnumerator(Protocol):
    """Protocol for listing the stored images searched by a request."""

    def list_candidates(self) -> List[Candidate]:
        """List all candidates in a deterministic order.

        Returns:
            List of Candidate objects. May be empty.

        Raises:
            StorageError: If the corpus location cannot be read.
        """
        ...
