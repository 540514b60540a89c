"""Search service: rank stored images by face similarity to a query image.

The pipeline for one request:
1. Extract the query's face descriptors
2. Enumerate the corpus
3. Evaluate every candidate independently (extract, compare, first match wins)
4. Sort matches by similarity, ties in corpus order

A candidate that cannot be read or decoded only drops out of the result;
the request fails only when the query image or the corpus listing does.
"""

from __future__ import annotations

import math
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from face_search.errors import DecodeError, QueryDecodeError
from face_search.interfaces import (
    Candidate,
    CandidateEvaluation,
    CorpusEnumerator,
    DescriptorSource,
    FaceRecord,
    MatchResult,
    SearchOutcome,
)
from face_search.logging_config import get_logger
from face_search.utils import distance_to_similarity, euclidean_distance

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 0.5


def _check_threshold(threshold: float) -> None:
    if not (math.isfinite(threshold) and threshold > 0.0):
        raise ValueError(f"Threshold must be a finite number > 0, got {threshold}")


class CandidateEvaluator:
    """Decide whether one candidate image matches the query faces.

    Query faces are tried in order against the candidate's faces in
    extraction order. The first pair closer than the threshold claims the
    candidate and evaluation stops there, so a candidate yields at most one
    MatchResult.

    Attributes:
        descriptor_source: Source used to extract the candidate's faces
    """

    def __init__(self, descriptor_source: DescriptorSource):
        self.descriptor_source = descriptor_source

    def evaluate(
        self,
        candidate: Candidate,
        query_faces: Sequence[FaceRecord],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> CandidateEvaluation:
        """Evaluate a single candidate against the query.

        Args:
            candidate: Stored image to check
            query_faces: Faces extracted from the query image
            threshold: Pairs with distance strictly below this match

        Returns:
            CandidateEvaluation with the match (or None) and, if the
            candidate could not be processed, the error message.
        """
        try:
            payload = candidate.read_bytes()
            candidate_faces = self.descriptor_source.extract_faces(payload)
            match = self._first_match(
                candidate.id, payload, query_faces, candidate_faces, threshold
            )
        except Exception as e:
            logger.warning(f"Error processing {candidate.id}: {e}")
            return CandidateEvaluation(
                candidate_id=candidate.id,
                error=str(e) or type(e).__name__,
            )

        return CandidateEvaluation(candidate_id=candidate.id, match=match)

    @staticmethod
    def _first_match(
        candidate_id: str,
        payload: bytes,
        query_faces: Sequence[FaceRecord],
        candidate_faces: Sequence[FaceRecord],
        threshold: float,
    ) -> Optional[MatchResult]:
        for query_face in query_faces:
            for face in candidate_faces:
                distance = euclidean_distance(query_face.descriptor, face.descriptor)
                if distance < threshold:
                    similarity = distance_to_similarity(distance)
                    logger.debug(
                        f"Match: {candidate_id} (distance={distance:.3f}, "
                        f"similarity={similarity})"
                    )
                    return MatchResult(
                        candidate_id=candidate_id,
                        similarity=similarity,
                        distance=distance,
                        payload=payload,
                    )

        logger.debug(f"No match: {candidate_id} ({len(candidate_faces)} face(s))")
        return None


class MatchAggregator:
    """Run the evaluator over a whole corpus and rank the matches.

    With ``max_workers > 1`` candidates are evaluated on a bounded thread
    pool. Results are always collected in enumeration order, so output is
    identical to sequential evaluation.

    Attributes:
        evaluator: Per-candidate evaluator
        max_workers: Pool size (1 = evaluate in the calling thread)
    """

    def __init__(self, evaluator: CandidateEvaluator, max_workers: int = 1):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.evaluator = evaluator
        self.max_workers = max_workers

    def _evaluate_all(
        self,
        candidates: Sequence[Candidate],
        query_faces: Sequence[FaceRecord],
        threshold: float,
    ) -> List[CandidateEvaluation]:
        if self.max_workers == 1 or len(candidates) < 2:
            return [
                self.evaluator.evaluate(candidate, query_faces, threshold)
                for candidate in candidates
            ]

        workers = min(self.max_workers, len(candidates))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="face-search") as pool:
            # map() yields in submission order, not completion order
            return list(
                pool.map(
                    lambda candidate: self.evaluator.evaluate(candidate, query_faces, threshold),
                    candidates,
                )
            )

    def aggregate(
        self,
        candidates: Sequence[Candidate],
        query_faces: Sequence[FaceRecord],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> SearchOutcome:
        """Evaluate all candidates and build the ranked outcome.

        Args:
            candidates: Corpus candidates in enumeration order
            query_faces: Faces extracted from the query image
            threshold: Distance threshold for a match

        Returns:
            SearchOutcome with matches sorted by similarity (descending),
            ties kept in enumeration order.
        """
        evaluations = self._evaluate_all(candidates, query_faces, threshold)

        matches = [e.match for e in evaluations if e.match is not None]
        # list.sort is stable: equal similarities keep enumeration order
        matches.sort(key=lambda m: m.similarity, reverse=True)

        failed_files = [e.candidate_id for e in evaluations if e.failed]

        return SearchOutcome(
            matches=matches,
            detected_faces=len(query_faces),
            compared_files=len(candidates),
            successful_comparisons=len(matches),
            failed_files=failed_files,
        )


class SearchService:
    """Search a corpus for images containing a face from the query image.

    Collaborators are passed in at construction; call :meth:`startup`
    before serving requests and :meth:`shutdown` when done.

    Attributes:
        descriptor_source: Face descriptor extractor
        corpus: Corpus enumerator
        threshold: Default distance threshold for a match
        aggregator: Match aggregator

    Example:
        >>> service = SearchService(
        ...     descriptor_source=DlibDescriptorSource(),
        ...     corpus=DirectoryCorpus("images"),
        ...     threshold=0.5,
        ... )
        >>> outcome = service.search(Path("query.jpg").read_bytes())
        >>> for match in outcome.matches:
        ...     print(f"{match.candidate_id}: {match.similarity}%")
    """

    def __init__(
        self,
        descriptor_source: DescriptorSource,
        corpus: CorpusEnumerator,
        threshold: float = DEFAULT_THRESHOLD,
        max_workers: int = 1,
    ):
        """Initialize search service.

        Args:
            descriptor_source: Extracts face records from image bytes
            corpus: Lists the stored images to search
            threshold: Distance threshold (> 0); pairs strictly below it match
            max_workers: Candidate evaluation pool size

        Raises:
            ValueError: If threshold or max_workers is invalid.
        """
        _check_threshold(threshold)

        self.descriptor_source = descriptor_source
        self.corpus = corpus
        self.threshold = threshold
        self.aggregator = MatchAggregator(
            CandidateEvaluator(descriptor_source),
            max_workers=max_workers,
        )

        logger.info(
            f"Initialized SearchService with threshold={threshold:.2f}, "
            f"max_workers={max_workers}"
        )

    def startup(self) -> None:
        """Prepare the descriptor source (model warm-up) if it supports it."""
        warm_up = getattr(self.descriptor_source, "warm_up", None)
        if callable(warm_up):
            warm_up()

    def shutdown(self) -> None:
        """Release the descriptor source if it holds resources."""
        close = getattr(self.descriptor_source, "close", None)
        if callable(close):
            close()

    def extract_query(self, image_bytes: bytes) -> List[FaceRecord]:
        """Extract the query faces.

        Raises:
            QueryDecodeError: If the query image cannot be decoded.
        """
        try:
            return list(self.descriptor_source.extract_faces(image_bytes))
        except QueryDecodeError:
            raise
        except DecodeError as e:
            raise QueryDecodeError(f"Could not decode uploaded image: {e}") from e

    def search(
        self,
        image_bytes: bytes,
        threshold: Optional[float] = None,
    ) -> SearchOutcome:
        """Find corpus images containing a face from the query image.

        Args:
            image_bytes: Encoded query image
            threshold: Optional per-call override of the default threshold

        Returns:
            SearchOutcome. When the query has no face the outcome carries
            the "no faces" error and no candidate is evaluated.

        Raises:
            QueryDecodeError: If the query image cannot be decoded.
            StorageError: If the corpus cannot be listed.
            ValueError: If the threshold override is invalid.
        """
        threshold = self.threshold if threshold is None else threshold
        _check_threshold(threshold)

        start_time = time.time()

        query_faces = self.extract_query(image_bytes)
        if not query_faces:
            logger.info("No faces found in uploaded image")
            return SearchOutcome.no_faces()

        candidates = self.corpus.list_candidates()
        outcome = self.aggregator.aggregate(candidates, query_faces, threshold)

        processing_time = (time.time() - start_time) * 1000
        logger.info(
            f"Search finished: {outcome.detected_faces} query face(s), "
            f"{outcome.successful_comparisons}/{outcome.compared_files} matched, "
            f"{len(outcome.failed_files)} failed in {processing_time:.1f}ms"
        )

        return outcome

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"SearchService(threshold={self.threshold:.2f}, "
            f"source={self.descriptor_source}, corpus={self.corpus})"
        )
