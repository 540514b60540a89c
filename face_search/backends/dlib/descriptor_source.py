"""Dlib descriptor source using the face_recognition library.

Detects every face in an image with dlib's HOG or CNN detector, then
computes a 128-D ResNet descriptor and 68-point landmarks for each face.
Descriptors stay on dlib's native scale (not L2-normalized) so a
Euclidean threshold around 0.5-0.6 keeps its usual meaning.
"""

from __future__ import annotations

import time
from typing import List, Literal

import cv2
import face_recognition
import numpy as np

from face_search.errors import ExtractionError
from face_search.interfaces import FaceRecord
from face_search.logging_config import get_logger
from face_search.utils import decode_image

logger = get_logger(__name__)


class DlibDescriptorSource:
    """Face descriptor source backed by dlib via face_recognition.

    Attributes:
        detector_model: Detection model ("hog" or "cnn")
        embedder_model: Landmark model used for encodings ("large" or "small")
        upsample: Number of times to upsample image (higher = smaller faces)
        num_jitters: Number of re-samples per face when encoding
        embedding_dim: Descriptor dimension (128 for dlib)

    Example:
        >>> source = DlibDescriptorSource(detector_model="hog")
        >>> faces = source.extract_faces(image_bytes)
        >>> print(f"Found {len(faces)} faces")
    """

    def __init__(
        self,
        detector_model: Literal["hog", "cnn"] = "hog",
        embedder_model: Literal["large", "small"] = "large",
        upsample: int = 1,
        num_jitters: int = 1,
    ):
        """Initialize dlib descriptor source.

        Args:
            detector_model: "hog" (faster, CPU-friendly) or "cnn" (more accurate, GPU preferred)
            embedder_model: "large" (68-point landmarks) or "small" (5-point, faster)
            upsample: Number of times to upsample before detection. Default: 1
            num_jitters: Re-samples per face when encoding. Default: 1 (no jittering)
        """
        if detector_model not in ("hog", "cnn"):
            raise ValueError(
                f"detector_model must be 'hog' or 'cnn', got '{detector_model}'"
            )
        if embedder_model not in ("large", "small"):
            raise ValueError(
                f"embedder_model must be 'large' or 'small', got '{embedder_model}'"
            )
        if upsample < 0:
            raise ValueError(f"upsample must be >= 0, got {upsample}")
        if num_jitters < 1:
            raise ValueError(f"num_jitters must be >= 1, got {num_jitters}")

        self.detector_model = detector_model
        self.embedder_model = embedder_model
        self.upsample = upsample
        self.num_jitters = num_jitters
        self.embedding_dim = 128

        logger.info(
            f"Initializing dlib descriptor source (detector={detector_model}, "
            f"embedder={embedder_model}, upsample={upsample}, "
            f"num_jitters={num_jitters})"
        )

    def warm_up(self) -> None:
        """Run one detection on a blank frame so model loading happens at startup."""
        start = time.perf_counter()
        blank = np.zeros((64, 64, 3), dtype=np.uint8)
        face_recognition.face_locations(
            blank,
            number_of_times_to_upsample=0,
            model=self.detector_model,
        )
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"dlib models ready ({elapsed_ms:.1f}ms)")

    def extract_faces(self, image_bytes: bytes) -> List[FaceRecord]:
        """Extract one FaceRecord per detected face.

        Args:
            image_bytes: Encoded image bytes

        Returns:
            Face records in detection order. Empty list if no face is found.

        Raises:
            DecodeError: If the bytes are not a decodable image.
            ExtractionError: If dlib fails on the decoded image.
        """
        image_bgr = decode_image(image_bytes)

        try:
            # face_recognition expects RGB
            image_rgb = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)

            # Returns list of tuples: (top, right, bottom, left)
            locations = face_recognition.face_locations(
                image_rgb,
                number_of_times_to_upsample=self.upsample,
                model=self.detector_model,
            )

            if not locations:
                logger.debug("No faces detected")
                return []

            encodings = face_recognition.face_encodings(
                image_rgb,
                known_face_locations=locations,
                num_jitters=self.num_jitters,
                model=self.embedder_model,
            )
            landmarks = face_recognition.face_landmarks(
                image_rgb,
                face_locations=locations,
                model=self.embedder_model,
            )
        except Exception as e:
            logger.error(f"Failed to extract faces: {e}")
            raise ExtractionError(f"Face extraction failed: {e}") from e

        if len(encodings) != len(locations):
            raise ExtractionError(
                f"Got {len(encodings)} encodings for {len(locations)} faces"
            )

        faces = []
        for location, encoding, marks in zip(locations, encodings, landmarks):
            descriptor = np.asarray(encoding, dtype=np.float64)
            if descriptor.shape[0] != self.embedding_dim:
                raise ExtractionError(
                    f"Unexpected descriptor dimension {descriptor.shape[0]}, "
                    f"expected {self.embedding_dim}"
                )
            faces.append(
                FaceRecord(
                    descriptor=descriptor,
                    landmarks=marks,
                    location=tuple(int(v) for v in location),
                )
            )

        logger.debug(f"Extracted {len(faces)} face(s) (detector={self.detector_model})")
        return faces

    def __repr__(self) -> str:
        """String representation of descriptor source."""
        return (
            f"DlibDescriptorSource(detector='{self.detector_model}', "
            f"embedder='{self.embedder_model}', upsample={self.upsample}, "
            f"num_jitters={self.num_jitters}, dim={self.embedding_dim})"
        )
