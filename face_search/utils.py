"""Utility functions for the face search engine.

Distance and similarity helpers shared by the evaluator, plus image
decoding and payload encoding used at the edges of the system.
"""

from __future__ import annotations

import base64
import math

import cv2
import numpy as np

from face_search.errors import DecodeError


def euclidean_distance(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """Compute Euclidean distance between two descriptors.

    Args:
        vec1: First descriptor, shape [D]
        vec2: Second descriptor, shape [D]

    Returns:
        Non-negative distance. Lower = more similar.

    Raises:
        ValueError: If the descriptors have different shapes.

    Example:
        >>> d = euclidean_distance(query.descriptor, face.descriptor)
        >>> if d < 0.5:
        ...     print("Same person")
    """
    a = np.asarray(vec1, dtype=np.float64)
    b = np.asarray(vec2, dtype=np.float64)

    if a.shape != b.shape:
        raise ValueError(
            f"Descriptor shapes differ: {a.shape} vs {b.shape}"
        )

    return float(np.linalg.norm(a - b))


def distance_to_similarity(distance: float) -> int:
    """Convert a descriptor distance into an integer percentage.

    ``(1 - distance) * 100`` rounded half up, clamped to [0, 100].

    Example:
        >>> distance_to_similarity(0.3)
        70
        >>> distance_to_similarity(0.45)
        55
    """
    score = math.floor((1.0 - distance) * 100.0 + 0.5)
    return int(min(100, max(0, score)))


def decode_image(image_bytes: bytes) -> np.ndarray:
    """Decode encoded image bytes into a BGR array.

    Args:
        image_bytes: Encoded image (JPEG, PNG, BMP, WebP, ...)

    Returns:
        Image in BGR format (OpenCV convention), shape [H, W, 3], dtype uint8.

    Raises:
        DecodeError: If the bytes are empty or not a decodable image.
    """
    if not image_bytes:
        raise DecodeError("Empty image data")

    buffer = np.frombuffer(image_bytes, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeError(f"Could not decode image ({len(image_bytes)} bytes): {e}") from e

    if image is None or image.size == 0:
        raise DecodeError(f"Could not decode image ({len(image_bytes)} bytes)")

    return image


def encode_payload(data: bytes) -> str:
    """Encode raw bytes as base64 text for JSON transport."""
    return base64.b64encode(data).decode("ascii")
