"""Unit tests for distance, similarity and image helpers."""

from __future__ import annotations

import base64

import cv2
import numpy as np
import pytest

from face_search.errors import DecodeError
from face_search.interfaces import FaceRecord, SearchOutcome
from face_search.utils import (
    decode_image,
    distance_to_similarity,
    encode_payload,
    euclidean_distance,
)


def test_euclidean_distance():
    """Test distance between simple vectors."""
    a = np.zeros(128)
    b = np.zeros(128)
    b[0] = 3.0
    b[1] = 4.0

    assert euclidean_distance(a, b) == pytest.approx(5.0)
    assert euclidean_distance(b, a) == pytest.approx(5.0)
    assert euclidean_distance(a, a) == 0.0


def test_euclidean_distance_shape_mismatch():
    """Test that descriptors of different sizes are rejected."""
    with pytest.raises(ValueError, match="shapes differ"):
        euclidean_distance(np.zeros(128), np.zeros(64))


@pytest.mark.parametrize(
    "distance, expected",
    [
        (0.0, 100),
        (0.3, 70),
        (0.45, 55),
        (0.375, 63),  # half rounds up
        (0.999, 0),
        (1.0, 0),
        (1.7, 0),  # clamped
        (-0.2, 100),  # clamped
    ],
)
def test_distance_to_similarity(distance, expected):
    """Test conversion of distance to an integer percentage."""
    assert distance_to_similarity(distance) == expected


def test_similarity_is_monotonic():
    """Test that larger distances never give higher similarity."""
    distances = np.linspace(0.0, 1.2, 241)
    scores = [distance_to_similarity(float(d)) for d in distances]

    assert all(s1 >= s2 for s1, s2 in zip(scores, scores[1:]))
    assert all(isinstance(s, int) for s in scores)


def test_decode_image():
    """Test decoding PNG bytes into a BGR array."""
    image = np.zeros((24, 32, 3), dtype=np.uint8)
    image[:, :, 2] = 255  # red in BGR
    ok, encoded = cv2.imencode(".png", image)
    assert ok

    decoded = decode_image(encoded.tobytes())

    assert decoded.shape == (24, 32, 3)
    assert decoded.dtype == np.uint8
    assert decoded[0, 0].tolist() == [0, 0, 255]


@pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n truncated"])
def test_decode_image_invalid(data):
    """Test that empty or corrupt bytes raise DecodeError."""
    with pytest.raises(DecodeError):
        decode_image(data)


def test_decode_image_opencv_error(monkeypatch):
    """Test that an OpenCV error while decoding is reported as DecodeError."""

    def broken(buffer, flags):
        raise cv2.error("imdecode failed")

    monkeypatch.setattr(cv2, "imdecode", broken)

    with pytest.raises(DecodeError, match="imdecode failed"):
        decode_image(b"\xff\xd8\xff\xe0 malformed")


def test_encode_payload():
    """Test base64 encoding of image bytes."""
    assert encode_payload(b"img1") == "aW1nMQ=="
    assert base64.b64decode(encode_payload(b"\x00\xff")) == b"\x00\xff"


def test_face_record_is_immutable():
    """Test that descriptors cannot be modified after construction."""
    source = np.zeros(128)
    face = FaceRecord(descriptor=source)
    source[0] = 1.0

    assert face.dimension == 128
    assert face.descriptor[0] == 0.0
    with pytest.raises(ValueError):
        face.descriptor[0] = 2.0


def test_face_record_requires_vector():
    """Test that a 2-D descriptor is rejected."""
    with pytest.raises(ValueError, match="1-D"):
        FaceRecord(descriptor=np.zeros((2, 128)))


def test_no_faces_outcome():
    """Test the no-faces outcome shape."""
    outcome = SearchOutcome.no_faces()

    assert outcome.matches == []
    assert outcome.error == "No faces found in uploaded image"
    assert not outcome.found_faces
    assert "No faces" in repr(outcome)
