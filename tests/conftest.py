"""Shared fixtures: synthetic descriptors and a fake descriptor source."""

from __future__ import annotations

import threading
from typing import Dict, List, Sequence, Union

import numpy as np
import pytest

from face_search.errors import DecodeError
from face_search.interfaces import FaceRecord

DIM = 128


def descriptor_at(distance: float, axis: int = 0, base: np.ndarray | None = None) -> np.ndarray:
    """Descriptor at a known Euclidean distance from ``base`` (origin by default)."""
    vec = np.zeros(DIM, dtype=np.float64) if base is None else np.array(base, dtype=np.float64)
    vec[axis] += distance
    return vec


class FakeDescriptorSource:
    """Descriptor source that maps image bytes to canned descriptors.

    Values are lists of descriptors, or an exception instance to raise.
    Unknown bytes yield no faces.
    """

    def __init__(self, faces_by_image: Dict[bytes, Union[Sequence[np.ndarray], Exception]]):
        self.faces_by_image = faces_by_image
        self.calls: List[bytes] = []
        self.warmed_up = False
        self.closed = False
        self._lock = threading.Lock()

    def extract_faces(self, image_bytes: bytes) -> List[FaceRecord]:
        with self._lock:
            self.calls.append(image_bytes)

        value = self.faces_by_image.get(image_bytes, [])
        if isinstance(value, Exception):
            raise value
        return [FaceRecord(descriptor=d) for d in value]

    def warm_up(self) -> None:
        self.warmed_up = True

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def descriptor():
    """Factory for descriptors at a known distance (see descriptor_at)."""
    return descriptor_at


@pytest.fixture
def query_face():
    """Single query face at the origin."""
    return FaceRecord(descriptor=descriptor_at(0.0))


@pytest.fixture
def scenario_source():
    """Query with one face; three stored images at distances 0.3, 0.6, 0.45."""
    return FakeDescriptorSource(
        {
            b"query": [descriptor_at(0.0)],
            b"img1": [descriptor_at(0.3)],
            b"img2": [descriptor_at(0.6)],
            b"img3": [descriptor_at(0.45)],
            b"corrupt": DecodeError("Could not decode image (7 bytes)"),
        }
    )


@pytest.fixture
def make_source():
    """Factory for FakeDescriptorSource instances."""
    return FakeDescriptorSource
