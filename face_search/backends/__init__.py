"""Backend implementations of the descriptor source.

This package contains the available backends:
- dlib: HOG/CNN detector + ResNet-34 descriptors (128-D), Euclidean scale

Use the factory module to create a descriptor source.
"""

from face_search.backends.factory import (
    BackendType,
    create_descriptor_source,
)

__all__ = [
    "create_descriptor_source",
    "BackendType",
]
