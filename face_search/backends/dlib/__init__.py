"""dlib backend for face search.

Components:
- DlibDescriptorSource: HOG/CNN detection + 128-D ResNet descriptors
  and 68-point landmarks via face_recognition
"""

from face_search.backends.dlib.descriptor_source import DlibDescriptorSource

__all__ = [
    "DlibDescriptorSource",
]
