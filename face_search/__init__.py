"""Face search: find stored images containing a face from a query photo.

Face descriptors (128-D, dlib via face_recognition) are extracted from an
uploaded image and compared by Euclidean distance against every image in
a corpus directory, producing a similarity-ranked list of matches.
"""

__version__ = "1.0.0"
