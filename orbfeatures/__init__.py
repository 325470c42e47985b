"""ORB keypoint extraction, rotated BRIEF descriptors and rotation-consistency checks."""

__version__ = "0.1.0"

__all__ = [
    "keypoint",
    "pattern",
    "imaging",
    "octree",
    "descriptor",
    "extractor",
    "histogram",
]