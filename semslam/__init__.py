"""Building blocks for semantic stereo SLAM: matrices, quad matching, loop candidates and mapping."""

__version__ = "0.1.0"

__all__ = ["camera", "mapping", "matching", "matrix", "quadmatch"]