"""
Frame encoding: binarization and greedy rectangle decomposition.
"""

from .rect_encoder import (
    FrameDimensionError,
    RowSegment,
    check_dimensions,
    encode_frame,
    encode_frames,
    find_runs,
    paint_rectangles,
)
from .threshold import adaptive_threshold, binarize, to_grayscale

__all__ = [
    "FrameDimensionError",
    "RowSegment",
    "check_dimensions",
    "encode_frame",
    "encode_frames",
    "find_runs",
    "paint_rectangles",
    "adaptive_threshold",
    "binarize",
    "to_grayscale",
]
