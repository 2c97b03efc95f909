"""
FrameSet model: the per-video rectangle sequence plus grid metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np

from .rect import ON, Rectangle


def paint_rectangles(rects: Iterable[Rectangle], width: int, height: int) -> np.ndarray:
    """Paint rectangles onto an all-off (height, width) grid, in order."""
    grid = np.zeros((height, width), dtype=bool)
    for r in rects:
        if not r.fits_within(width, height):
            raise ValueError(f"Rectangle {r.as_tuple()} lies outside {width}x{height}")
        grid[r.y:r.y_end, r.x:r.x_end] = r.v == ON
    return grid


@dataclass
class FrameSet:
    """
    Encoded video ready for playback.
    
    Attributes:
        width: Cell grid width.
        height: Cell grid height.
        fps: Frame rate recorded at encode time. Advisory only; playback
            derives its rate from the audio duration.
        frames: One rectangle list per frame, in playback order.
        threshold: Average binarization threshold used while encoding.
        th_mul: Threshold multiplier used while encoding.
        invert: Whether on/off was inverted while encoding.
    """
    width: int
    height: int
    fps: Optional[float] = None
    frames: List[List[Rectangle]] = field(default_factory=list)
    threshold: Optional[int] = None
    th_mul: Optional[float] = None
    invert: bool = False

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def rect_count(self) -> int:
        """Total number of rectangles across all frames."""
        return sum(len(rects) for rects in self.frames)

    def paint(self, index: int) -> np.ndarray:
        """Reconstruct frame `index` as a boolean (height, width) grid."""
        return paint_rectangles(self.frames[index], self.width, self.height)
