"""
Grayscale to binary conversion with a per-frame adaptive threshold.
"""

from __future__ import annotations

from typing import Optional, Tuple

import cv2
import numpy as np

from models.frame import BinaryFrame


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Return a 2-D luma image; BGR/BGRA input is converted with OpenCV."""
    if image.ndim == 2:
        return image
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    raise ValueError(f"Unsupported image shape {image.shape}")


def adaptive_threshold(gray: np.ndarray) -> float:
    """Mean luma of the frame."""
    if gray.size == 0:
        return 0.0
    return float(gray.mean(dtype=np.float64))


def binarize(
    image: np.ndarray,
    th_mul: float = 0.95,
    invert: bool = False,
    frame_index: int = 0,
    source: Optional[str] = None,
) -> Tuple[BinaryFrame, float]:
    """
    Mark cells darker than `mean * th_mul` as on.

    Returns:
        (frame, threshold) where threshold is the scaled value actually used.
    """
    gray = to_grayscale(image)
    th = adaptive_threshold(gray) * th_mul
    on = gray < th
    if invert:
        on = ~on
    return BinaryFrame(cells=on, frame_index=frame_index, source=source), th
