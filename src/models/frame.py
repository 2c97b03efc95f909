"""
Frame models: decoded source images and two-tone binary frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class BinaryFrame:
    """
    A width x height grid of on/off cells for one instant in time.
    
    Attributes:
        cells: Boolean array of shape (height, width); True means "on".
        frame_index: Position of the frame in its source sequence.
        source: Identifier for the frame source (e.g. the PNG file name).
    """
    cells: np.ndarray
    frame_index: int = 0
    source: Optional[str] = None

    def __post_init__(self):
        cells = np.array(self.cells, dtype=bool, copy=True)
        if cells.ndim != 2:
            raise ValueError(f"BinaryFrame needs a 2-D grid, got shape {cells.shape}")
        cells.setflags(write=False)
        object.__setattr__(self, "cells", cells)

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "BinaryFrame":
        """Create a BinaryFrame from any 2-D array; nonzero entries are "on"."""
        return cls(cells=np.asarray(frame) != 0, frame_index=frame_index, source=source)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Union[str, Sequence[int]]],
        frame_index: int = 0,
        on: str = "#",
    ) -> "BinaryFrame":
        """
        Create a BinaryFrame from text rows ("#.#") or nested int lists.

        Handy for tests and small fixtures.
        """
        grid = [
            [ch == on for ch in row] if isinstance(row, str) else [bool(v) for v in row]
            for row in rows
        ]
        widths = {len(r) for r in grid}
        if len(widths) > 1:
            raise ValueError(f"Ragged rows: widths {sorted(widths)}")
        return cls(cells=np.array(grid, dtype=bool).reshape(len(grid), widths.pop() if widths else 0),
                   frame_index=frame_index)

    @classmethod
    def blank(cls, width: int, height: int, frame_index: int = 0) -> "BinaryFrame":
        """All-off frame."""
        return cls(cells=np.zeros((height, width), dtype=bool), frame_index=frame_index)

    @property
    def width(self) -> int:
        return int(self.cells.shape[1])

    @property
    def height(self) -> int:
        return int(self.cells.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)

    @property
    def on_count(self) -> int:
        return int(self.cells.sum())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinaryFrame):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self.cells, other.cells))

    def __hash__(self) -> int:
        return hash((self.size, self.cells.tobytes()))


@dataclass
class FrameImage:
    """
    A decoded source frame before binarization.
    
    Attributes:
        image: Pixel data as a numpy array (grayscale or BGR).
        frame_index: Sequential frame number since the source was opened.
        source: Identifier for the frame (e.g. file name).
    """
    image: np.ndarray
    frame_index: int = 0
    source: Optional[str] = None

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
