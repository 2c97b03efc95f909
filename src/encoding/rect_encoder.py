"""
Rectangle encoder for binary frames.

Strategy (greedy two-pass row merge):
1) Horizontal pass: collapse each row into maximal runs of equal value.
2) Vertical pass: a run extends the rectangle opened above it only when
   (x_start, x_end, v) match exactly; otherwise a new rectangle is opened.

Every cell lands in exactly one run and every run in exactly one rectangle,
so the result always repaints the source frame exactly and on-rectangles
never overlap. The cover is not minimal; a checkerboard yields one
rectangle per on-cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from models.frame import BinaryFrame
from models.frame_set import paint_rectangles
from models.rect import ON, Rectangle


class FrameDimensionError(ValueError):
    """A frame does not match the declared grid size of its frame set."""

    def __init__(
        self,
        frame_index: int,
        got: Tuple[int, int],
        expected: Tuple[int, int],
        source: Optional[str] = None,
    ):
        self.frame_index = frame_index
        self.got = got
        self.expected = expected
        self.source = source
        where = f" ({source})" if source else ""
        super().__init__(
            f"Frame size mismatch in frame {frame_index}{where}: "
            f"got {got[0]}x{got[1]}, expected {expected[0]}x{expected[1]}"
        )


@dataclass(frozen=True)
class RowSegment:
    """A maximal run of equal cells in one row; x_end is exclusive."""
    y: int
    x_start: int
    x_end: int
    v: int


def find_runs(row: np.ndarray, y: int = 0) -> List[RowSegment]:
    """Split one row into maximal runs of equal value, left to right."""
    row = np.asarray(row, dtype=bool)
    if row.size == 0:
        return []
    changes = np.flatnonzero(row[1:] != row[:-1]) + 1
    starts = np.concatenate(([0], changes))
    ends = np.concatenate((changes, [row.size]))
    return [
        RowSegment(y=y, x_start=int(s), x_end=int(e), v=int(row[s]))
        for s, e in zip(starts, ends)
    ]


def encode_frame(frame: BinaryFrame) -> List[Rectangle]:
    """
    Encode a frame into on-rectangles ordered by (top row, left column).

    An all-off frame encodes to an empty list and an all-on frame to a
    single full-frame rectangle.
    """
    # [x, y, w, h, v] in opening order; mutated while rows extend them.
    opened: List[List[int]] = []
    # (x_start, x_end, v) -> index into `opened` for rectangles touching the previous row.
    active: Dict[Tuple[int, int, int], int] = {}

    for y in range(frame.height):
        next_active: Dict[Tuple[int, int, int], int] = {}
        for seg in find_runs(frame.cells[y], y):
            key = (seg.x_start, seg.x_end, seg.v)
            rect_idx = active.get(key)
            if rect_idx is not None:
                opened[rect_idx][3] += 1
            else:
                rect_idx = len(opened)
                opened.append([seg.x_start, y, seg.x_end - seg.x_start, 1, seg.v])
            next_active[key] = rect_idx
        # Anything left out of next_active is closed for good.
        active = next_active

    return [Rectangle(x, y, w, h, v) for x, y, w, h, v in opened if v == ON]


def encode_frames(
    frames: Iterable[BinaryFrame],
    width: int,
    height: int,
) -> List[List[Rectangle]]:
    """
    Encode a sequence of frames that must all be `width` x `height`.

    Raises:
        FrameDimensionError: For the first frame whose size does not match.
    """
    encoded: List[List[Rectangle]] = []
    for i, frame in enumerate(frames):
        check_dimensions(frame, width, height, frame_index=i)
        encoded.append(encode_frame(frame))
    return encoded


def check_dimensions(
    frame: BinaryFrame,
    width: int,
    height: int,
    frame_index: Optional[int] = None,
) -> None:
    """Fail fast if a frame is not exactly `width` x `height`."""
    if frame.size != (width, height):
        raise FrameDimensionError(
            frame_index=frame.frame_index if frame_index is None else frame_index,
            got=frame.size,
            expected=(width, height),
            source=frame.source,
        )
