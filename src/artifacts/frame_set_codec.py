"""
Frame set file codec.

File layout (compact JSON):

    {"width": 256, "height": 192, "fps": 30, "threshold": 101, "th_mul": 0.95,
     "invert": false, "frames_count": 2,
     "rect_frames": [[{"x": 0, "y": 0, "w": 4, "h": 2, "v": 1}], []]}

Readers also accept "rectFrames" for the frame list, rectangles written as
[x, y, w, h] or [x, y, w, h, v] tuples, and a missing or null "fps".
Everything is normalized into FrameSet/Rectangle here, so downstream code
never sees the raw shapes.
"""

from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from models.frame_set import FrameSet
from models.rect import Rectangle
from .errors import ArtifactError

DEFAULT_FILE_NAME = "rectFrames.json"


def frame_set_to_dict(frame_set: FrameSet) -> Dict[str, Any]:
    return {
        "width": frame_set.width,
        "height": frame_set.height,
        "fps": frame_set.fps,
        "threshold": frame_set.threshold,
        "th_mul": frame_set.th_mul,
        "invert": frame_set.invert,
        "frames_count": frame_set.frame_count,
        "rect_frames": [[r.to_dict() for r in rects] for rects in frame_set.frames],
    }


def dump_frame_set(frame_set: FrameSet, path: Union[str, Path]) -> None:
    """Write a frame set as compact JSON, creating parent directories."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        os.makedirs(path.parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(frame_set_to_dict(frame_set), f, separators=(",", ":"))
    logging.info(
        f"Frame set written: {path} (frames={frame_set.frame_count}, rects={frame_set.rect_count})"
    )


def _positive_int(data: Dict[str, Any], key: str, artifact: str) -> int:
    value = data.get(key)
    if value is None:
        raise ArtifactError(artifact, key, "missing required field")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ArtifactError(artifact, key, f"must be a positive integer, got {value!r}")
    return value


def _optional_number(data: Dict[str, Any], key: str, artifact: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ArtifactError(artifact, key, f"must be a number or null, got {value!r}")
    return value


def frame_set_from_dict(data: Any, artifact: str = DEFAULT_FILE_NAME) -> FrameSet:
    """
    Validate and normalize a decoded frame set document.

    Raises:
        ArtifactError: On the first missing or invalid field. Nothing is
            returned for partially valid input.
    """
    if not isinstance(data, dict):
        raise ArtifactError(artifact, "<root>", f"expected an object, got {type(data).__name__}")

    width = _positive_int(data, "width", artifact)
    height = _positive_int(data, "height", artifact)
    fps = _optional_number(data, "fps", artifact)
    threshold = _optional_number(data, "threshold", artifact)
    th_mul = _optional_number(data, "th_mul", artifact)

    key = "rect_frames" if "rect_frames" in data else "rectFrames"
    raw_frames = data.get(key)
    if raw_frames is None:
        raise ArtifactError(artifact, "rect_frames", "missing required field")
    if not isinstance(raw_frames, list):
        raise ArtifactError(artifact, key, f"must be a list, got {type(raw_frames).__name__}")
    if not raw_frames:
        raise ArtifactError(artifact, key, "contains no frames")

    frames: List[List[Rectangle]] = []
    for i, raw_rects in enumerate(raw_frames):
        if not isinstance(raw_rects, list):
            raise ArtifactError(artifact, f"{key}[{i}]", "frame must be a list of rectangles")
        rects: List[Rectangle] = []
        for j, raw in enumerate(raw_rects):
            try:
                rect = Rectangle.from_any(raw)
            except ValueError as e:
                raise ArtifactError(artifact, f"{key}[{i}][{j}]", str(e)) from e
            if not rect.fits_within(width, height):
                raise ArtifactError(
                    artifact, f"{key}[{i}][{j}]",
                    f"rectangle {rect.as_tuple()} lies outside {width}x{height}",
                )
            rects.append(rect)
        frames.append(rects)

    declared = data.get("frames_count")
    if declared is not None and declared != len(frames):
        raise ArtifactError(
            artifact, "frames_count", f"declares {declared} frames but {len(frames)} are present"
        )

    return FrameSet(
        width=width,
        height=height,
        fps=fps,
        frames=frames,
        threshold=int(round(threshold)) if threshold is not None else None,
        th_mul=th_mul,
        invert=bool(data.get("invert", False)),
    )


def load_frame_set(path: Union[str, Path]) -> FrameSet:
    """
    Load and validate a frame set file.

    Raises:
        ArtifactError: If the file is unreadable, not JSON, or invalid.
    """
    path = Path(path)
    artifact = str(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ArtifactError(artifact, "<file>", f"cannot read: {e}") from e
    except json.JSONDecodeError as e:
        raise ArtifactError(artifact, "<json>", f"not valid JSON: {e}") from e

    frame_set = frame_set_from_dict(data, artifact=artifact)
    logging.info(
        f"Frame set loaded: {path} ({frame_set.width}x{frame_set.height}, "
        f"frames={frame_set.frame_count}, fps_meta={frame_set.fps})"
    )
    return frame_set
