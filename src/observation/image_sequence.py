"""
Image-sequence observation source.

Reads a directory of frame images (e.g. `ffmpeg -i video.mp4 frames/%05d.png`)
in file-name order, decoding each as grayscale with OpenCV.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import cv2

from models.frame import FrameImage
from .base import ObservationConfig, ObservationSource


@dataclass
class ImageSequenceConfig(ObservationConfig):
    """
    Configuration for image-sequence sources.
    
    Attributes:
        directory: Directory holding the frames.
        extensions: File extensions to pick up (lower case, with dot).
    """
    directory: str = "frames"
    extensions: Tuple[str, ...] = (".png",)


class ImageSequenceSource(ObservationSource):
    """
    Frames from image files, sorted by name.
    
    Example:
        config = ImageSequenceConfig(directory="frames")
        with ImageSequenceSource(config) as source:
            for frame in source:
                process(frame.image)
    """

    def __init__(self, config: ImageSequenceConfig):
        super().__init__(config)
        self._seq_config = config
        self._files: List[Path] = []
        self._pos = 0

    @property
    def directory(self) -> Path:
        return Path(self._seq_config.directory)

    @property
    def frame_total(self) -> Optional[int]:
        return len(self._files) if self._is_open else None

    def open(self) -> None:
        directory = self.directory
        if not directory.is_dir():
            raise RuntimeError(f"Input directory not found: {directory}")

        exts = tuple(e.lower() for e in self._seq_config.extensions)
        self._files = sorted(
            p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in exts
        )
        if not self._files:
            raise RuntimeError(f"No {'/'.join(exts)} frames found in {directory}")

        self._pos = 0
        self._frame_index = 0
        self._is_open = True
        logging.info(f"Image sequence opened: {directory} ({len(self._files)} frames)")

    def read(self) -> Optional[FrameImage]:
        if not self._is_open or self._pos >= len(self._files):
            return None

        path = self._files[self._pos]
        image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        if image is None:
            raise RuntimeError(f"Failed to open {path}")

        frame = FrameImage(image=image, frame_index=self._pos, source=path.name)
        self._pos += 1
        self._frame_index = self._pos
        return frame

    def close(self) -> None:
        self._is_open = False
