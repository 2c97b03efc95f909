"""
Frame source contract for the converter.

The converter only needs decoded frames in playback order; where they come
from (a PNG sequence dumped by ffmpeg, a video decoder, a test fixture) is
hidden behind ObservationSource.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from models.frame import FrameImage


@dataclass
class ObservationConfig:
    """
    Settings shared by every frame source.

    Attributes:
        source_id: Name used in log lines (e.g. "frames").
        metadata: Free-form extras a concrete source may read.
    """
    source_id: str = "default"
    metadata: Dict[str, Any] = field(default_factory=dict)


class ObservationSource(ABC):
    """
    Ordered, finite stream of FrameImage objects.

    open() must succeed before read() or iteration; read() returns None once
    the last frame has been delivered. Frame indices count from 0 in
    delivery order, so index i always lands in slot i of the frame set.

        with ImageSequenceSource(config) as source:
            for image in source:
                encode(image)
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Frames delivered since open()."""
        return self._frame_index

    @property
    def frame_total(self) -> Optional[int]:
        """Number of frames when known up front, else None."""
        return None

    @abstractmethod
    def open(self) -> None:
        """
        Locate the frames and get ready to deliver them.

        Raises:
            RuntimeError: If there is nothing to read.
        """

    @abstractmethod
    def read(self) -> Optional[FrameImage]:
        """Next frame, or None when exhausted."""

    @abstractmethod
    def close(self) -> None:
        """Release resources; calling it twice is harmless."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameImage]:
        if not self._is_open:
            raise RuntimeError(f"Frame source {self.source_id} is not open")
        frame = self.read()
        while frame is not None:
            yield frame
            frame = self.read()
