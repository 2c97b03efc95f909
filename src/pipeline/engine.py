"""
Conversion pipeline: frame source -> binarize -> rectangle encode -> FrameSet.

Runs offline, once per source video. Frames are processed in order; a frame
whose size does not match the configured grid stops the run with a
frame-indexed error, since a frame set with a hole in it would shift every
later frame during playback.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from encoding.rect_encoder import FrameDimensionError, encode_frame
from encoding.threshold import binarize
from models.config import Config, ConverterConfig
from models.frame import FrameImage
from models.frame_set import FrameSet
from models.rect import Rectangle
from observation import ImageSequenceConfig, ImageSequenceSource, ObservationSource


@dataclass
class ConversionStats:
    """Runtime statistics for one conversion run."""
    frame_count: int = 0
    rect_count: int = 0
    threshold_sum: float = 0.0
    start_time: float = field(default_factory=time.time)

    @property
    def average_threshold(self) -> Optional[int]:
        """Mean binarization threshold, rounded and clamped to 0..255."""
        if self.frame_count == 0:
            return None
        return int(min(255, max(0, round(self.threshold_sum / self.frame_count))))


class ConversionPipeline:
    """
    Turns every frame of an ObservationSource into a rectangle list.
    
    Example:
        source = ImageSequenceSource(ImageSequenceConfig(directory="frames"))
        pipeline = ConversionPipeline(source, ConverterConfig(width=256, height=192))
        frame_set = pipeline.run()
    """

    def __init__(self, source: ObservationSource, config: ConverterConfig):
        self.source = source
        self.config = config
        self.stats = ConversionStats()
        self._callbacks: List[Callable[[int, List[Rectangle]], None]] = []

    def add_callback(self, callback: Callable[[int, List[Rectangle]], None]) -> None:
        """
        Add a callback to be called after each frame is encoded.
        
        Args:
            callback: Function taking (frame_index, rectangles) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> FrameSet:
        """
        Convert the whole source.

        Raises:
            RuntimeError: If the source cannot be opened or yields no frames.
            FrameDimensionError: If a frame does not match the configured size.
        """
        self.stats = ConversionStats()
        frames: List[List[Rectangle]] = []
        cfg = self.config

        try:
            self.source.open()
            total = self.source.frame_total
            logging.info(
                f"Conversion started: source={self.source.source_id}, frames={total}, "
                f"grid={cfg.width}x{cfg.height} @ {cfg.fps}fps, invert={cfg.invert}, th_mul={cfg.th_mul}"
            )

            for image in self.source:
                rects = self._process_frame(image)
                frames.append(rects)

                for callback in self._callbacks:
                    try:
                        callback(image.frame_index, rects)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if cfg.progress_interval and image.frame_index % cfg.progress_interval == 0:
                    logging.info(f"  {image.frame_index}/{total if total is not None else '?'}")
        finally:
            self._cleanup()

        if not frames:
            raise RuntimeError(f"No frames read from source {self.source.source_id}")

        elapsed = time.time() - self.stats.start_time
        logging.info(
            f"Conversion finished: frames={self.stats.frame_count}, rects={self.stats.rect_count}, "
            f"avg threshold={self.stats.average_threshold}, elapsed={elapsed:.1f}s"
        )
        return FrameSet(
            width=cfg.width,
            height=cfg.height,
            fps=cfg.fps,
            frames=frames,
            threshold=self.stats.average_threshold,
            th_mul=cfg.th_mul,
            invert=cfg.invert,
        )

    def _process_frame(self, image: FrameImage) -> List[Rectangle]:
        """Binarize and encode one frame."""
        expected = (self.config.width, self.config.height)
        if image.size != expected:
            raise FrameDimensionError(
                frame_index=image.frame_index,
                got=image.size,
                expected=expected,
                source=image.source,
            )

        frame, th = binarize(
            image.image,
            th_mul=self.config.th_mul,
            invert=self.config.invert,
            frame_index=image.frame_index,
            source=image.source,
        )
        rects = encode_frame(frame)

        self.stats.frame_count += 1
        self.stats.rect_count += len(rects)
        self.stats.threshold_sum += th
        return rects

    def _cleanup(self) -> None:
        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")


def create_pipeline_from_config(config: Config) -> ConversionPipeline:
    """
    Factory function to create a ConversionPipeline from the typed config.
    
    Frames are read from `converter.frames_dir` as a PNG sequence.
    """
    converter = config.converter
    source = ImageSequenceSource(
        ImageSequenceConfig(source_id="frames", directory=converter.frames_dir)
    )
    return ConversionPipeline(source, converter)
