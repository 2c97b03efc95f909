"""
Observation layer: where the converter gets its decoded frames.
"""

from .base import ObservationSource, ObservationConfig
from .image_sequence import ImageSequenceSource, ImageSequenceConfig

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "ImageSequenceSource",
    "ImageSequenceConfig",
]
