"""
Offline pipeline for the rectframes system.

- Frame acquisition from observation sources
- Binarization and rectangle encoding
- Artifact builds with staleness checks
"""

from .engine import (
    ConversionPipeline,
    ConversionStats,
    create_pipeline_from_config,
)
from .build import build_artifacts, ensure_cue_track, ensure_frame_set

__all__ = [
    "ConversionPipeline",
    "ConversionStats",
    "create_pipeline_from_config",
    "build_artifacts",
    "ensure_cue_track",
    "ensure_frame_set",
]
