"""
Offline artifact build: frame set plus one cue file per caption track.

Each artifact is rebuilt only when missing or older than its sources.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from artifacts.cue_codec import dump_cue_track
from artifacts.frame_set_codec import dump_frame_set
from artifacts.freshness import ensure_fresh
from captions.compiler import compile_srt_file
from models.config import Config, TrackConfig
from .engine import create_pipeline_from_config


def ensure_frame_set(config: Config) -> bool:
    """
    Ensure the frame set artifact exists and is newer than the frames directory.

    A shipped artifact without its frames directory is used as-is.
    """
    out_path = Path(config.server.out_dir) / config.converter.output_file
    frames_dir = Path(config.converter.frames_dir)
    sources = [frames_dir] if frames_dir.exists() else []

    def build() -> None:
        frame_set = create_pipeline_from_config(config).run()
        dump_frame_set(frame_set, out_path)

    return ensure_fresh(sources, out_path, build)


def ensure_cue_track(config: Config, track: TrackConfig) -> bool:
    """
    Ensure one caption track's cue file is up to date.

    Raises:
        FileNotFoundError: If the track's SRT source is missing.
    """
    srt_path = Path(config.captions.lyrics_dir) / track.source
    json_path = Path(config.server.out_dir) / track.output

    def build() -> None:
        dump_cue_track(compile_srt_file(srt_path, name=track.name), json_path)

    return ensure_fresh([srt_path], json_path, build)


def build_artifacts(config: Config) -> Dict[str, bool]:
    """
    Build every stale artifact.

    Returns:
        Mapping of artifact name to whether it was rebuilt.
    """
    os.makedirs(config.server.out_dir, exist_ok=True)

    results: Dict[str, bool] = {
        config.converter.output_file: ensure_frame_set(config),
    }
    for track in config.captions.tracks:
        results[track.output] = ensure_cue_track(config, track)

    rebuilt = [name for name, done in results.items() if done]
    logging.info(f"Artifacts ready in {config.server.out_dir} (rebuilt: {rebuilt or 'none'})")
    return results
