"""
Cue file codec.

One file per caption track, an ordered list of compact records:

    [{"s": 12.345, "e": 14.2, "t": "line1\\nline2"}, ...]

Readers skip records without a usable s/e or a non-empty t instead of
failing the whole track.
"""

from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path
from typing import Any, List, Optional, Union

from models.cue import Cue, CueTrack
from .errors import ArtifactError


def dump_cue_track(track: CueTrack, path: Union[str, Path]) -> None:
    """Write a cue track as compact JSON, creating parent directories."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        os.makedirs(path.parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([c.to_dict() for c in track], f, ensure_ascii=False, separators=(",", ":"))
    logging.info(f"Cue track '{track.name}' written: {path} ({len(track)} cues)")


def _as_seconds(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return float(value)


def _cue_from_record(record: Any) -> Optional[Cue]:
    if not isinstance(record, dict):
        return None
    start = _as_seconds(record.get("s"))
    end = _as_seconds(record.get("e"))
    text = record.get("t")
    if start is None or end is None or not isinstance(text, str) or not text.strip():
        return None
    if start >= end:
        return None
    return Cue(start=start, end=end, text=text)


def cue_track_from_list(data: Any, name: str = "", artifact: str = "") -> CueTrack:
    """
    Normalize a decoded cue document into a sorted CueTrack.

    Raises:
        ArtifactError: If the document itself is not a list.
    """
    artifact = artifact or name or "cues"
    if not isinstance(data, list):
        raise ArtifactError(artifact, "<root>", f"expected a list of cues, got {type(data).__name__}")

    cues: List[Cue] = []
    for i, record in enumerate(data):
        cue = _cue_from_record(record)
        if cue is None:
            logging.warning(f"{artifact}: skipping unusable cue record {i}: {record!r}")
            continue
        cues.append(cue)

    cues.sort(key=lambda c: c.start)
    return CueTrack(name=name, cues=cues)


def load_cue_track(path: Union[str, Path], name: Optional[str] = None) -> CueTrack:
    """
    Load a cue file; the track name defaults to the file stem.

    Raises:
        ArtifactError: If the file cannot be read as a JSON list.
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

    track = cue_track_from_list(data, name=name if name is not None else path.stem, artifact=artifact)
    if track.is_empty:
        logging.warning(f"Cue track '{track.name}' is empty: {path}")
    return track
