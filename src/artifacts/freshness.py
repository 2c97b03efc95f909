"""
Artifact regeneration check.

An artifact is stale when it is missing or older than any of its sources.
For a directory source the newest entry inside it counts.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Union

PathLike = Union[str, Path]


def _newest_mtime(path: Path) -> float:
    mtime = path.stat().st_mtime
    if path.is_dir():
        for entry in os.scandir(path):
            mtime = max(mtime, entry.stat().st_mtime)
    return mtime


def needs_regen(source_paths: Iterable[PathLike], artifact_path: PathLike) -> bool:
    """
    Return True if the artifact is missing or older than any source.

    Raises:
        FileNotFoundError: If a source does not exist.
    """
    artifact = Path(artifact_path)
    sources = [Path(p) for p in source_paths]
    for src in sources:
        if not src.exists():
            raise FileNotFoundError(f"Missing source: {src}")
    if not artifact.exists():
        return True
    artifact_mtime = artifact.stat().st_mtime
    return any(_newest_mtime(src) > artifact_mtime for src in sources)


def ensure_fresh(
    source_paths: Iterable[PathLike],
    artifact_path: PathLike,
    build: Callable[[], None],
) -> bool:
    """
    Run `build` only if the artifact is stale.

    Idempotent: a second call right after a successful build is a no-op.

    Returns:
        True if the artifact was (re)built.
    """
    sources = list(source_paths)
    if not needs_regen(sources, artifact_path):
        logging.info(f"OK {artifact_path}")
        return False
    logging.info(f"Generating {artifact_path}")
    build()
    return True
