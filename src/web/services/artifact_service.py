from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from artifacts.errors import ArtifactError
from artifacts.frame_set_codec import load_frame_set
from models.frame_set import FrameSet


class ArtifactService:
    """
    Read-only view of the artifact directory.

    The frame set summary is cached per file mtime, so repeated manifest
    requests do not re-parse a large frame set.
    """

    def __init__(self, out_dir: str, mount: str = "/out", frame_set_file: str = "rectFrames.json"):
        self.out_dir = Path(out_dir)
        self.mount = "/" + mount.strip("/")
        self.frame_set_file = frame_set_file
        self._cache: Optional[Tuple[float, FrameSet]] = None

    def list_artifacts(self) -> List[dict]:
        if not self.out_dir.is_dir():
            return []
        items = []
        for entry in sorted(os.scandir(self.out_dir), key=lambda e: e.name):
            if not entry.is_file():
                continue
            st = entry.stat()
            items.append({
                "name": entry.name,
                "url": f"{self.mount}/{entry.name}",
                "size_bytes": st.st_size,
                "modified": st.st_mtime,
            })
        return items

    def get_frame_set(self) -> Optional[FrameSet]:
        """
        Load (or reuse) the frame set.

        Raises:
            ArtifactError: If the file exists but is invalid.
        """
        path = self.out_dir / self.frame_set_file
        if not path.exists():
            return None
        mtime = path.stat().st_mtime
        if self._cache is None or self._cache[0] != mtime:
            self._cache = (mtime, load_frame_set(path))
        return self._cache[1]

    def get_manifest(self) -> dict:
        manifest = {
            "mount": self.mount,
            "artifacts": self.list_artifacts(),
            "frame_set": None,
            "frame_set_error": None,
        }
        try:
            fs = self.get_frame_set()
        except ArtifactError as e:
            logging.error(f"Frame set invalid: {e}")
            manifest["frame_set_error"] = str(e)
            return manifest
        if fs is not None:
            manifest["frame_set"] = {
                "width": fs.width,
                "height": fs.height,
                "fps": fs.fps,
                "frames_count": fs.frame_count,
                "rect_count": fs.rect_count,
            }
        return manifest
