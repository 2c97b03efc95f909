from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ArtifactInfo(BaseModel):
    name: str
    url: str
    size_bytes: int
    modified: float = Field(..., description="Unix mtime")


class FrameSetSummary(BaseModel):
    width: int
    height: int
    fps: Optional[float]
    frames_count: int
    rect_count: int


class ManifestResponse(BaseModel):
    mount: str
    artifacts: List[ArtifactInfo]
    frame_set: Optional[FrameSetSummary] = None
    frame_set_error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(..., description="ok|degraded")
    out_dir: str
    artifact_count: int
