"""
FastAPI application factory for the artifact server.

Routes:
- /out/* -> artifact files (read-only static mount; path configurable)
- /api/health -> liveness plus artifact count
- /api/manifest -> artifact listing and frame set summary
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .routes import api
from .services.artifact_service import ArtifactService


def create_app(
    out_dir: str = "out",
    mount: str = "/out",
    frame_set_file: str = "rectFrames.json",
) -> FastAPI:
    """Create the FastAPI app and wire routes/static artifacts."""
    app = FastAPI(
        title="Rectframes",
        version="0.1.0",
        description="Serves rectangle frame sets and caption cues for browser playback",
    )

    # The player runs as a userscript on a foreign origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
    )

    service = ArtifactService(out_dir, mount=mount, frame_set_file=frame_set_file)
    app.state.artifacts = service

    app.include_router(api.router, prefix="/api")

    os.makedirs(out_dir, exist_ok=True)
    app.mount(service.mount, StaticFiles(directory=out_dir), name="artifacts")

    return app
