from __future__ import annotations

from fastapi import APIRouter, Request

from ..api_models import HealthResponse, ManifestResponse
from ..services.artifact_service import ArtifactService

router = APIRouter()


def _service(request: Request) -> ArtifactService:
    return request.app.state.artifacts


@router.get("/health", response_model=HealthResponse)
def health(request: Request):
    service = _service(request)
    artifacts = service.list_artifacts()
    return {
        "status": "ok" if artifacts else "degraded",
        "out_dir": str(service.out_dir),
        "artifact_count": len(artifacts),
    }


@router.get("/manifest", response_model=ManifestResponse)
def manifest(request: Request):
    return _service(request).get_manifest()
