from datetime import datetime, timezone

from fastapi import APIRouter

from verihow.core.observability import snapshot_observability
from verihow.services.response_mapper import build_samples_view

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/observability")
async def observability() -> dict:
    return snapshot_observability()


@router.get("/samples")
async def samples() -> dict:
    return build_samples_view()
