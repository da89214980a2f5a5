from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from spendlog.api.deps import get_staging_store
from spendlog.storage.staging import StagingStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Basic health check."""
    return {"status": "ok"}


@router.get("/health/ready")
async def health_ready(staging: StagingStore = Depends(get_staging_store)):
    """Readiness check with staging store connection."""
    try:
        await staging.ping()
        return {"status": "ready", "staging": "connected"}
    except RedisError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "staging": "disconnected", "error": str(e)},
        )
