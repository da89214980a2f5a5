"""API routes."""

from fastapi import APIRouter

from spendlog.api.v1 import mono

router = APIRouter()

# Include routers
router.include_router(mono.router)
