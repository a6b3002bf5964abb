"""API routes."""

from fastapi import APIRouter, Depends

from memantra.api import auth, health
from memantra.core.ratelimit import api_limiter

router = APIRouter(dependencies=[Depends(api_limiter)])
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
