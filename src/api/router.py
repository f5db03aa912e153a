from __future__ import annotations

from fastapi import APIRouter

from src.api.announcements import router as announcements_router
from src.api.dashboard import router as dashboard_router
from src.api.health import router as health_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(dashboard_router)
api_router.include_router(announcements_router)
