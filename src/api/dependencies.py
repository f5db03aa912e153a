from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Header

from src.repositories.dashboard_repository import DashboardRepository
from src.services.announcements_service import AnnouncementsService
from src.services.dashboard_service import DashboardService

CALLER_EMAIL_HEADER = "X-User-Email"


@lru_cache
def get_dashboard_repository() -> DashboardRepository:
    return DashboardRepository()


def get_dashboard_service() -> DashboardService:
    return DashboardService(repository=get_dashboard_repository())


def get_announcements_service() -> AnnouncementsService:
    return AnnouncementsService(repository=get_dashboard_repository())


def get_caller_email(
    x_user_email: Optional[str] = Header(default=None, alias=CALLER_EMAIL_HEADER),
) -> Optional[str]:
    # The identity proxy in front of the service sets this header after verifying the session.
    if x_user_email is None:
        return None
    return x_user_email.strip().lower() or None
