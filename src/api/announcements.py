from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from src.api.dependencies import get_announcements_service, get_caller_email
from src.core.config import get_settings
from src.schemas.dashboard import AnnouncementCreateRequest, AnnouncementCreateResult
from src.services.announcements_service import AnnouncementsService
from src.shared.response import Meta, ResponseEnvelope

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.post("")
def post_announcement(
    payload: AnnouncementCreateRequest,
    caller_email: Optional[str] = Depends(get_caller_email),
    service: AnnouncementsService = Depends(get_announcements_service),
) -> ResponseEnvelope[AnnouncementCreateResult]:
    data = service.post_announcement(caller_email, payload)
    meta = Meta(
        as_of_date=date.today().isoformat(),
        source=get_settings().announcements_range,
        time_window="now",
        calculation_version="v1",
    )
    return ResponseEnvelope(data=data, meta=meta)
