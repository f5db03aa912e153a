from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from src.analytics.filters import find_agent, normalize_email
from src.core.config import get_settings
from src.core.errors import FieldValidationError, ForbiddenError, UnauthenticatedError
from src.models.dashboard import AnnouncementRecord
from src.repositories.dashboard_repository import DashboardRepository
from src.schemas.dashboard import AnnouncementCreateRequest, AnnouncementCreateResult
from src.shared.time import local_now

logger = logging.getLogger(__name__)

ANNOUNCEMENT_ROLE = "HR"


class AnnouncementsService:
    def __init__(self, repository: DashboardRepository) -> None:
        self.repository = repository

    def post_announcement(
        self,
        user_email: Optional[str],
        request: AnnouncementCreateRequest,
        now: Optional[datetime] = None,
    ) -> AnnouncementCreateResult:
        email = normalize_email(user_email)
        if not email:
            raise UnauthenticatedError()

        author = find_agent(self.repository.list_agents(), email)
        if author is None or author.role != ANNOUNCEMENT_ROLE:
            raise ForbiddenError("You do not have permission to post announcements.")

        title = (request.title or "").strip()
        body = (request.message or "").strip()
        if not title or not body:
            raise FieldValidationError("Title and message are required.")

        record = AnnouncementRecord(
            timestamp=now or local_now(get_settings().dashboard_timezone),
            author_email=email,
            title=title,
            body=body,
            audience=request.audience.strip() or "All",
        )
        self.repository.append_announcement(record)
        logger.info("Announcement posted by %s", email)
        return AnnouncementCreateResult(
            success=True,
            message="Announcement posted successfully.",
            timestamp=record.timestamp,
            author_email=record.author_email,
            title=record.title,
            audience=record.audience,
        )
