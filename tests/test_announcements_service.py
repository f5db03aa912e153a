from __future__ import annotations

from datetime import datetime

import pytest

from src.core.errors import FieldValidationError, ForbiddenError, UnauthenticatedError
from src.schemas.dashboard import AnnouncementCreateRequest
from src.services.announcements_service import AnnouncementsService

NOW = datetime(2026, 10, 14, 12, 0, 0)

AGENT_ROWS = [
    ["Amy", "amy@x.com", "Agent", "East", "1000", "50"],
    ["Hana", "Hana@X.com", "HR", "People", "", ""],
]


def test_hr_can_post_announcement(make_repository):
    repository = make_repository(agents=AGENT_ROWS)
    service = AnnouncementsService(repository)
    result = service.post_announcement(
        "HANA@x.com",
        AnnouncementCreateRequest(title="  Kickoff ", message="Q4 starts Monday"),
        now=NOW,
    )
    assert result.success is True
    assert result.author_email == "hana@x.com"
    (record,) = repository.appended
    assert record.to_row() == ["2026-10-14 12:00:00", "hana@x.com", "Kickoff", "Q4 starts Monday", "All"]


def test_custom_audience_is_kept(make_repository):
    repository = make_repository(agents=AGENT_ROWS)
    AnnouncementsService(repository).post_announcement(
        "hana@x.com",
        AnnouncementCreateRequest(title="Offsite", message="Friday", audience="East"),
        now=NOW,
    )
    assert repository.appended[0].audience == "East"


@pytest.mark.parametrize("email", ["amy@x.com", "ghost@x.com"])
def test_non_hr_callers_are_forbidden(make_repository, email):
    repository = make_repository(agents=AGENT_ROWS)
    with pytest.raises(ForbiddenError):
        AnnouncementsService(repository).post_announcement(
            email, AnnouncementCreateRequest(title="Hi", message="There"), now=NOW
        )
    assert repository.appended == []


@pytest.mark.parametrize(
    "title, message",
    [("", "Body"), ("Title", ""), ("   ", "Body"), (None, "Body"), ("Title", None)],
)
def test_title_and_message_are_required(make_repository, title, message):
    repository = make_repository(agents=AGENT_ROWS)
    with pytest.raises(FieldValidationError):
        AnnouncementsService(repository).post_announcement(
            "hana@x.com", AnnouncementCreateRequest(title=title, message=message), now=NOW
        )
    assert repository.appended == []


def test_missing_identity_is_unauthenticated(make_repository):
    with pytest.raises(UnauthenticatedError):
        AnnouncementsService(make_repository(agents=AGENT_ROWS)).post_announcement(
            None, AnnouncementCreateRequest(title="Hi", message="There"), now=NOW
        )
