from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_announcements_service, get_dashboard_service
from src.core.errors import ForbiddenError, NotFoundError, UnknownRoleError
from src.main import create_app
from src.models.dashboard import AgentRecord, AnnouncementRecord, DashboardSnapshot
from src.repositories.range_schemas import RANGE_SCHEMAS
from src.schemas.dashboard import (
    AgentChartData,
    AgentDashboard,
    AgentHeader,
    AgentKpis,
    AnnouncementCreateRequest,
    AnnouncementCreateResult,
    ChartSeries,
    HrDashboard,
    HrHeader,
    LeaderboardRow,
    PersonnelRow,
)

NOW = datetime(2026, 10, 14, 12, 0, 0)


class StubDashboardRepository:
    def __init__(self, raw_ranges: Dict[str, List[List[Any]]]) -> None:
        decoded = {key: RANGE_SCHEMAS[key].decode(rows) for key, rows in raw_ranges.items()}
        self.snapshot = DashboardSnapshot(**decoded)
        self.loaded_keys: List[Sequence[str]] = []
        self.appended: List[AnnouncementRecord] = []

    def list_agents(self) -> List[AgentRecord]:
        return list(self.snapshot.agents)

    def load_snapshot(self, keys: Sequence[str]) -> DashboardSnapshot:
        self.loaded_keys.append(tuple(keys))
        return DashboardSnapshot(**{key: getattr(self.snapshot, key) for key in keys})

    def append_announcement(self, announcement: AnnouncementRecord) -> None:
        self.appended.append(announcement)


@pytest.fixture()
def make_repository():
    def _make(**raw_ranges: List[List[Any]]) -> StubDashboardRepository:
        return StubDashboardRepository(raw_ranges)

    return _make


class FakeDashboardService:
    seen_now: List[Optional[datetime]] = []

    def get_dashboard(self, user_email: Optional[str], now: Optional[datetime] = None):
        self.seen_now.append(now)
        if user_email == "amy@x.com":
            return AgentDashboard(
                header=AgentHeader(name="Amy", points=50, rank=1, total_agents=1),
                kpis=AgentKpis(
                    my_revenue=1200.5,
                    my_commission=120.05,
                    deals_closed=1,
                    avg_deal_size=1200.5,
                    monthly_quota=1000.0,
                    quota_progress=120.1,
                ),
                tasks=[],
                history=[],
                chart_data=AgentChartData(
                    pipeline_funnel=ChartSeries(
                        labels=["Prospecting", "Qualification", "Demo", "Negotiation"],
                        data=[0.0, 0.0, 0.0, 0.0],
                    ),
                    revenue_by_product=ChartSeries(labels=["Widget"], data=[1200.5]),
                ),
                leaderboard=[LeaderboardRow(rank=1, name="Amy", team="East", points=50)],
            )
        if user_email == "hana@x.com":
            return HrDashboard(
                header=HrHeader(name="Hana", total_personnel=1),
                roster=[PersonnelRow(name="Hana", email="hana@x.com", role="HR", team="People")],
            )
        if user_email == "ivan@x.com":
            raise UnknownRoleError("Intern")
        raise NotFoundError("User not found in agent list.")


class FakeAnnouncementsService:
    def post_announcement(
        self, user_email: Optional[str], request: AnnouncementCreateRequest
    ) -> AnnouncementCreateResult:
        if user_email != "hana@x.com":
            raise ForbiddenError("You do not have permission to post announcements.")
        return AnnouncementCreateResult(
            success=True,
            message="Announcement posted successfully.",
            timestamp=NOW,
            author_email=user_email,
            title=request.title or "",
            audience=request.audience,
        )


@pytest.fixture()
def client() -> TestClient:
    app = create_app()
    app.dependency_overrides[get_dashboard_service] = FakeDashboardService
    app.dependency_overrides[get_announcements_service] = FakeAnnouncementsService
    return TestClient(app)


@pytest.fixture()
def dashboard_now_calls() -> List[Optional[datetime]]:
    FakeDashboardService.seen_now.clear()
    return FakeDashboardService.seen_now
