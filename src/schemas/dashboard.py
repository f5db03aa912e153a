from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import ConfigDict, Field

from src.shared.base import BaseSchema


class ChartSeries(BaseSchema):
    labels: List[str]
    data: List[float]


class LeaderboardRow(BaseSchema):
    rank: int
    name: str
    team: str
    points: int


class TaskStatusItem(BaseSchema):
    id: str
    description: str
    points: int
    status: Literal["Completed", "Pending"]


class ActivityItem(BaseSchema):
    timestamp: datetime
    date: str
    action: str
    points: int


class AgentHeader(BaseSchema):
    name: str
    points: int
    rank: Optional[int] = None
    total_agents: int


class AgentKpis(BaseSchema):
    my_revenue: float
    my_commission: float
    deals_closed: int
    avg_deal_size: float
    monthly_quota: float
    quota_progress: float


class AgentChartData(BaseSchema):
    pipeline_funnel: ChartSeries
    revenue_by_product: ChartSeries


class AgentDashboard(BaseSchema):
    view: Literal["agent"] = "agent"
    header: AgentHeader
    kpis: AgentKpis
    tasks: List[TaskStatusItem]
    history: List[ActivityItem]
    chart_data: AgentChartData
    leaderboard: List[LeaderboardRow]


class ManagerHeader(BaseSchema):
    name: str
    team: str
    total_agents: int


class ManagerKpis(BaseSchema):
    total_revenue: float
    deals_closed: int
    avg_deal_size: float
    total_quota: float
    quota_attainment: float


class AgentPerformanceRow(BaseSchema):
    name: str
    email: str
    team: str
    revenue: float
    deals_closed: int
    monthly_quota: float
    quota_attainment: float


class ManagerChartData(BaseSchema):
    pipeline_funnel: ChartSeries
    revenue_trend: ChartSeries


class ManagerDashboard(BaseSchema):
    view: Literal["manager"] = "manager"
    header: ManagerHeader
    kpis: ManagerKpis
    team_performance: List[AgentPerformanceRow]
    leaderboard: List[LeaderboardRow]
    chart_data: ManagerChartData


class HrHeader(BaseSchema):
    name: str
    total_personnel: int


class PersonnelRow(BaseSchema):
    name: str
    email: str
    role: str
    team: str


class HrDashboard(BaseSchema):
    view: Literal["hr"] = "hr"
    header: HrHeader
    roster: List[PersonnelRow]


DashboardView = Annotated[
    Union[AgentDashboard, ManagerDashboard, HrDashboard], Field(discriminator="view")
]


class AnnouncementCreateRequest(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    message: Optional[str] = None
    audience: str = Field(default="All", max_length=100)


class AnnouncementCreateResult(BaseSchema):
    success: bool
    message: str
    timestamp: datetime
    author_email: str
    title: str
    audience: str
