from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from src.analytics.aggregations import (
    agent_performance,
    agent_role_records,
    find_rank,
    pipeline_funnel,
    quota_progress,
    rank_leaderboard,
    recent_activity,
    revenue_by_product,
    revenue_trend,
    rollup_sales,
    round_half_up,
    task_statuses,
)
from src.analytics.filters import (
    find_agent,
    normalize_email,
    records_for,
    records_with_email,
    sales_month_to_date,
)
from src.core.config import get_settings
from src.core.errors import NotFoundError, UnauthenticatedError, UnknownRoleError
from src.models.dashboard import AgentRecord, DashboardSnapshot
from src.repositories.dashboard_repository import DashboardRepository
from src.schemas.dashboard import (
    AgentChartData,
    AgentDashboard,
    AgentHeader,
    AgentKpis,
    DashboardView,
    HrDashboard,
    HrHeader,
    ManagerChartData,
    ManagerDashboard,
    ManagerHeader,
    ManagerKpis,
    PersonnelRow,
)
from src.shared.time import DashboardWindow, local_now

logger = logging.getLogger(__name__)

MANAGER_LEADERBOARD_SIZE = 5


@dataclass(frozen=True)
class DashboardContext:
    caller: AgentRecord
    caller_email: str
    snapshot: DashboardSnapshot
    window: DashboardWindow


@dataclass(frozen=True)
class RoleViewConfig:
    view: str
    ranges: Tuple[str, ...]
    build: Callable[[DashboardContext], DashboardView]


def build_agent_view(context: DashboardContext) -> AgentDashboard:
    snapshot, window, email = context.snapshot, context.window, context.caller_email
    caller = context.caller

    my_sales = sales_month_to_date(records_for(snapshot.sales, email), window)
    rollup = rollup_sales(my_sales)
    my_activity = records_for(snapshot.activity, email)
    activity_this_week = [entry for entry in my_activity if window.week_to_date(entry.timestamp)]
    leaderboard = rank_leaderboard(snapshot.agents)

    return AgentDashboard(
        header=AgentHeader(
            name=caller.name,
            points=caller.points_balance,
            rank=find_rank(leaderboard, caller.name),
            total_agents=len(leaderboard),
        ),
        kpis=AgentKpis(
            my_revenue=round_half_up(rollup.revenue),
            my_commission=round_half_up(rollup.commission),
            deals_closed=rollup.deals,
            avg_deal_size=round_half_up(rollup.avg_deal_size),
            monthly_quota=round_half_up(caller.monthly_quota),
            quota_progress=quota_progress(rollup.revenue, caller.monthly_quota),
        ),
        tasks=task_statuses(snapshot.tasks, activity_this_week),
        history=recent_activity(my_activity),
        chart_data=AgentChartData(
            pipeline_funnel=pipeline_funnel(records_for(snapshot.pipeline, email)),
            revenue_by_product=revenue_by_product(my_sales),
        ),
        leaderboard=leaderboard,
    )


def build_manager_view(context: DashboardContext) -> ManagerDashboard:
    snapshot, window = context.snapshot, context.window

    agents = agent_role_records(snapshot.agents)
    agent_emails = {normalize_email(agent.email) for agent in agents if agent.email}
    team_sales = [
        sale for sale in records_with_email(snapshot.sales) if normalize_email(sale.agent_email) in agent_emails
    ]
    sales_this_month = sales_month_to_date(team_sales, window)
    rollup = rollup_sales(sales_this_month)
    total_quota = sum(agent.monthly_quota for agent in agents)

    return ManagerDashboard(
        header=ManagerHeader(
            name=context.caller.name,
            team=context.caller.team,
            total_agents=len(agents),
        ),
        kpis=ManagerKpis(
            total_revenue=round_half_up(rollup.revenue),
            deals_closed=rollup.deals,
            avg_deal_size=round_half_up(rollup.avg_deal_size),
            total_quota=round_half_up(total_quota),
            quota_attainment=quota_progress(rollup.revenue, total_quota),
        ),
        team_performance=agent_performance(agents, sales_this_month),
        leaderboard=rank_leaderboard(agents)[:MANAGER_LEADERBOARD_SIZE],
        chart_data=ManagerChartData(
            pipeline_funnel=pipeline_funnel(records_with_email(snapshot.pipeline)),
            revenue_trend=revenue_trend(team_sales, window),
        ),
    )


def build_hr_view(context: DashboardContext) -> HrDashboard:
    roster = [
        PersonnelRow(name=agent.name, email=agent.email, role=agent.role, team=agent.team)
        for agent in context.snapshot.agents
    ]
    return HrDashboard(
        header=HrHeader(name=context.caller.name, total_personnel=len(roster)),
        roster=roster,
    )


ROLE_VIEWS: Dict[str, RoleViewConfig] = {
    "Agent": RoleViewConfig(
        view="agent",
        ranges=("sales", "tasks", "activity", "pipeline"),
        build=build_agent_view,
    ),
    "Manager": RoleViewConfig(
        view="manager",
        ranges=("sales", "pipeline"),
        build=build_manager_view,
    ),
    "HR": RoleViewConfig(view="hr", ranges=(), build=build_hr_view),
}


def resolve_role_view(caller: AgentRecord) -> RoleViewConfig:
    config = ROLE_VIEWS.get(caller.role)
    if config is None:
        raise UnknownRoleError(caller.role)
    return config


class DashboardService:
    def __init__(self, repository: DashboardRepository) -> None:
        self.repository = repository

    def get_dashboard(self, user_email: Optional[str], now: Optional[datetime] = None) -> DashboardView:
        email = normalize_email(user_email)
        if not email:
            raise UnauthenticatedError("User email is required.")
        tz_name = get_settings().dashboard_timezone
        window = DashboardWindow.from_now(now or local_now(tz_name), tz_name)

        agents = self.repository.list_agents()
        caller = find_agent(agents, email)
        if caller is None:
            raise NotFoundError("User not found in agent list.")
        config = resolve_role_view(caller)
        logger.info("Building %s dashboard for %s", config.view, email)

        snapshot = self.repository.load_snapshot(config.ranges)
        snapshot = snapshot.model_copy(update={"agents": agents})
        context = DashboardContext(caller=caller, caller_email=email, snapshot=snapshot, window=window)
        return config.build(context)
