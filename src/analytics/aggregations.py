from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from src.analytics.filters import normalize_email
from src.models.dashboard import ActivityLogEntry, AgentRecord, PipelineDeal, SaleRecord, TaskDefinition
from src.schemas.dashboard import (
    ActivityItem,
    AgentPerformanceRow,
    ChartSeries,
    LeaderboardRow,
    TaskStatusItem,
)
from src.shared.time import DashboardWindow, trailing_month_starts

AGENT_ROLE = "Agent"
MANUAL_TASK_CATEGORY = "Manual"
PIPELINE_STAGES = ("Prospecting", "Qualification", "Demo", "Negotiation")
UNKNOWN_PRODUCT = "Unknown"
RECENT_ACTIVITY_LIMIT = 20
TREND_MONTHS = 6


@dataclass(frozen=True)
class SalesRollup:
    revenue: float
    commission: float
    deals: int

    @property
    def avg_deal_size(self) -> float:
        return self.revenue / self.deals if self.deals else 0.0


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def rollup_sales(sales: Iterable[SaleRecord]) -> SalesRollup:
    revenue = 0.0
    commission = 0.0
    deals = 0
    for sale in sales:
        revenue += sale.revenue
        commission += sale.revenue * sale.commission_rate
        deals += 1
    return SalesRollup(revenue=revenue, commission=commission, deals=deals)


def quota_progress(revenue: float, quota: float) -> float:
    if quota <= 0:
        return 0.0
    return round_half_up(revenue / quota * 100, 1)


def agent_role_records(agents: Iterable[AgentRecord]) -> List[AgentRecord]:
    return [agent for agent in agents if agent.role == AGENT_ROLE]


def rank_leaderboard(agents: Iterable[AgentRecord]) -> List[LeaderboardRow]:
    # sorted() is stable, so agents with equal points keep their sheet order.
    ranked = sorted(agent_role_records(agents), key=lambda agent: -agent.points_balance)
    return [
        LeaderboardRow(rank=index + 1, name=agent.name, team=agent.team, points=agent.points_balance)
        for index, agent in enumerate(ranked)
    ]


def find_rank(leaderboard: Sequence[LeaderboardRow], name: str) -> Optional[int]:
    for row in leaderboard:
        if row.name == name:
            return row.rank
    return None


def pipeline_funnel(deals: Iterable[PipelineDeal]) -> ChartSeries:
    buckets: Dict[str, float] = {stage: 0.0 for stage in PIPELINE_STAGES}
    for deal in deals:
        if deal.stage in buckets:
            buckets[deal.stage] += deal.amount
    return ChartSeries(
        labels=list(buckets.keys()),
        data=[round_half_up(value) for value in buckets.values()],
    )


def revenue_by_product(sales: Iterable[SaleRecord]) -> ChartSeries:
    totals: Dict[str, float] = {}
    for sale in sales:
        product = sale.product or UNKNOWN_PRODUCT
        totals[product] = totals.get(product, 0.0) + sale.revenue
    return ChartSeries(
        labels=list(totals.keys()),
        data=[round_half_up(value) for value in totals.values()],
    )


def revenue_by_month(sales: Iterable[SaleRecord]) -> Dict[date, float]:
    totals: Dict[date, float] = defaultdict(float)
    for sale in sales:
        if sale.date is None:
            continue
        totals[date(sale.date.year, sale.date.month, 1)] += sale.revenue
    return dict(sorted(totals.items()))


def month_label(value: date) -> str:
    return value.strftime("%b %y")


def revenue_trend(
    sales: Iterable[SaleRecord], window: DashboardWindow, months: int = TREND_MONTHS
) -> ChartSeries:
    """Monthly revenue for the trailing ``months`` calendar months, oldest first."""
    month_starts = trailing_month_starts(window.now, months)
    in_range = [sale for sale in sales if sale.date is not None and sale.date <= window.now]
    totals = revenue_by_month(in_range)
    return ChartSeries(
        labels=[month_label(month) for month in month_starts],
        data=[round_half_up(totals.get(month, 0.0)) for month in month_starts],
    )


def is_task_completed(task: TaskDefinition, descriptions: Sequence[str]) -> bool:
    needles = [needle for needle in (task.id, task.description) if needle]
    if not needles:
        return False
    return any(needle in description for description in descriptions if description for needle in needles)


def task_statuses(
    tasks: Iterable[TaskDefinition], activity_this_week: Iterable[ActivityLogEntry]
) -> List[TaskStatusItem]:
    descriptions = [entry.action_description for entry in activity_this_week]
    return [
        TaskStatusItem(
            id=task.id,
            description=task.description,
            points=task.point_value,
            status="Completed" if is_task_completed(task, descriptions) else "Pending",
        )
        for task in tasks
        if task.category == MANUAL_TASK_CATEGORY
    ]


def recent_activity(
    entries: Iterable[ActivityLogEntry], limit: int = RECENT_ACTIVITY_LIMIT
) -> List[ActivityItem]:
    dated = [entry for entry in entries if entry.timestamp is not None]
    dated.sort(key=lambda entry: entry.timestamp, reverse=True)
    return [
        ActivityItem(
            timestamp=entry.timestamp,
            date=f"{entry.timestamp.month}/{entry.timestamp.day}/{entry.timestamp.year}",
            action=entry.action_description,
            points=entry.points_awarded,
        )
        for entry in dated[:limit]
    ]


def agent_performance(
    agents: Iterable[AgentRecord], sales: Iterable[SaleRecord]
) -> List[AgentPerformanceRow]:
    sales_by_email: Dict[str, List[SaleRecord]] = defaultdict(list)
    for sale in sales:
        if sale.agent_email:
            sales_by_email[normalize_email(sale.agent_email)].append(sale)

    rows: List[AgentPerformanceRow] = []
    for agent in agent_role_records(agents):
        rollup = rollup_sales(sales_by_email.get(normalize_email(agent.email), []))
        rows.append(
            AgentPerformanceRow(
                name=agent.name,
                email=agent.email,
                team=agent.team,
                revenue=round_half_up(rollup.revenue),
                deals_closed=rollup.deals,
                monthly_quota=round_half_up(agent.monthly_quota),
                quota_attainment=quota_progress(rollup.revenue, agent.monthly_quota),
            )
        )
    rows.sort(key=lambda row: -row.revenue)
    return rows
