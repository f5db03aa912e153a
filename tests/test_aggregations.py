from __future__ import annotations

from datetime import datetime

from src.analytics.aggregations import (
    agent_performance,
    find_rank,
    is_task_completed,
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
from src.models.dashboard import ActivityLogEntry, AgentRecord, PipelineDeal, SaleRecord, TaskDefinition
from src.shared.time import DashboardWindow

NOW = datetime(2026, 10, 14, 12, 0, 0)


def _agent(name: str, points: int, role: str = "Agent", email: str = "") -> AgentRecord:
    return AgentRecord(name=name, email=email or f"{name.lower()}@x.com", role=role, points_balance=points)


def test_rollup_sales_sums_revenue_and_commission():
    rollup = rollup_sales(
        [
            SaleRecord(revenue=1000, commission_rate=0.1),
            SaleRecord(revenue=500, commission_rate=0.2),
        ]
    )
    assert rollup.revenue == 1500
    assert rollup.commission == 200
    assert rollup.deals == 2
    assert rollup.avg_deal_size == 750


def test_avg_deal_size_is_zero_without_deals():
    assert rollup_sales([]).avg_deal_size == 0.0


def test_quota_progress_rounds_half_up_and_guards_zero_quota():
    assert quota_progress(1200.50, 1000) == 120.1
    assert quota_progress(500, 0) == 0.0
    assert quota_progress(1, 3) == 33.3


def test_round_half_up():
    assert round_half_up(2.675) == 2.68
    assert round_half_up(0.125, 2) == 0.13


def test_leaderboard_ranks_agents_by_points_and_keeps_tie_order():
    agents = [
        _agent("Bob", 30),
        _agent("Mia", 99, role="Manager"),
        _agent("Amy", 50),
        _agent("Cal", 30),
        _agent("Dee", 70),
    ]
    board = rank_leaderboard(agents)
    assert [(row.rank, row.name) for row in board] == [(1, "Dee"), (2, "Amy"), (3, "Bob"), (4, "Cal")]
    assert rank_leaderboard(agents) == board
    assert find_rank(board, "Cal") == 4
    assert find_rank(board, "Mia") is None


def test_pipeline_funnel_buckets_known_stages_only():
    deals = [
        PipelineDeal(stage="Demo", amount=100),
        PipelineDeal(stage="Demo", amount=50),
        PipelineDeal(stage="Prospecting", amount=10),
        PipelineDeal(stage="Closed Won", amount=1000),
        PipelineDeal(stage="demo", amount=7),
    ]
    funnel = pipeline_funnel(deals)
    assert funnel.labels == ["Prospecting", "Qualification", "Demo", "Negotiation"]
    assert funnel.data == [10.0, 0.0, 150.0, 0.0]
    assert sum(funnel.data) == 160.0


def test_revenue_by_product_groups_with_unknown_fallback():
    series = revenue_by_product(
        [
            SaleRecord(product="Widget", revenue=100),
            SaleRecord(product="", revenue=40),
            SaleRecord(product="Widget", revenue=25.5),
        ]
    )
    assert series.labels == ["Widget", "Unknown"]
    assert series.data == [125.5, 40.0]


def test_revenue_trend_orders_months_chronologically_across_year_end():
    window = DashboardWindow.from_now(datetime(2027, 2, 10, 9, 0))
    sales = [
        SaleRecord(date=datetime(2026, 12, 3), revenue=300),
        SaleRecord(date=datetime(2026, 9, 30), revenue=100),
        SaleRecord(date=datetime(2027, 2, 1), revenue=50),
        SaleRecord(date=datetime(2026, 8, 31), revenue=999),
        SaleRecord(date=None, revenue=999),
        SaleRecord(date=datetime(2027, 2, 20), revenue=999),
    ]
    trend = revenue_trend(sales, window)
    assert trend.labels == ["Sep 26", "Oct 26", "Nov 26", "Dec 26", "Jan 27", "Feb 27"]
    assert trend.data == [100.0, 0.0, 0.0, 300.0, 0.0, 50.0]


def test_task_completion_matches_id_or_description():
    tasks = [
        TaskDefinition(id="T1", description="Call 5 leads", category="Manual", point_value=10),
        TaskDefinition(id="T2", description="Send recap email", category="Manual", point_value=5),
        TaskDefinition(id="T3", description="Auto bonus", category="Automatic", point_value=20),
    ]
    activity = [
        ActivityLogEntry(action_description="Completed T1 early"),
        ActivityLogEntry(action_description=""),
    ]
    statuses = task_statuses(tasks, activity)
    assert [(item.id, item.status) for item in statuses] == [("T1", "Completed"), ("T2", "Pending")]
    assert statuses[0].points == 10


def test_task_with_blank_id_and_description_never_completes():
    task = TaskDefinition(id="", description="", category="Manual")
    assert is_task_completed(task, ["anything at all"]) is False
    assert is_task_completed(TaskDefinition(id="T9", description="Demo"), ["Ran Demo for Acme"]) is True


def test_recent_activity_is_newest_first_and_drops_undated_entries():
    entries = [
        ActivityLogEntry(timestamp=datetime(2026, 10, day), action_description=f"day {day}", points_awarded=day)
        for day in range(1, 26)
    ]
    entries.append(ActivityLogEntry(timestamp=None, action_description="undated", points_awarded=1))
    history = recent_activity(entries)
    assert len(history) == 20
    assert history[0].action == "day 25"
    assert history[0].date == "10/25/2026"
    assert history[-1].action == "day 6"
    assert all(item.action != "undated" for item in history)


def test_agent_performance_joins_on_normalized_email_and_sorts_by_revenue():
    agents = [
        AgentRecord(name="Amy", email="amy@x.com", role="Agent", monthly_quota=1000),
        AgentRecord(name="Bob", email="BOB@x.com", role="Agent", monthly_quota=0),
        AgentRecord(name="Mia", email="mia@x.com", role="Manager", monthly_quota=5000),
    ]
    sales = [
        SaleRecord(agent_email="AMY@X.COM", revenue=400),
        SaleRecord(agent_email="bob@x.com", revenue=900),
        SaleRecord(agent_email="mia@x.com", revenue=10000),
        SaleRecord(agent_email="", revenue=10000),
    ]
    rows = agent_performance(agents, sales)
    assert [row.name for row in rows] == ["Bob", "Amy"]
    assert rows[0].quota_attainment == 0.0
    assert rows[1].quota_attainment == 40.0
    assert rows[1].deals_closed == 1
