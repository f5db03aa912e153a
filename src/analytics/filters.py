from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, TypeVar

from src.models.dashboard import AgentRecord, SaleRecord
from src.shared.time import DashboardWindow


class HasAgentEmail(Protocol):
    agent_email: str


EmailRecordT = TypeVar("EmailRecordT", bound=HasAgentEmail)


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def email_matches(value: Optional[str], target_email: str) -> bool:
    """Compare a cell against an already-lowercased email; blank cells never match."""
    if not value or not target_email:
        return False
    return normalize_email(value) == target_email


def find_agent(agents: Iterable[AgentRecord], target_email: str) -> Optional[AgentRecord]:
    for agent in agents:
        if email_matches(agent.email, target_email):
            return agent
    return None


def records_for(records: Iterable[EmailRecordT], target_email: str) -> List[EmailRecordT]:
    return [record for record in records if email_matches(record.agent_email, target_email)]


def records_with_email(records: Iterable[EmailRecordT]) -> List[EmailRecordT]:
    return [record for record in records if record.agent_email]


def sales_month_to_date(sales: Iterable[SaleRecord], window: DashboardWindow) -> List[SaleRecord]:
    return [sale for sale in sales if window.month_to_date(sale.date)]
