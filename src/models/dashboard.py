from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationInfo

from src.shared.parsing import clean_text, parse_amount, parse_date, parse_int, parse_rate


def _non_negative_amount(value: Any) -> float:
    return max(parse_amount(value), 0.0)


def _non_negative_int(value: Any) -> int:
    return max(parse_int(value), 0)


def _local_datetime(value: Any, info: ValidationInfo) -> Optional[datetime]:
    context = info.context or {}
    return parse_date(value, context.get("tz_name"))


CellText = Annotated[str, BeforeValidator(clean_text)]
Money = Annotated[float, BeforeValidator(_non_negative_amount)]
Points = Annotated[int, BeforeValidator(_non_negative_int)]
Rate = Annotated[float, BeforeValidator(parse_rate)]
CellDatetime = Annotated[Optional[datetime], BeforeValidator(_local_datetime)]


class SheetRecord(BaseModel):
    model_config = ConfigDict(frozen=True)


class AgentRecord(SheetRecord):
    name: CellText = ""
    email: CellText = ""
    role: CellText = ""
    team: CellText = ""
    monthly_quota: Money = 0.0
    points_balance: Points = 0


class SaleRecord(SheetRecord):
    date: CellDatetime = None
    agent_email: CellText = ""
    customer: CellText = ""
    product: CellText = ""
    revenue: Money = 0.0
    commission_rate: Rate = 0.0


class PipelineDeal(SheetRecord):
    account: CellText = ""
    agent_email: CellText = ""
    stage_amount: Money = 0.0
    amount: Money = 0.0
    stage: CellText = ""
    expected_close_date: CellDatetime = None


class ActivityLogEntry(SheetRecord):
    timestamp: CellDatetime = None
    agent_email: CellText = ""
    action_description: CellText = ""
    points_awarded: Points = 0


class TaskDefinition(SheetRecord):
    id: CellText = ""
    description: CellText = ""
    category: CellText = ""
    point_value: Points = 0


class AnnouncementRecord(BaseModel):
    timestamp: datetime
    author_email: str
    title: str
    body: str
    audience: str = "All"

    def to_row(self) -> List[Any]:
        return [
            self.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            self.author_email,
            self.title,
            self.body,
            self.audience,
        ]


class DashboardSnapshot(BaseModel):
    """Decoded contents of the dashboard ranges for a single request."""

    model_config = ConfigDict(frozen=True)

    agents: List[AgentRecord] = []
    sales: List[SaleRecord] = []
    tasks: List[TaskDefinition] = []
    activity: List[ActivityLogEntry] = []
    pipeline: List[PipelineDeal] = []
