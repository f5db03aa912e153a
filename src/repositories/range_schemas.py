from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from src.models.dashboard import (
    ActivityLogEntry,
    AgentRecord,
    PipelineDeal,
    SaleRecord,
    SheetRecord,
    TaskDefinition,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=SheetRecord)


@dataclass(frozen=True)
class Column:
    field: str
    headers: Tuple[str, ...]


@dataclass(frozen=True)
class RangeSchema(Generic[RecordT]):
    """Column layout of one sheet range and the record type its rows decode into.

    ``columns`` are listed in the sheet's default order. When a header row is
    supplied, columns are located by header text instead, so inserting or
    reordering sheet columns does not shift values into the wrong field.
    """

    key: str
    record_type: Type[RecordT]
    columns: Tuple[Column, ...]

    def column_positions(self, header: Optional[Sequence[Any]] = None) -> Dict[str, int]:
        if header is None:
            return {column.field: index for index, column in enumerate(self.columns)}
        normalized = [_normalize_header(cell) for cell in header]
        positions: Dict[str, int] = {}
        for column in self.columns:
            for alias in column.headers:
                if alias in normalized:
                    positions[column.field] = normalized.index(alias)
                    break
        if not positions:
            logger.warning(
                "Header row for %s matches no known column; check that the range starts at the header row",
                self.key,
            )
        elif len(positions) < len(self.columns):
            missing = [column.field for column in self.columns if column.field not in positions]
            logger.warning("Header row for %s is missing columns: %s", self.key, ", ".join(missing))
        return positions

    def decode(
        self,
        rows: Sequence[Sequence[Any]],
        header: Optional[Sequence[Any]] = None,
        tz_name: Optional[str] = None,
    ) -> List[RecordT]:
        positions = self.column_positions(header)
        context = {"tz_name": tz_name}
        records: List[RecordT] = []
        for row in rows:
            if not any(_has_value(cell) for cell in row):
                continue
            values = {
                field: row[index] if index < len(row) else ""
                for field, index in positions.items()
            }
            records.append(self.record_type.model_validate(values, context=context))
        return records


def _normalize_header(cell: Any) -> str:
    return " ".join(str(cell or "").replace("_", " ").split()).lower()


def _has_value(cell: Any) -> bool:
    return cell is not None and str(cell).strip() != ""


AGENTS = RangeSchema(
    key="agents",
    record_type=AgentRecord,
    columns=(
        Column("name", ("name", "agent name")),
        Column("email", ("email", "agent email")),
        Column("role", ("role",)),
        Column("team", ("team",)),
        Column("monthly_quota", ("monthly quota", "quota")),
        Column("points_balance", ("points balance", "points", "total points")),
    ),
)

SALES = RangeSchema(
    key="sales",
    record_type=SaleRecord,
    columns=(
        Column("date", ("date", "close date", "sale date")),
        Column("agent_email", ("agent email", "email")),
        Column("customer", ("customer", "customer name")),
        Column("product", ("product", "product name")),
        Column("revenue", ("revenue", "amount")),
        Column("commission_rate", ("commission rate", "commission")),
    ),
)

TASKS = RangeSchema(
    key="tasks",
    record_type=TaskDefinition,
    columns=(
        Column("id", ("task id", "id")),
        Column("description", ("description", "task description", "task")),
        Column("category", ("category", "type")),
        Column("point_value", ("point value", "points")),
    ),
)

ACTIVITY = RangeSchema(
    key="activity",
    record_type=ActivityLogEntry,
    columns=(
        Column("timestamp", ("timestamp", "date")),
        Column("agent_email", ("agent email", "email")),
        Column("action_description", ("action description", "action", "description")),
        Column("points_awarded", ("points awarded", "points")),
    ),
)

PIPELINE = RangeSchema(
    key="pipeline",
    record_type=PipelineDeal,
    columns=(
        Column("account", ("account", "account name", "deal")),
        Column("agent_email", ("agent email", "email")),
        Column("stage_amount", ("stage amount",)),
        Column("amount", ("amount", "deal amount", "value")),
        Column("stage", ("stage", "deal stage")),
        Column("expected_close_date", ("expected close date", "close date")),
    ),
)

RANGE_SCHEMAS: Dict[str, RangeSchema[Any]] = {
    schema.key: schema for schema in (AGENTS, SALES, TASKS, ACTIVITY, PIPELINE)
}
