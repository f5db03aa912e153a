from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from src.core.config import Settings, get_settings
from src.core.sheets import SheetsClient
from src.models.dashboard import AgentRecord, AnnouncementRecord, DashboardSnapshot
from src.repositories.range_schemas import RANGE_SCHEMAS

logger = logging.getLogger(__name__)


class DashboardRepository:
    def __init__(self, client: Optional[SheetsClient] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or SheetsClient()
        self.range_names: Dict[str, str] = {
            "agents": self.settings.agents_range,
            "sales": self.settings.sales_range,
            "tasks": self.settings.tasks_range,
            "activity": self.settings.activity_range,
            "pipeline": self.settings.pipeline_range,
        }

    def list_agents(self) -> List[AgentRecord]:
        return self.load_snapshot(["agents"]).agents

    def load_snapshot(self, keys: Sequence[str]) -> DashboardSnapshot:
        """Read the requested ranges in one batch and decode them into records.

        Ranges that are not requested, or that come back empty, decode to no rows.
        """
        unique_keys = [key for key in dict.fromkeys(keys) if key in RANGE_SCHEMAS]
        if not unique_keys:
            return DashboardSnapshot()
        raw_ranges = self.client.batch_get([self.range_names[key] for key in unique_keys])
        logger.debug(
            "Fetched ranges %s",
            ", ".join(f"{key}={len(rows)}" for key, rows in zip(unique_keys, raw_ranges)),
        )
        decoded: Dict[str, Any] = {}
        for key, rows in zip(unique_keys, raw_ranges):
            decoded[key] = self._decode(key, rows)
        return DashboardSnapshot(**decoded)

    def append_announcement(self, announcement: AnnouncementRecord) -> None:
        self.client.append(self.settings.announcements_range, [announcement.to_row()])

    def _decode(self, key: str, rows: List[List[Any]]) -> List[Any]:
        schema = RANGE_SCHEMAS[key]
        tz_name = self.settings.dashboard_timezone
        if self.settings.sheet_header_rows:
            if not rows:
                return []
            return schema.decode(rows[1:], header=rows[0], tz_name=tz_name)
        return schema.decode(rows, tz_name=tz_name)
