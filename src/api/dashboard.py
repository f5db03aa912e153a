from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from src.api.dependencies import get_caller_email, get_dashboard_service
from src.core.config import get_settings
from src.schemas.dashboard import DashboardView
from src.services.dashboard_service import DashboardService
from src.shared.response import Meta, ResponseEnvelope
from src.shared.time import local_now

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

# The HR roster is a current snapshot; the other views report month-to-date figures.
VIEW_TIME_WINDOWS = {"agent": "month_to_date", "manager": "month_to_date", "hr": "point_in_time"}


def _dashboard_source() -> str:
    settings = get_settings()
    return ",".join(
        [
            settings.agents_range,
            settings.sales_range,
            settings.tasks_range,
            settings.activity_range,
            settings.pipeline_range,
        ]
    )


@router.get("")
def dashboard(
    caller_email: Optional[str] = Depends(get_caller_email),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardView]:
    settings = get_settings()
    generated_at = local_now(settings.dashboard_timezone)
    data = service.get_dashboard(caller_email, now=generated_at)
    meta = Meta(
        as_of_date=generated_at.date().isoformat(),
        source=_dashboard_source(),
        time_window=VIEW_TIME_WINDOWS[data.view],
        calculation_version="v1",
        currency=settings.currency_code,
        generated_at=generated_at.isoformat(timespec="seconds"),
    )
    return ResponseEnvelope(data=data, meta=meta)
