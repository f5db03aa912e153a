from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so local/dev .env can include deploy-only values.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Sales Dashboard Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    spreadsheet_id: str = Field(default="", alias="SPREADSHEET_ID")
    google_credentials_json: Optional[str] = Field(default=None, alias="GOOGLE_CREDENTIALS_JSON")
    sheets_api_base_url: str = Field(
        default="https://sheets.googleapis.com/v4", alias="SHEETS_API_BASE_URL"
    )
    sheets_timeout_seconds: float = Field(default=30.0, alias="SHEETS_TIMEOUT_SECONDS")

    # When true the ranges below start at the header row and columns are located by header text.
    sheet_header_rows: bool = Field(default=False, alias="SHEET_HEADER_ROWS")
    agents_range: str = Field(default="Sales_Agents!A2:F", alias="AGENTS_RANGE")
    sales_range: str = Field(default="Sales_Log!A2:F", alias="SALES_RANGE")
    tasks_range: str = Field(default="Gamification_Tasks!A2:E", alias="TASKS_RANGE")
    activity_range: str = Field(default="Agent_Activity_Log!A2:D", alias="ACTIVITY_RANGE")
    pipeline_range: str = Field(default="Sales_Pipeline!A2:F", alias="PIPELINE_RANGE")
    announcements_range: str = Field(default="HR_Announcements!A:E", alias="ANNOUNCEMENTS_RANGE")

    dashboard_timezone: Optional[str] = Field(default=None, alias="DASHBOARD_TIMEZONE")
    currency_code: str = Field(default="USD", alias="CURRENCY_CODE")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
