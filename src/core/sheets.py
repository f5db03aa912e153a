from __future__ import annotations

import json
import logging
from threading import Lock
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

import httpx
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from src.core.config import get_settings
from src.core.errors import UpstreamError

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

Row = List[Any]


class SheetsClient:
    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    def __init__(
        self,
        credentials: Any = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        settings = get_settings()
        if not settings.spreadsheet_id:
            raise ValueError("SPREADSHEET_ID is required")
        self.spreadsheet_id = settings.spreadsheet_id
        self.base_url = settings.sheets_api_base_url.rstrip("/") + f"/spreadsheets/{self.spreadsheet_id}"
        self._credentials = credentials or self._load_credentials(settings.google_credentials_json)
        self._token_lock = Lock()
        self._client = http_client or self._get_shared_client(settings.sheets_timeout_seconds)

    @staticmethod
    def _load_credentials(raw_json: Optional[str]) -> Any:
        if not raw_json:
            raise ValueError("GOOGLE_CREDENTIALS_JSON is required")
        info = json.loads(raw_json)
        return service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)

    @classmethod
    def _get_shared_client(cls, timeout: float) -> httpx.Client:
        if cls._shared_client is not None:
            return cls._shared_client
        with cls._client_lock:
            if cls._shared_client is None:
                cls._shared_client = httpx.Client(
                    timeout=timeout,
                    limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
                )
        return cls._shared_client

    def _headers(self) -> Dict[str, str]:
        with self._token_lock:
            if not self._credentials.valid:
                try:
                    self._credentials.refresh(GoogleAuthRequest())
                except Exception as exc:
                    logger.error("Google credential refresh failed: %s", exc)
                    raise UpstreamError("Could not authorize against the spreadsheet.") from exc
            token = self._credentials.token
        return {"Authorization": f"Bearer {token}", "Accept": "application/json"}

    def batch_get(self, ranges: Sequence[str]) -> List[List[Row]]:
        """Read several ranges in one request.

        The result keeps the order of ``ranges``; a range the API returns without
        values (or omits altogether) comes back as an empty list.
        """
        if not ranges:
            return []
        params: List[Tuple[str, str]] = [("ranges", name) for name in ranges]
        params.append(("majorDimension", "ROWS"))
        url = f"{self.base_url}/values:batchGet?{urlencode(params, doseq=True)}"
        payload = self._request("GET", url)

        value_ranges = payload.get("valueRanges", [])
        if not isinstance(value_ranges, list):
            raise UpstreamError("Spreadsheet returned a malformed batch response.")
        results: List[List[Row]] = []
        for index in range(len(ranges)):
            entry = value_ranges[index] if index < len(value_ranges) else {}
            if not isinstance(entry, dict):
                raise UpstreamError("Spreadsheet returned a malformed value range.")
            values = entry.get("values") or []
            if not isinstance(values, list):
                raise UpstreamError("Spreadsheet returned a malformed value range.")
            results.append([row if isinstance(row, list) else [row] for row in values])
        return results

    def append(self, range_name: str, rows: List[Row]) -> Dict[str, Any]:
        params = [("valueInputOption", "USER_ENTERED"), ("insertDataOption", "INSERT_ROWS")]
        url = f"{self.base_url}/values/{quote(range_name, safe='')}:append?{urlencode(params)}"
        return self._request("POST", url, body={"values": rows})

    def _request(self, method: str, url: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, headers=self._headers(), json=body)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Sheets API %s failed: %s", method, exc)
            raise UpstreamError() from exc
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Spreadsheet returned a non-JSON response.") from exc
        if not isinstance(data, dict):
            raise UpstreamError("Spreadsheet returned a malformed response.")
        return data
