from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from src.shared.time import to_local_naive

_NON_NUMERIC = re.compile(r"[^0-9.]")

# Google Sheets day zero for serial date numbers.
SHEETS_EPOCH = datetime(1899, 12, 30)

DATE_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
)


def clean_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def parse_amount(raw: Any) -> float:
    """Coerce a loosely formatted cell into a number.

    Currency symbols, thousands separators and other decoration are dropped and
    a single leading minus sign is honoured. Blank or unparseable input yields 0,
    so a malformed value cannot be told apart from a true zero. The digits left
    after cleaning must form one float: ``"1.2.3"`` yields 0, not 1.2.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0
    text = str(raw).strip()
    if not text:
        return 0.0
    negative = text.startswith("-")
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        value = float(cleaned)
    except ValueError:
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return -value if negative else value


def parse_int(raw: Any) -> int:
    return int(round(parse_amount(raw)))


def parse_rate(raw: Any) -> float:
    """Parse a commission rate into a fraction in [0, 1].

    ``"10%"`` and bare values of 1 or more (``1``, ``1.5``, ``12.5``) are read as
    percentages; bare values below 1 are already fractions.
    """
    value = parse_amount(raw)
    if (isinstance(raw, str) and raw.strip().endswith("%")) or value >= 1:
        value = value / 100
    return min(max(value, 0.0), 1.0)


def parse_date(raw: Any, tz_name: Optional[str] = None) -> Optional[datetime]:
    """Parse a cell into a naive local datetime, or ``None`` when it is not a date."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return to_local_naive(raw, tz_name)
    if isinstance(raw, date):
        return datetime.combine(raw, time.min)
    if isinstance(raw, (int, float)):
        return _from_serial(float(raw))

    text = str(raw).strip()
    if not text:
        return None
    try:
        return to_local_naive(datetime.fromisoformat(text.replace("Z", "+00:00")), tz_name)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _from_serial(serial: float) -> Optional[datetime]:
    # Serial numbers outside roughly 1900..2200 are amounts, not dates.
    if not math.isfinite(serial) or serial <= 0 or serial > 110000:
        return None
    return SHEETS_EPOCH + timedelta(days=serial)
