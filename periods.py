import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from config import get_settings

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


@dataclass(frozen=True)
class MonthPeriod:
    key: str
    start: date
    # First day of the following month; exclusive.
    end: date


def add_months(d: date, count: int) -> date:
    month_index = (d.year * 12) + (d.month - 1) + count
    year = month_index // 12
    month = (month_index % 12) + 1
    return date(year, month, 1)


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def resolve_month(key: str) -> MonthPeriod:
    if not key or not MONTH_PATTERN.match(key):
        raise ValueError("Month must be in YYYY-MM format")
    year_str, month_str = key.split("-", 1)
    month = int(month_str)
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 01 and 12")
    start = date(int(year_str), month, 1)
    return MonthPeriod(key, start, add_months(start, 1))


def today_local() -> date:
    return datetime.now(ZoneInfo(get_settings().timezone)).date()


def current_month(today: Optional[date] = None) -> str:
    return month_key(today or today_local())
