"""Weekly and monthly time totals from a Notion task database.

A row counts towards a window when its completion date falls on or after the
window start. Weeks start on Sunday, months on the first; both are computed in
the server's local time.
"""
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from . import config
from .credentials import Credential
from .errors import KpiQueryError, UpstreamUnreachable
from .upstream import send

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def local_now() -> datetime:
    return datetime.now()


def week_start(now: datetime) -> datetime:
    """Most recent Sunday at midnight; today if today is Sunday."""
    days_since_sunday = (now.weekday() + 1) % 7
    return datetime.combine(now.date() - timedelta(days=days_since_sunday), time.min)


def month_start(now: datetime) -> datetime:
    return datetime.combine(now.date().replace(day=1), time.min)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def row_minutes(row: Dict[str, Any]) -> Optional[int]:
    """Measured minutes of a row, or None when missing, non-numeric or not positive."""
    prop = (row.get("properties") or {}).get(config.MINUTES_PROPERTY) or {}
    value = prop.get("number")
    if value is None:
        # Computed columns nest their result one level down
        for kind in ("formula", "rollup"):
            nested = prop.get(kind)
            if isinstance(nested, dict) and nested.get("number") is not None:
                value = nested["number"]
                break
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    minutes = round_half_up(value)
    return minutes if minutes > 0 else None


def row_date(row: Dict[str, Any]) -> Optional[date]:
    prop = (row.get("properties") or {}).get(config.COMPLETION_DATE_PROPERTY) or {}
    start = (prop.get("date") or {}).get("start")
    if not start:
        return None
    try:
        return date.fromisoformat(start[:10])
    except ValueError:
        logger.warning("Skipping row %s with unparseable date %r", row.get("id"), start)
        return None


def row_category(row: Dict[str, Any]) -> str:
    prop = (row.get("properties") or {}).get(config.CATEGORY_PROPERTY) or {}
    name = (prop.get("select") or {}).get("name")
    return name or config.UNCATEGORIZED_LABEL


def fetch_rows(db_id: str, credential: Credential, since: date) -> List[Dict[str, Any]]:
    """All rows completed on or after ``since``, following pagination."""
    url = f"{config.NOTION_API_BASE}/databases/{db_id}/query"
    payload: Dict[str, Any] = {
        "filter": {
            "property": config.COMPLETION_DATE_PROPERTY,
            "date": {"on_or_after": since.isoformat()},
        },
        "page_size": PAGE_SIZE,
    }

    rows: List[Dict[str, Any]] = []
    for _ in range(config.KPI_MAX_PAGES):
        try:
            resp = send("POST", url, credential, body=payload)
        except UpstreamUnreachable as e:
            raise KpiQueryError("KPI Query failed: Notion unreachable") from e
        if not resp.ok:
            raise KpiQueryError("KPI Query failed", resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise KpiQueryError("KPI Query returned invalid JSON", resp.status_code) from e
        if not isinstance(data, dict):
            raise KpiQueryError("KPI Query returned an unexpected body", resp.status_code)

        rows.extend(data.get("results") or [])
        if not data.get("has_more") or not data.get("next_cursor"):
            return rows
        payload = dict(payload, start_cursor=data["next_cursor"])

    raise KpiQueryError(f"KPI Query exceeded {config.KPI_MAX_PAGES} pages")


def aggregate(
    week_rows: List[Dict[str, Any]],
    month_rows: List[Dict[str, Any]],
    week_from: date,
    month_from: date,
) -> Dict[str, Any]:
    total_week = 0
    total_month = 0
    by_category: Dict[str, int] = {}

    for row in week_rows:
        minutes, done = row_minutes(row), row_date(row)
        if minutes is None or done is None or done < week_from:
            continue
        total_week += minutes
        category = row_category(row)
        by_category[category] = by_category.get(category, 0) + minutes

    for row in month_rows:
        minutes, done = row_minutes(row), row_date(row)
        if minutes is None or done is None or done < month_from:
            continue
        total_month += minutes

    return {
        "totalWeekMinutes": total_week,
        "totalMonthMinutes": total_month,
        "categoryWeekMinutes": by_category,
    }


def get_kpi(db_id: str, credential: Credential, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or local_now()
    week_from = week_start(now).date()
    month_from = month_start(now).date()

    # Both windows are read-only and independent
    with ThreadPoolExecutor(max_workers=2) as pool:
        week_future = pool.submit(fetch_rows, db_id, credential, week_from)
        month_future = pool.submit(fetch_rows, db_id, credential, month_from)
        week_rows = week_future.result()
        month_rows = month_future.result()

    result = aggregate(week_rows, month_rows, week_from, month_from)
    logger.info(
        "KPI for week of %s: %d min week, %d min month",
        week_from,
        result["totalWeekMinutes"],
        result["totalMonthMinutes"],
    )
    return result
