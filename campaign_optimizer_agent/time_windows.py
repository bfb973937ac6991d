from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone

from campaign_optimizer_agent.models import DateWindow


WINDOW_KEYS = ("yesterday", "d7", "d30", "mtd", "prev_month")


def _utc_today(now: datetime | date | None) -> date:
    if now is None:
        return datetime.now(timezone.utc).date()
    if isinstance(now, datetime):
        if now.tzinfo is None:
            return now.date()
        return now.astimezone(timezone.utc).date()
    return now


def compute_windows(now: datetime | date | None = None) -> dict[str, DateWindow]:
    """Build the rolling reporting windows anchored to ``now`` (UTC).

    Every window ends on yesterday at the latest because the ad-data source
    reports with a one-day lag. On the 1st of a month the month-to-date
    window is empty (``end`` precedes ``start``).
    """
    today = _utc_today(now)
    yesterday = today - timedelta(days=1)

    mtd_start = date(today.year, today.month, 1)
    prev_month_end = mtd_start - timedelta(days=1)
    prev_month_start = date(prev_month_end.year, prev_month_end.month, 1)

    return {
        "yesterday": DateWindow("Yesterday", yesterday, yesterday),
        "d7": DateWindow("Last 7 Days", today - timedelta(days=7), yesterday),
        "d30": DateWindow("Last 30 Days", today - timedelta(days=30), yesterday),
        "mtd": DateWindow("Month to Date", mtd_start, yesterday),
        "prev_month": DateWindow("Prior Month", prev_month_start, prev_month_end),
    }


def widest_window(windows: dict[str, DateWindow], keys: tuple[str, ...]) -> DateWindow:
    selected = [windows[key] for key in keys if not windows[key].is_empty]
    start = min(window.start for window in selected)
    end = max(window.end for window in selected)
    return DateWindow("CRM fetch range", start, end)


def expected_pace(run_date: date) -> float:
    days_in_month = calendar.monthrange(run_date.year, run_date.month)[1]
    return run_date.day / days_in_month


def budget_pacing(spend: float, monthly_budget: float) -> float:
    # Raw 30-day spend against the monthly ceiling; not normalized by expected_pace.
    return spend / monthly_budget if monthly_budget > 0 else 0.0
