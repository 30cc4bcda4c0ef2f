"""Sprint calendar: dates to weekday / ISO week / sprint, and default PI calendars.

Malformed dates never raise here; they resolve to an empty label so that one bad
row cannot blank a whole calendar view.
"""
import datetime
from typing import Iterable

import structlog

from pi_planning.config import get_settings
from pi_planning.schemas.calendar import DayInfo, SprintWindow
from pi_planning.schemas.planning import AvailabilityDay

logger = structlog.get_logger(__name__)

# Monday first, matching date.weekday()
WEEKDAY_LABELS: dict[str, tuple[str, ...]] = {
    "de-CH": ("Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"),
    "de-DE": ("Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"),
    "en-US": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
}

SATURDAY = 5

DEFAULT_SPRINT_WINDOWS: dict[str, list[tuple[str, str, str]]] = {
    "26.1": [
        ("26.1-S1", "2025-12-04", "2025-12-17"),
        ("26.1-S2", "2025-12-18", "2026-01-14"),
        ("26.1-S3", "2026-01-15", "2026-01-28"),
        ("26.1-S4", "2026-01-29", "2026-02-18"),
        ("26.1-IP", "2026-02-19", "2026-03-04"),
    ],
}


def parse_date(value: datetime.date | str | None) -> datetime.date | None:
    """Accept a date, ``YYYY-MM-DD`` (optionally with a time part) or ``DD.MM.YYYY``."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    parts = text.split(".")
    try:
        if len(parts) == 3:
            day, month, year = parts
            if len(year) == 2:
                year = "20" + year
            return datetime.date(int(year), int(month), int(day))
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        logger.debug("calendar_date_unparseable", value=value)
        return None


def iso_week(value: datetime.date | str | None) -> int | None:
    """ISO-8601 week number (week of the Thursday), None for an invalid date."""
    day = parse_date(value)
    if day is None:
        return None
    return day.isocalendar()[1]


def weekday_short(value: datetime.date | str | None, locale: str | None = None) -> str:
    day = parse_date(value)
    if day is None:
        return ""
    labels = WEEKDAY_LABELS.get(locale or get_settings().weekday_locale, WEEKDAY_LABELS["de-CH"])
    return labels[day.weekday()]


def is_weekend(value: datetime.date | str | None) -> bool:
    day = parse_date(value)
    return day is not None and day.weekday() >= SATURDAY


def is_ip_sprint(label: str | None, marker: str | None = None) -> bool:
    return bool(label) and (marker or get_settings().ip_sprint_marker) in label


def sprint_options(pi: str, sprint_count: int | None = None) -> list[str]:
    """Selectable sprint labels of a PI: regular sprints then the IP sprint."""
    count = sprint_count if sprint_count is not None else get_settings().sprints_per_pi
    return [f"{pi}-S{i}" for i in range(1, count + 1)] + [f"{pi}-IP"]


def sprint_for_date(value: datetime.date | str | None, rows: Iterable[AvailabilityDay]) -> str:
    day = parse_date(value)
    if day is None:
        return ""
    for row in rows:
        if parse_date(row.date) == day:
            return row.sprint
    return ""


def resolve_day(row: AvailabilityDay, locale: str | None = None) -> DayInfo:
    return DayInfo(
        date=row.date,
        weekday=weekday_short(row.date, locale),
        iso_week=iso_week(row.date),
        sprint=row.sprint,
        is_weekend=is_weekend(row.date),
    )


def order_sprints(rows: Iterable[AvailabilityDay]) -> list[str]:
    """Sprint labels ordered by their first calendar day; undated sprints last."""
    first_day: dict[str, datetime.date | None] = {}
    for row in rows:
        if not row.sprint:
            continue
        day = parse_date(row.date)
        current = first_day.get(row.sprint)
        if row.sprint not in first_day or (day is not None and (current is None or day < current)):
            first_day[row.sprint] = day
    return sorted(
        first_day,
        key=lambda sprint: (first_day[sprint] is None, first_day[sprint] or datetime.date.min),
    )


def filter_days(
    rows: Iterable[AvailabilityDay],
    sprint: str | None = None,
    weekday: str | None = None,
    week: int | None = None,
    locale: str | None = None,
) -> list[AvailabilityDay]:
    result = []
    for row in rows:
        if sprint and row.sprint != sprint:
            continue
        if weekday and weekday_short(row.date, locale) != weekday:
            continue
        if week is not None and iso_week(row.date) != week:
            continue
        result.append(row)
    return result


def default_sprint_windows(pi: str) -> list[SprintWindow]:
    return [
        SprintWindow(name=name, start=datetime.date.fromisoformat(start), end=datetime.date.fromisoformat(end))
        for name, start, end in DEFAULT_SPRINT_WINDOWS.get(pi, [])
    ]


def generate_default_calendar(
    pi: str,
    existing: Iterable[AvailabilityDay] = (),
) -> list[AvailabilityDay]:
    """One row per weekday of each default sprint window of a known PI.

    Seeding only happens for a PI that has no calendar rows yet; existing rows are
    never replaced, so the result is empty in that case.
    """
    if any(True for _ in existing):
        return []
    rows: list[AvailabilityDay] = []
    for window in default_sprint_windows(pi):
        day = window.start
        while day <= window.end:
            if day.weekday() < SATURDAY:
                rows.append(AvailabilityDay(date=day.isoformat(), sprint=window.name, pi=pi))
            day += datetime.timedelta(days=1)
    logger.info("calendar_seeded", pi=pi, days=len(rows))
    return rows
