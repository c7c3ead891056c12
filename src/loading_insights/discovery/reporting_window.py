"""Reporting windows — weekly cadence, same-period-last-year and financial years.

The weekly operational review compares "this week so far" against the same
calendar dates one year earlier:
    - On a Monday the current window is the whole previous week
      (Monday to Sunday).
    - On any other day it runs from this week's Monday through yesterday.
The comparison window keeps month and day and decrements the year.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

_DATE_LABEL = "%d-%m-%Y"

# Window bounds are wall-clock times on this clock (IST)
DEFAULT_OFFSET_MINUTES = 330


@dataclass(frozen=True)
class PeriodWindow:
    """An inclusive reporting window spanning whole days."""

    start: datetime
    end: datetime
    days: int

    def contains(
        self, moment: datetime | date, offset_minutes: int = DEFAULT_OFFSET_MINUTES
    ) -> bool:
        """Whether *moment* falls in the window.

        Naive values are read as reporting wall-clock time; aware ones are
        converted to UTC + *offset_minutes* first.
        """
        if not isinstance(moment, datetime):
            moment = datetime.combine(moment, time.min)
        if moment.tzinfo is not None:
            moment = moment.astimezone(_clock(offset_minutes)).replace(tzinfo=None)
        return self.start <= moment <= self.end

    def label(self) -> str:
        return f"{self.start.strftime(_DATE_LABEL)} to {self.end.strftime(_DATE_LABEL)}"

    def to_dict(self) -> dict:
        return {
            "from": self.start.date().isoformat(),
            "to": self.end.date().isoformat(),
            "days": self.days,
        }


@dataclass(frozen=True)
class ReportingWindow:
    """Current window and its comparison window."""

    current: PeriodWindow
    previous: PeriodWindow

    def labels(self) -> dict:
        return {"current": self.current.label(), "previous": self.previous.label()}


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def inclusive_days(start: date | datetime, end: date | datetime) -> int:
    """Number of calendar days from *start* to *end*, both included.

    Returns 0 or a negative number when *end* precedes *start*; callers
    treat that as an empty window.
    """
    return (_as_date(end) - _as_date(start)).days + 1


def window_between(start: date | datetime, end: date | datetime) -> PeriodWindow:
    """Build a window from 00:00 on *start* to the last instant of *end*."""
    start_day = _as_date(start)
    end_day = _as_date(end)
    return PeriodWindow(
        start=datetime.combine(start_day, time.min),
        end=datetime.combine(end_day, time.max),
        days=inclusive_days(start_day, end_day),
    )


def same_day_last_year(day: date | datetime) -> date:
    """Same month and day one year earlier; 29 February becomes 28 February."""
    day = _as_date(day)
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        return day.replace(year=day.year - 1, day=28)


def resolve_reporting_window(today: date | datetime) -> ReportingWindow:
    """Resolve the weekly reporting window for *today*.

    Monday is its own branch: it reports the previous complete week rather
    than an empty week-to-date.
    """
    today = _as_date(today)
    yesterday = today - timedelta(days=1)
    if today.weekday() == 0:
        start = today - timedelta(days=7)
    else:
        start = today - timedelta(days=today.weekday())

    current = window_between(start, yesterday)
    previous = window_between(same_day_last_year(start), same_day_last_year(yesterday))
    return ReportingWindow(current=current, previous=previous)


def _clock(offset_minutes: int) -> timezone:
    return timezone(timedelta(minutes=offset_minutes))


def reporting_today(offset_minutes: int, now: datetime | None = None) -> date:
    """Calendar date on the reporting clock (UTC + *offset_minutes*)."""
    tz = _clock(offset_minutes)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


# ---------------------------------------------------------------------------
# Financial years (April to March)
# ---------------------------------------------------------------------------


def financial_year_label(day: date | datetime) -> str:
    """Return the financial year containing *day*, e.g. ``"2024-25"``."""
    day = _as_date(day)
    first_year = day.year if day.month >= 4 else day.year - 1
    return f"{first_year}-{str(first_year + 1)[-2:]}"


def financial_year_bounds(label: str) -> PeriodWindow:
    """Window from 1 April to 31 March for a label like ``"2024-25"``."""
    try:
        first_year = int(label.split("-", 1)[0])
    except ValueError as exc:
        raise ValueError(f"Invalid financial year label: {label!r}") from exc
    return window_between(date(first_year, 4, 1), date(first_year + 1, 3, 31))
