"""
Month calendar

Weeks start on Sunday. The grid runs from the week holding the first of
the month to the week holding its last day.
"""

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from ..models import Job


@dataclass
class CalendarDay:
    day: date
    in_month: bool
    is_today: bool
    jobs: List[Job] = field(default_factory=list)


def start_of_week(day: date) -> date:
    # date.weekday(): Monday == 0, so Sunday sits at offset 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def end_of_week(day: date) -> date:
    return start_of_week(day) + timedelta(days=6)


def month_grid(month: date) -> List[date]:
    """Every date shown for the month containing ``month``"""
    first = month.replace(day=1)
    last = month.replace(day=monthrange(month.year, month.month)[1])
    start, end = start_of_week(first), end_of_week(last)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def jobs_by_day(jobs: Iterable[Job]) -> Dict[date, List[Job]]:
    grouped: Dict[date, List[Job]] = {}
    for job in jobs:
        grouped.setdefault(job.scheduled_date, []).append(job)
    return grouped


def build_month(jobs: Iterable[Job], month: date, today: Optional[date] = None) -> List[CalendarDay]:
    today = today or date.today()
    grouped = jobs_by_day(jobs)
    return [
        CalendarDay(
            day=d,
            in_month=(d.year, d.month) == (month.year, month.month),
            is_today=d == today,
            jobs=grouped.get(d, []),
        )
        for d in month_grid(month)
    ]


def shift_month(month: date, delta: int) -> date:
    """First day of the month ``delta`` months away"""
    index = month.year * 12 + (month.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)
