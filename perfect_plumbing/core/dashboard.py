"""
Dashboard statistics

Four independent reads are issued together and joined before use.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional

from ..models import Job, JobStatus
from ..services.store import DataStore


logger = logging.getLogger(__name__)


@dataclass
class DashboardStats:
    today_jobs: List[Job] = field(default_factory=list)
    week_count: int = 0
    unpaid_count: int = 0
    pending_quotes: int = 0


class Dashboard:
    def __init__(self, store: DataStore, window_days: int = 7,
                 today: Callable[[], date] = date.today):
        self.store = store
        self.window_days = window_days
        self.today = today

    async def stats(self, day: Optional[date] = None) -> DashboardStats:
        day = day or self.today()

        async def load() -> DashboardStats:
            jobs = self.store.jobs
            today_jobs, week_count, unpaid_count, pending_quotes = await asyncio.gather(
                jobs.jobs_scheduled_on(day),
                jobs.count_open_between(day, day + timedelta(days=self.window_days)),
                jobs.count_by_status(JobStatus.COMPLETE),
                jobs.count_by_status(JobStatus.QUOTED),
            )
            return DashboardStats(
                today_jobs=today_jobs,
                week_count=week_count,
                unpaid_count=unpaid_count,
                pending_quotes=pending_quotes,
            )

        return await self.store.cache.fetch(("dashboard", day.isoformat()), load)
