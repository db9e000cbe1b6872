"""
Jobs Service

Reads and writes the ``jobs`` table. List reads embed the customer's name
and phone; single reads embed the whole customer record.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from .base import TableService
from ..models import Job, JobStatus


logger = logging.getLogger(__name__)

LIST_COLUMNS = "*, customers(full_name, phone)"
DETAIL_COLUMNS = "*, customers(*)"

# Jobs that no longer need attention on the dashboard
CLOSED_STATUSES = [JobStatus.ARCHIVED.value, JobStatus.INVOICED.value]


class JobsService(TableService):
    """Service for managing jobs"""

    table_name = "jobs"

    async def list_jobs(self, status: Optional[Union[JobStatus, str]] = None) -> List[Job]:
        """
        List jobs, newest scheduled date first

        Args:
            status: Only return jobs in this status; ``None`` or ``"all"`` for every job
        """
        status_key = "all" if status in (None, "all") else JobStatus(status).value

        async def load() -> List[Job]:
            query = self.query().select(LIST_COLUMNS)
            if status_key != "all":
                query = query.eq("status", status_key)
            query = query.order("scheduled_date", desc=True)
            response = await self.backend.execute(query, f"list jobs ({status_key})")
            return self._many(response, Job)

        return await self.cache.fetch(("jobs", status_key), load)

    async def get_job(self, job_id: str) -> Job:
        """Get a single job with its customer"""
        async def load() -> Job:
            query = self.query().select(DETAIL_COLUMNS).eq("id", job_id).single()
            response = await self.backend.execute(query, f"get job {job_id}")
            return self._one(response, Job, "get job")

        return await self.cache.fetch(("job", job_id), load)

    async def create_job(self, data: Dict[str, Any]) -> Job:
        """Create a job; the backend starts it in draft"""
        response = await self.backend.execute(self.query().insert(data), "create job")
        job = self._one(response, Job, "create job")
        self._invalidate(job.id)
        logger.info(f"✅ Job created: {job.id} for customer {job.customer_id}")
        return job

    async def update_job(self, job_id: str, changes: Dict[str, Any]) -> Job:
        """Apply a partial update; only the changed fields are sent"""
        query = self.query().update(changes).eq("id", job_id)
        response = await self.backend.execute(query, f"update job {job_id}")
        job = self._one(response, Job, "update job")
        self._invalidate(job_id)
        logger.info(f"✅ Job updated: {job_id} -> {sorted(changes)}")
        return job

    # ===== DASHBOARD QUERIES =====

    async def jobs_scheduled_on(self, day: date) -> List[Job]:
        """Open jobs scheduled for ``day``, in time order"""
        query = (
            self.query()
            .select(LIST_COLUMNS)
            .eq("scheduled_date", day.isoformat())
            .not_.in_("status", CLOSED_STATUSES)
            .order("scheduled_time")
        )
        response = await self.backend.execute(query, f"jobs on {day}")
        return self._many(response, Job)

    async def count_open_between(self, start: date, end: date) -> int:
        """Count open jobs scheduled between ``start`` and ``end`` inclusive"""
        query = (
            self.query()
            .select("id", count="exact")
            .gte("scheduled_date", start.isoformat())
            .lte("scheduled_date", end.isoformat())
            .not_.in_("status", CLOSED_STATUSES)
        )
        response = await self.backend.execute(query, f"count jobs {start}..{end}")
        return response.count or 0

    async def count_by_status(self, status: Union[JobStatus, str]) -> int:
        status = JobStatus(status).value
        query = self.query().select("id", count="exact").eq("status", status)
        response = await self.backend.execute(query, f"count {status} jobs")
        return response.count or 0

    def _invalidate(self, job_id: str) -> None:
        self.cache.invalidate("jobs")
        self.cache.invalidate("job", job_id)
        self.cache.invalidate("dashboard")
