"""
Job scheduling: creating and editing jobs, status filters and search.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .job_lifecycle import STATUS_LABELS
from ..exceptions import InvalidInputError, RecordNotFoundError
from ..models import Job, JobDetailsIn, JobIn, JobStatus, validate_form
from ..services.store import DataStore


logger = logging.getLogger(__name__)

STATUS_FILTERS: List[Tuple[str, str]] = [("all", "All Jobs")] + [
    (status.value, STATUS_LABELS[status]) for status in JobStatus
]


def filter_jobs(jobs: Iterable[Job], search: Optional[str]) -> List[Job]:
    """Case-insensitive match of ``search`` against customer name, address and description"""
    needle = (search or "").strip().lower()
    if not needle:
        return list(jobs)
    return [
        j for j in jobs
        if any(needle in value.lower() for value in (j.customer_name, j.job_address, j.description) if value)
    ]


class JobScheduler:
    """Job operations behind the jobs screen"""

    def __init__(self, store: DataStore):
        self.store = store

    async def list_jobs(self, status: Optional[Union[JobStatus, str]] = None,
                        search: Optional[str] = None) -> List[Job]:
        status = getattr(status, "value", status)
        if status not in (None, "all") and status not in {s.value for s in JobStatus}:
            raise InvalidInputError(f"Unknown job status: {status}", fields=["status"])
        return filter_jobs(await self.store.jobs.list_jobs(status), search)

    async def get_job(self, job_id: str) -> Job:
        return await self.store.jobs.get_job(job_id)

    async def create_job(self, form: Dict[str, Any]) -> Job:
        """
        Create a draft job from form input

        A blank job address falls back to the customer's address on file.

        Raises:
            InvalidInputError: A required field is missing; nothing is written
        """
        form = dict(form)
        if not (form.get("job_address") or "").strip() and form.get("customer_id"):
            try:
                customer = await self.store.customers.get_customer(form["customer_id"])
            except RecordNotFoundError as e:
                raise InvalidInputError("Select a customer", fields=["customer_id"]) from e
            form["job_address"] = customer.address or ""

        job = validate_form(JobIn, form, "Fill in all required fields")
        return await self.store.jobs.create_job(job.model_dump(mode="json"))

    async def update_job_details(self, job_id: str, changes: Dict[str, Any]) -> Job:
        """Edit job fields other than status; status changes go through the lifecycle"""
        details = validate_form(JobDetailsIn, changes, "Only job details can be edited here")
        payload = details.model_dump(mode="json", exclude_unset=True)
        if not payload:
            raise InvalidInputError("Nothing to update")
        return await self.store.jobs.update_job(job_id, payload)
