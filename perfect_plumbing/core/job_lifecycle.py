"""
Job status lifecycle

Jobs move one step at a time along
draft -> quoted -> confirmed -> in_progress -> complete -> invoiced -> archived.
Starting a job stamps ``time_in``; finishing it stamps ``time_out`` and
works out ``total_hours``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..exceptions import InvalidInputError, InvalidTransitionError
from ..models import Job, JobStatus
from ..services.store import DataStore


logger = logging.getLogger(__name__)

VALID_TRANSITIONS: Dict[JobStatus, Tuple[JobStatus, ...]] = {
    JobStatus.DRAFT: (JobStatus.QUOTED,),
    JobStatus.QUOTED: (JobStatus.CONFIRMED,),
    JobStatus.CONFIRMED: (JobStatus.IN_PROGRESS,),
    JobStatus.IN_PROGRESS: (JobStatus.COMPLETE,),
    JobStatus.COMPLETE: (JobStatus.INVOICED,),
    JobStatus.INVOICED: (JobStatus.ARCHIVED,),
    JobStatus.ARCHIVED: (),
}

STATUS_LABELS: Dict[JobStatus, str] = {
    JobStatus.DRAFT: "Draft",
    JobStatus.QUOTED: "Quoted",
    JobStatus.CONFIRMED: "Confirmed",
    JobStatus.IN_PROGRESS: "In Progress",
    JobStatus.COMPLETE: "Complete",
    JobStatus.INVOICED: "Invoiced",
    JobStatus.ARCHIVED: "Archived",
}

# Primary action offered for a job in the given status
ACTION_LABELS: Dict[JobStatus, str] = {
    JobStatus.QUOTED: "Confirm Quote",
    JobStatus.CONFIRMED: "Start Job",
    JobStatus.IN_PROGRESS: "Job Done",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_status(status: Union[JobStatus, str]) -> Optional[JobStatus]:
    """The single successor of ``status``, or ``None`` when it is terminal"""
    successors = VALID_TRANSITIONS[JobStatus(status)]
    return successors[0] if successors else None


def can_transition(current: Union[JobStatus, str], target: Union[JobStatus, str]) -> bool:
    return JobStatus(target) in VALID_TRANSITIONS[JobStatus(current)]


def compute_total_hours(time_in: Optional[datetime], time_out: datetime) -> Optional[float]:
    """Elapsed hours between clock-in and clock-out, to two decimals"""
    if time_in is None:
        return None
    # timestamps without an offset are stored as UTC
    if time_in.tzinfo is None and time_out.tzinfo is not None:
        time_in = time_in.replace(tzinfo=timezone.utc)
    return round((time_out - time_in).total_seconds() / 3600, 2)


def build_transition_update(job: Job, target: Union[JobStatus, str], now: datetime) -> Dict[str, Any]:
    """
    Build the partial update that moves ``job`` to ``target``

    Raises:
        InvalidTransitionError: If ``target`` is not the job's next status
    """
    try:
        target = JobStatus(target)
    except ValueError as e:
        raise InvalidInputError(f"Unknown job status: {target}", fields=["status"]) from e
    if not can_transition(job.status, target):
        raise InvalidTransitionError(job.status.value, target.value)

    changes: Dict[str, Any] = {"status": target.value}
    if target == JobStatus.IN_PROGRESS:
        changes["time_in"] = now.isoformat()
    elif target == JobStatus.COMPLETE:
        changes["time_out"] = now.isoformat()
        total_hours = compute_total_hours(job.time_in, now)
        if total_hours is not None:
            changes["total_hours"] = total_hours
    return changes


class JobLifecycleController:
    """Applies status transitions and persists them"""

    def __init__(self, store: DataStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    async def transition(self, job: Job, target: Union[JobStatus, str]) -> Job:
        """
        Move ``job`` to ``target`` and persist the change

        The job passed in is left untouched; the updated record comes back
        from the backend. A rejected transition raises before any request,
        and a failed write propagates as ``BackendRequestError``.
        """
        changes = build_transition_update(job, target, self.clock())
        updated = await self.store.jobs.update_job(job.id, changes)
        logger.info(
            f"Job {job.id}: {job.status.value} -> {updated.status.value}",
            extra={"evt": "job_transition", "job_id": job.id, "status": updated.status.value},
        )
        if updated.customer is None and job.customer is not None:
            updated = updated.model_copy(update={"customer": job.customer})
        return updated

    async def advance(self, job: Job) -> Job:
        """Move ``job`` to its next status"""
        target = next_status(job.status)
        if target is None:
            raise InvalidTransitionError(job.status.value, "none")
        return await self.transition(job, target)
