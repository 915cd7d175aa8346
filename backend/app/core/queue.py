"""RQ queues for background term mining."""

from typing import Any
from uuid import UUID

from rq import Queue
from rq.exceptions import NoSuchJobError
from rq.job import Job

from app.core.redis import get_redis

# Queue instances by name, created on first use
_queues: dict[str, Queue] = {}

QUEUE_NAMES = {
    "term_mining": "term_mining",
}

DEFAULT_JOB_TIMEOUT = 600


def get_queue(name: str = "default") -> Queue:
    """Return the named queue, bound to the shared Redis connection."""
    queue = _queues.get(name)
    if queue is None:
        queue = Queue(name=name, connection=get_redis())
        _queues[name] = queue
    return queue


def enqueue_job(
    func: Any,
    *args: Any,
    queue_name: str = "default",
    job_timeout: int = DEFAULT_JOB_TIMEOUT,
    job_id: str | UUID | None = None,
    **kwargs: Any,
) -> Job:
    """Put a function call on a queue.

    Args:
        func: Importable job function, e.g. mine_document_terms.
        *args: Positional arguments passed to the job.
        queue_name: Target queue.
        job_timeout: Seconds before RQ kills the job.
        job_id: Explicit job id; RQ generates one when omitted.
        **kwargs: Keyword arguments passed to the job.

    Returns:
        The enqueued RQ Job.
    """
    return get_queue(queue_name).enqueue(
        func,
        *args,
        job_timeout=job_timeout,
        job_id=None if job_id is None else str(job_id),
        **kwargs,
    )


def get_job(job_id: str | UUID) -> Job | None:
    """Fetch a job by id, None when Redis no longer knows it."""
    try:
        return Job.fetch(str(job_id), connection=get_redis())
    except NoSuchJobError:
        return None


def get_job_status(job_id: str | UUID) -> str | None:
    """Status of a job (queued, started, finished, failed), None if unknown."""
    job = get_job(job_id)
    if job is None:
        return None
    status = job.get_status()
    if status is None:
        return None
    return getattr(status, "value", status)


def get_job_result(job_id: str | UUID) -> Any:
    """Return value of a finished job, None while pending or when unknown."""
    job = get_job(job_id)
    if job is None:
        return None
    return job.result


def clear_queues() -> None:
    """Empty every queue created by this process and forget them."""
    for queue in _queues.values():
        queue.empty()
    _queues.clear()

