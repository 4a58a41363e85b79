"""Build status aggregation from job states."""

from collections.abc import Iterable

from ci_common.models import BuildStatus, Job, JobStatus


def aggregate_status(jobs: Iterable[Job]) -> BuildStatus:
    """
    Derive a build's status from its jobs.

    Rules are applied in a fixed order and the last one that matches wins:
    queued by default, running if any job runs, failed if any job failed,
    passed if every job succeeded. An empty job list is queued.
    """
    statuses = [job.status for job in jobs]

    status = BuildStatus.QUEUED
    if JobStatus.RUNNING in statuses:
        status = BuildStatus.RUNNING
    if JobStatus.FAILED in statuses:
        status = BuildStatus.FAILED
    if statuses and all(s == JobStatus.SUCCESS for s in statuses):
        status = BuildStatus.PASSED
    return status
