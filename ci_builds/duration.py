"""Elapsed build time estimation."""

from collections.abc import Iterable

from ci_common.models import BuildStatus, Job, JobStatus


def completed_span(jobs: Iterable[Job]) -> float | None:
    """Longest end-minus-start over jobs carrying both timestamps."""
    spans = [
        job.end_time - job.start_time
        for job in jobs
        if job.start_time is not None and job.end_time is not None
    ]
    return max(spans) if spans else None


def elapsed_running(jobs: Iterable[Job], current_time: float) -> float | None:
    """Time since the earliest running job started."""
    starts = [
        job.start_time
        for job in jobs
        if job.status == JobStatus.RUNNING and job.start_time is not None
    ]
    return current_time - min(starts) if starts else None


def estimate_duration(
    jobs: Iterable[Job], status: BuildStatus, current_time: float
) -> float | None:
    """
    Estimate how long a build has taken, in seconds.

    Finished builds report their longest completed job. A running build
    reports the longer of its longest completed job and the time its oldest
    running job has been going, and reports nothing unless both are known.

    Args:
        jobs: Jobs belonging to the build
        status: Status already derived from the same jobs
        current_time: Reference "now" in epoch seconds

    Returns:
        Duration in seconds, or None when it cannot be computed
    """
    jobs = list(jobs)
    span = completed_span(jobs)
    if status != BuildStatus.RUNNING:
        return span

    running = elapsed_running(jobs, current_time)
    if span is None or running is None:
        return None
    return max(span, running)
