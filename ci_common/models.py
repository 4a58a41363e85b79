"""
Data models for CI build normalization.

These models represent the domain objects used throughout the application,
independent of the provider that produced the webhook payload and of the
backing store that served it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .errors import MalformedPayloadError, UnsupportedProviderError


class JobStatus(str, Enum):
    """Status reported by the CI executor for a single job."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class BuildStatus(str, Enum):
    """Lifecycle status of a build, derived from its jobs."""

    QUEUED = "queued"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


class Provider(str, Enum):
    """Integration that produced a webhook payload."""

    GITHUB = "github"
    BITBUCKET = "bitbucket"
    GITLAB = "gitlab"
    GOGS = "gogs"


class BuildFilter(str, Enum):
    """Subset of builds requested from the retrieval endpoint."""

    ALL = "all"
    PR = "pr"
    COMMITS = "commits"


def parse_timestamp(value: Any, record_id: Any = None) -> float | None:
    """
    Convert a raw timestamp into seconds since the epoch.

    Numbers are taken as epoch seconds. Strings are parsed as ISO-8601,
    with a trailing "Z" accepted; naive values are assumed to be UTC.

    Raises:
        MalformedPayloadError: If the value cannot be interpreted
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedPayloadError(f"invalid timestamp {value!r}", record_id)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise MalformedPayloadError(f"invalid timestamp {value!r}", record_id)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt.timestamp()
    raise MalformedPayloadError(f"invalid timestamp {value!r}", record_id)


@dataclass(frozen=True)
class Job:
    """
    Represents one job execution belonging to a build.

    Jobs are produced by the CI executor and never change once received.
    """

    status: JobStatus
    start_time: float | None = None  # Epoch seconds
    end_time: float | None = None  # Epoch seconds

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], record_id: Any = None) -> "Job":
        """Create job from a backing-store job document."""
        try:
            status = JobStatus(data.get("status"))
        except ValueError:
            raise MalformedPayloadError(
                f"unknown job status {data.get('status')!r}", record_id
            )
        return cls(
            status=status,
            start_time=parse_timestamp(data.get("start_time"), record_id),
            end_time=parse_timestamp(data.get("end_time"), record_id),
        )


def parse_pr_number(value: Any, record_id: Any = None) -> int | None:
    """
    Read a pull request number.

    Integers and digit strings are accepted; empty values mean "no pull
    request".

    Raises:
        MalformedPayloadError: For any other value
    """
    if isinstance(value, bool):
        raise MalformedPayloadError(f"invalid pull request number {value!r}", record_id)
    if value is None or value == "" or value == 0:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip()) or None
    raise MalformedPayloadError(f"invalid pull request number {value!r}", record_id)


def resolve_provider(document: Mapping[str, Any], record_id: Any = None) -> Provider:
    """
    Read the provider tag of a backing-store document.

    The top-level "provider" field wins; older documents only carry the tag
    on the embedded repository as "repository_provider".

    Raises:
        UnsupportedProviderError: If the tag is missing or not a known provider
    """
    tag = document.get("provider")
    if tag is None:
        repository = document.get("repository")
        if isinstance(repository, Mapping):
            tag = repository.get("repository_provider")
    try:
        return Provider(tag)
    except ValueError:
        raise UnsupportedProviderError(tag, record_id)


@dataclass(frozen=True)
class RawIngestionRecord:
    """
    A build as stored by the ingestion service, before normalization.

    The payload is the provider-shaped webhook document, kept opaque here.
    """

    id: int
    provider: Provider
    jobs: tuple[Job, ...]
    payload: Mapping[str, Any]
    pr: int | None = None
    branch: str | None = None
    repository: Mapping[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "RawIngestionRecord":
        """
        Create record from a backing-store document.

        Raises:
            MalformedPayloadError: If a required structural field is missing
            UnsupportedProviderError: If the provider tag is unknown
        """
        if not isinstance(data, Mapping):
            raise MalformedPayloadError("record is not an object")

        record_id = data.get("id")
        if isinstance(record_id, bool) or not isinstance(record_id, int):
            raise MalformedPayloadError(f"invalid record id {record_id!r}", record_id)

        raw_jobs = data.get("jobs")
        if not isinstance(raw_jobs, list) or not all(
            isinstance(job, Mapping) for job in raw_jobs
        ):
            raise MalformedPayloadError("missing jobs array", record_id)

        payload = data.get("data", data.get("payload"))
        if not isinstance(payload, Mapping):
            raise MalformedPayloadError("missing payload", record_id)

        repository = data.get("repository")
        if repository is not None and not isinstance(repository, Mapping):
            raise MalformedPayloadError("repository is not an object", record_id)

        branch = data.get("branch")
        if branch is not None and not isinstance(branch, str):
            raise MalformedPayloadError(f"invalid branch {branch!r}", record_id)

        return cls(
            id=record_id,
            provider=resolve_provider(data, record_id),
            jobs=tuple(Job.from_dict(job, record_id) for job in raw_jobs),
            payload=payload,
            pr=parse_pr_number(data.get("pr"), record_id),
            branch=branch or None,
            repository=repository,
        )


@dataclass(frozen=True)
class IdentityFields:
    """Commit identity of a build, extracted once per record."""

    repository_name: str
    commit_sha: str | None = None
    branch: str | None = None
    tag: str | None = None
    pr: int | None = None
    date_time: str | None = None


@dataclass(frozen=True)
class ProviderExtract:
    """Presentation fields pulled out of a provider payload."""

    display_name: str | None = None
    commit_message: str | None = None
    author_avatar_url: str | None = None
    committer_avatar_url: str | None = None
    date_time: str | None = None


@dataclass(frozen=True)
class EnrichmentRequest:
    """
    A pending profile lookup declared by a provider normalizer.

    The looked-up profile fills exactly one ProviderExtract field.
    """

    username: str
    field: str  # "author_avatar_url" or "display_name"


@dataclass(frozen=True)
class NormalizedPayload:
    """Result of the synchronous normalization phase."""

    extract: ProviderExtract
    pending: tuple[EnrichmentRequest, ...] = ()


@dataclass(frozen=True)
class Profile:
    """User profile returned by a provider's user endpoint."""

    avatar_url: str | None = None
    display_name: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Profile":
        """Create profile from a GitHub-shaped user document."""
        return cls(avatar_url=data.get("avatar_url"), display_name=data.get("name"))


@dataclass(frozen=True)
class Build:
    """
    Canonical, provider-agnostic build.

    Constructed once per RawIngestionRecord and never mutated; refreshing
    means re-fetching and rebuilding.
    """

    id: int
    repository_name: str
    status: BuildStatus
    provider: Provider
    pr: int | None = None
    branch: str | None = None
    commit_sha: str | None = None
    tag: str | None = None
    display_name: str | None = None
    author_avatar_url: str | None = None
    committer_avatar_url: str | None = None
    commit_message: str | None = None
    build_duration_seconds: float | None = None
    date_time: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert build to dictionary format (for JSON output)."""
        return {
            "id": self.id,
            "pr": self.pr,
            "repository_name": self.repository_name,
            "branch": self.branch,
            "commit_sha": self.commit_sha,
            "tag": self.tag,
            "display_name": self.display_name,
            "author_avatar_url": self.author_avatar_url,
            "committer_avatar_url": self.committer_avatar_url,
            "commit_message": self.commit_message,
            "build_duration_seconds": self.build_duration_seconds,
            "status": self.status.value,
            "provider": self.provider.value,
            "date_time": self.date_time,
        }


@dataclass(frozen=True)
class RecordFailure:
    """A record of a page that could not be normalized."""

    record_id: Any
    error: Exception


@dataclass(frozen=True)
class PageResult:
    """Outcome of fetching and normalizing one page."""

    builds: list[Build] = field(default_factory=list)
    failures: list[RecordFailure] = field(default_factory=list)
    has_more: bool = False
