"""
Commit identity extraction shared by every provider.

Webhook payloads disagree on where the commit sha, ref and repository name
live, so each field is looked up through an ordered list of candidate paths
and the first one present wins.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from ci_common.errors import MalformedPayloadError
from ci_common.models import IdentityFields, RawIngestionRecord

TAG_REF_PREFIX = "refs/tags/"


def dig(document: Any, *path: str | int) -> Any:
    """
    Follow a path of keys and list indices into a JSON document.

    Negative indices count from the end. Returns None as soon as a step is
    missing or the value at that step has the wrong shape.
    """
    current = document
    for step in path:
        if isinstance(step, int):
            if (
                not isinstance(current, Sequence)
                or isinstance(current, str)
                or not -len(current) <= step < len(current)
            ):
                return None
            current = current[step]
        else:
            if not isinstance(current, Mapping):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def first_present(document: Any, *paths: tuple[str | int, ...]) -> Any:
    """Return the value of the first path that resolves to a truthy value."""
    for path in paths:
        value = dig(document, *path)
        if value:
            return value
    return None


def extract_commit_sha(payload: Mapping[str, Any]) -> str | None:
    """
    Pick the commit sha of a payload.

    Candidates in priority order: pull request head, push "after", plain
    commit sha, merge request last commit, Bitbucket push change, Bitbucket
    pull request source, pull request source, commit id.
    """
    sha = dig(payload, "pull_request", "head", "sha")
    if sha:
        return sha
    if not payload.get("pull_request") and payload.get("after"):
        return payload["after"]
    return first_present(
        payload,
        ("sha",),
        ("object_attributes", "last_commit", "id"),
        ("push", "changes", 0, "commits", 0, "hash"),
        ("pullrequest", "source", "commit", "hash"),
        ("pull_request", "source", "commit", "hash"),
        ("commit", "id"),
    )


def extract_tag(payload: Mapping[str, Any]) -> str | None:
    """Tag name when the payload's ref points at a tag."""
    ref = payload.get("ref")
    if isinstance(ref, str) and ref.startswith(TAG_REF_PREFIX):
        return ref[len(TAG_REF_PREFIX) :]
    return None


def extract_repository_name(record: RawIngestionRecord) -> str:
    """
    Name of the repository the record belongs to.

    Raises:
        MalformedPayloadError: If neither the record nor its payload name one,
            or the name is not a string
    """
    name = dig(record.repository, "full_name") or first_present(
        record.payload, ("repository", "full_name"), ("repository", "name")
    )
    if not name:
        raise MalformedPayloadError("missing repository identity", record.id)
    if not isinstance(name, str):
        raise MalformedPayloadError(f"invalid repository identity {name!r}", record.id)
    return name


def extract_date_time(payload: Mapping[str, Any]) -> str | None:
    """Timestamp of the change that triggered the build, as sent."""
    return first_present(
        payload,
        ("pull_request", "updated_at"),
        ("commit", "author", "date"),
        ("commits", -1, "timestamp"),
        ("head_commit", "timestamp"),
    )


def extract_identity(record: RawIngestionRecord) -> IdentityFields:
    """Build the identity fields of a record in one pass."""
    payload = record.payload
    return IdentityFields(
        repository_name=extract_repository_name(record),
        commit_sha=extract_commit_sha(payload),
        branch=record.branch,
        tag=extract_tag(payload),
        pr=record.pr,
        date_time=extract_date_time(payload),
    )
