"""
Provider-specific payload normalization.

Each provider has one normalizer that reads the presentation fields of its
webhook payloads (commit message, avatars, display name) and declares any
profile lookups it needs. Normalizers never perform I/O themselves; pending
lookups are resolved afterwards by the enrichment client.

Normalizers are registered in NORMALIZERS, keyed by provider. Supporting a
new provider means adding an entry there.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from ci_common.errors import UnsupportedProviderError
from ci_common.models import (
    EnrichmentRequest,
    IdentityFields,
    NormalizedPayload,
    Provider,
    ProviderExtract,
    RawIngestionRecord,
)

from .identity import dig, first_present

logger = logging.getLogger(__name__)


class ProviderNormalizer(ABC):
    """Extracts presentation fields from one provider's payloads."""

    supported = True

    @abstractmethod
    def normalize(
        self, record: RawIngestionRecord, identity: IdentityFields
    ) -> NormalizedPayload:
        """
        Read the provider payload of a record.

        Args:
            record: Parsed ingestion record
            identity: Identity fields already extracted from the record

        Returns:
            The extract plus any profile lookups still to perform

        Raises:
            UnsupportedProviderError: If the provider cannot be normalized
        """
        pass


class GitHubNormalizer(ProviderNormalizer):
    """
    Normalizer for GitHub payloads.

    Three payload shapes are handled: a plain commit (from the commits API),
    a push event and a pull request event. Push events only carry usernames
    for the commit author, so a differing author needs a profile lookup for
    its avatar; pull request events need one for the sender's display name.
    """

    def normalize(
        self, record: RawIngestionRecord, identity: IdentityFields
    ) -> NormalizedPayload:
        payload = record.payload
        message = self._commit_message(payload)

        if payload.get("sha"):
            extract = ProviderExtract(
                display_name=dig(payload, "commit", "committer", "name"),
                commit_message=message,
                author_avatar_url=dig(payload, "author", "avatar_url"),
                committer_avatar_url=dig(payload, "committer", "avatar_url"),
                date_time=identity.date_time,
            )
            return NormalizedPayload(extract)

        if isinstance(payload.get("head_commit"), Mapping):
            return self._normalize_push(payload, message, identity)

        if isinstance(payload.get("pull_request"), Mapping):
            sender_avatar = dig(payload, "sender", "avatar_url")
            extract = ProviderExtract(
                commit_message=message,
                author_avatar_url=sender_avatar,
                committer_avatar_url=sender_avatar,
                date_time=identity.date_time,
            )
            login = dig(payload, "sender", "login")
            pending = ()
            if login and isinstance(login, str):
                pending = (EnrichmentRequest(login, "display_name"),)
            return NormalizedPayload(extract, pending)

        logger.debug(f"Record {record.id}: GitHub payload carries no avatar data")
        return NormalizedPayload(
            ProviderExtract(commit_message=message, date_time=identity.date_time)
        )

    def _normalize_push(
        self, payload: Mapping[str, Any], message: str | None, identity: IdentityFields
    ) -> NormalizedPayload:
        commit = payload["head_commit"]
        committer_avatar = dig(payload, "sender", "avatar_url")
        author = dig(commit, "author", "username")
        committer = dig(commit, "committer", "username")

        if author and isinstance(author, str) and author != committer:
            extract = ProviderExtract(
                display_name=dig(commit, "author", "name"),
                commit_message=message,
                committer_avatar_url=committer_avatar,
                date_time=identity.date_time,
            )
            return NormalizedPayload(
                extract, (EnrichmentRequest(author, "author_avatar_url"),)
            )

        extract = ProviderExtract(
            display_name=dig(commit, "author", "name"),
            commit_message=message,
            author_avatar_url=committer_avatar,
            committer_avatar_url=committer_avatar,
            date_time=identity.date_time,
        )
        return NormalizedPayload(extract)

    @staticmethod
    def _commit_message(payload: Mapping[str, Any]) -> str | None:
        return first_present(
            payload,
            ("commit", "message"),
            ("commits", -1, "message"),
            ("pull_request", "title"),
            ("head_commit", "message"),
        )


class BitbucketNormalizer(ProviderNormalizer):
    """
    Normalizer for Bitbucket payloads.

    Push and pull request events both embed avatar links, so no profile
    lookup is ever needed.
    """

    def normalize(
        self, record: RawIngestionRecord, identity: IdentityFields
    ) -> NormalizedPayload:
        payload = record.payload
        author_avatar = dig(payload, "actor", "links", "avatar", "href")
        display_name = dig(payload, "actor", "display_name")

        if isinstance(payload.get("push"), Mapping):
            commit = dig(payload, "push", "changes", 0, "commits", 0)
            extract = ProviderExtract(
                display_name=display_name,
                commit_message=dig(commit, "message"),
                author_avatar_url=author_avatar,
                committer_avatar_url=dig(
                    commit, "author", "user", "links", "avatar", "href"
                ),
                date_time=dig(commit, "date") or identity.date_time,
            )
        elif isinstance(payload.get("pullrequest"), Mapping):
            pullrequest = payload["pullrequest"]
            extract = ProviderExtract(
                display_name=display_name,
                commit_message=dig(pullrequest, "description"),
                author_avatar_url=author_avatar,
                committer_avatar_url=dig(pullrequest, "author", "links", "avatar", "href"),
                date_time=dig(pullrequest, "updated_on") or identity.date_time,
            )
        else:
            extract = ProviderExtract(
                display_name=display_name,
                author_avatar_url=author_avatar,
                date_time=identity.date_time,
            )
        return NormalizedPayload(extract)


class UnsupportedNormalizer(ProviderNormalizer):
    """Placeholder for providers whose payloads are not parsed yet."""

    supported = False

    def __init__(self, provider: Provider):
        self.provider = provider

    def normalize(
        self, record: RawIngestionRecord, identity: IdentityFields
    ) -> NormalizedPayload:
        raise UnsupportedProviderError(self.provider.value, record.id)


NORMALIZERS: dict[Provider, ProviderNormalizer] = {
    Provider.GITHUB: GitHubNormalizer(),
    Provider.BITBUCKET: BitbucketNormalizer(),
    Provider.GITLAB: UnsupportedNormalizer(Provider.GITLAB),
    Provider.GOGS: UnsupportedNormalizer(Provider.GOGS),
}


def get_normalizer(provider: Provider, record_id: Any = None) -> ProviderNormalizer:
    """
    Look up the normalizer registered for a provider.

    Raises:
        UnsupportedProviderError: If no usable normalizer is registered
    """
    normalizer = NORMALIZERS.get(provider)
    if normalizer is None or not normalizer.supported:
        raise UnsupportedProviderError(getattr(provider, "value", provider), record_id)
    return normalizer
