"""
Assembly of canonical builds from raw ingestion records.

The builder runs the synchronous extraction steps (identity, status,
duration, provider payload), awaits any enrichment the provider asked for,
and constructs the immutable Build.
"""

import logging
from collections.abc import Mapping
from typing import Any

from ci_common.models import Build, RawIngestionRecord

from .duration import estimate_duration
from .enrichment import EnrichmentClient
from .identity import extract_identity
from .providers import get_normalizer
from .status import aggregate_status

logger = logging.getLogger(__name__)


class BuildAggregateBuilder:
    """Turns one raw ingestion record into one canonical Build."""

    def __init__(self, enrichment: EnrichmentClient | None = None):
        """
        Initialize the builder.

        Args:
            enrichment: Client for profile lookups. Without one, pending
                        lookups are skipped and their fields stay unset.
        """
        self.enrichment = enrichment

    async def build(
        self, record: RawIngestionRecord | Mapping[str, Any], current_time: float
    ) -> Build:
        """
        Normalize a record into a Build.

        Args:
            record: Parsed record, or the raw document served by the backing store
            current_time: Reference "now" in epoch seconds, for running builds

        Returns:
            The canonical build; its id is always the record's id

        Raises:
            UnsupportedProviderError: If the record's provider cannot be normalized
            MalformedPayloadError: If the record lacks a required structural field
        """
        if not isinstance(record, RawIngestionRecord):
            record = RawIngestionRecord.from_dict(record)

        normalizer = get_normalizer(record.provider, record.id)
        identity = extract_identity(record)
        status = aggregate_status(record.jobs)
        duration = estimate_duration(record.jobs, status, current_time)

        normalized = normalizer.normalize(record, identity)
        extract = normalized.extract
        if normalized.pending:
            if self.enrichment is not None:
                extract = await self.enrichment.enrich(extract, normalized.pending)
            else:
                logger.debug(f"Record {record.id}: no enrichment client, skipping lookup")

        return Build(
            id=record.id,
            repository_name=identity.repository_name,
            status=status,
            provider=record.provider,
            pr=identity.pr,
            branch=identity.branch,
            commit_sha=identity.commit_sha,
            tag=identity.tag,
            display_name=extract.display_name,
            author_avatar_url=extract.author_avatar_url,
            committer_avatar_url=extract.committer_avatar_url,
            commit_message=extract.commit_message,
            build_duration_seconds=duration,
            date_time=extract.date_time or identity.date_time,
        )
