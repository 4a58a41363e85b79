"""
Error taxonomy for build retrieval and normalization.

Transport errors fail a whole page (or, for enrichment, are absorbed).
Record errors fail a single record and never the page it belongs to.
"""

from typing import Any


class BuildsError(Exception):
    """Base class for all errors raised by the build engine."""


class TransportError(BuildsError):
    """Network or HTTP failure talking to the backing store or a provider."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class RecordError(BuildsError):
    """A single ingestion record could not be turned into a build."""

    def __init__(self, message: str, record_id: Any = None):
        super().__init__(message)
        self.record_id = record_id


class UnsupportedProviderError(RecordError):
    """The record was produced by a provider that cannot be normalized."""

    def __init__(self, provider: Any, record_id: Any = None):
        super().__init__(f"unsupported provider {provider!r}", record_id)
        self.provider = provider


class MalformedPayloadError(RecordError):
    """The record lacks a structural field required for normalization."""
