"""
Abstract source interface for raw ingestion records.

This module defines the contract that any backing store must follow,
allowing the fetch orchestrator to page through builds served over HTTP,
read from a fixture file, or faked in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Protocol

from .models import BuildFilter


class BuildSource(ABC):
    """
    Abstract base class for paginated retrieval of raw build documents.

    Implementations return the documents as the backing store serves them;
    parsing and validation happen per record during normalization.
    """

    @abstractmethod
    async def fetch_page(
        self, limit: int, offset: int, build_filter: BuildFilter, user_id: int
    ) -> list[Any]:
        """
        Fetch one page of raw ingestion records.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            build_filter: Which builds to include ("all", "pr" or "commits")
            user_id: User whose builds are requested

        Returns:
            List of raw record documents, at most `limit` long

        Raises:
            TransportError: If the records cannot be retrieved
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the source."""
        pass


class Transport(Protocol):
    """Minimal asynchronous HTTP client used for JSON endpoints."""

    async def get_json(self, url: str) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            TransportError: On network failure, non-2xx status or invalid JSON
        """
        ...
