"""
Paginated build retrieval.

The orchestrator owns the in-memory build list. Each call to
fetch_next_page() pulls one page of raw records from the build source,
normalizes every record concurrently, and appends the page to the list in
descending id order.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from ci_common.errors import RecordError
from ci_common.models import Build, BuildFilter, PageResult, RecordFailure
from ci_common.repository import BuildSource

from .builder import BuildAggregateBuilder

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5


class BuildFetchOrchestrator:
    """
    Pages through builds and keeps the normalized results in order.

    A page either completes as a unit or leaves the list untouched. Records
    that fail to normalize are dropped from their page and reported in
    `failures`; they never affect the other records of the page.
    """

    def __init__(
        self,
        source: BuildSource,
        builder: BuildAggregateBuilder | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        build_filter: BuildFilter = BuildFilter.ALL,
        subject_user_id: int = 1,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the orchestrator.

        Args:
            source: Backing store serving raw ingestion records
            builder: Builder used for every record
            page_size: Number of records requested per page
            build_filter: Which builds to request
            subject_user_id: User whose builds are requested
            clock: Returns the current time in epoch seconds
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self.source = source
        self.builder = builder or BuildAggregateBuilder()
        self.page_size = page_size
        self.filter = BuildFilter(build_filter)
        self.subject_user_id = subject_user_id
        self.clock = clock

        self.items: list[Build] = []
        self.failures: list[RecordFailure] = []
        self.offset = 0
        self.fetching = False
        self.has_more = True

    def reset(
        self,
        build_filter: BuildFilter | None = None,
        subject_user_id: int | None = None,
    ) -> None:
        """
        Drop all fetched builds and start again from the first page.

        Args:
            build_filter: Optionally switch to another filter
            subject_user_id: Optionally switch to another user

        Raises:
            RuntimeError: If a page is currently being fetched
        """
        if self.fetching:
            raise RuntimeError("Cannot reset while a page is being fetched")

        if build_filter is not None:
            self.filter = BuildFilter(build_filter)
        if subject_user_id is not None:
            self.subject_user_id = subject_user_id

        self.items = []
        self.failures = []
        self.offset = 0
        self.has_more = True

    async def fetch_next_page(self) -> PageResult | None:
        """
        Fetch, normalize and append the next page of builds.

        Returns:
            The page's builds and failures, or None if a page is already
            being fetched (the call is ignored rather than queued). Once the
            final page has been fetched, an empty result is returned.

        Raises:
            TransportError: If the page cannot be retrieved. The list and
                            offset are left unchanged so the call can be retried.
        """
        if self.fetching:
            logger.debug("Page fetch already in progress, ignoring request")
            return None
        if not self.has_more:
            # The final page was already appended; reset() starts over.
            logger.debug("No more pages to fetch")
            return PageResult(has_more=False)

        self.fetching = True
        try:
            logger.debug(
                f"Fetching builds: limit={self.page_size} offset={self.offset} "
                f"filter={self.filter.value} user={self.subject_user_id}"
            )
            records = await self.source.fetch_page(
                self.page_size, self.offset, self.filter, self.subject_user_id
            )
            current_time = self.clock()

            results = await asyncio.gather(
                *(self._build_isolated(record, current_time) for record in records)
            )

            builds = [r for r in results if isinstance(r, Build)]
            failures = [r for r in results if isinstance(r, RecordFailure)]
            builds.sort(key=lambda build: build.id, reverse=True)

            self.items.extend(builds)
            self.failures = failures
            self.has_more = len(records) == self.page_size
            if self.has_more:
                self.offset += self.page_size

            logger.info(
                f"Fetched page: {len(builds)} builds, {len(failures)} failed, "
                f"has_more={self.has_more}"
            )
            return PageResult(builds=builds, failures=failures, has_more=self.has_more)
        finally:
            self.fetching = False

    async def _build_isolated(
        self, record: Any, current_time: float
    ) -> Build | RecordFailure:
        """Build one record, converting any failure into a RecordFailure."""
        record_id = record.get("id") if isinstance(record, Mapping) else None
        try:
            return await self.builder.build(record, current_time)
        except RecordError as e:
            if e.record_id is not None:
                record_id = e.record_id
            logger.warning(f"Skipping build record {record_id}: {e}")
            return RecordFailure(record_id=record_id, error=e)
        except Exception as e:
            logger.error(f"Error building record {record_id}: {e}", exc_info=True)
            return RecordFailure(record_id=record_id, error=e)
