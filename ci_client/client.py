"""
Build source backed by the CI server's retrieval endpoint.
"""

from typing import Any

from ci_common.errors import TransportError
from ci_common.models import BuildFilter
from ci_common.repository import BuildSource, Transport

from .transport import HTTPTransport


def builds_url(
    server_url: str, limit: int, offset: int, build_filter: BuildFilter, user_id: int
) -> str:
    """URL of one page of builds on the retrieval endpoint."""
    return (
        f"{server_url.rstrip('/')}/builds/limit/{limit}/offset/{offset}"
        f"/{BuildFilter(build_filter).value}/{user_id}"
    )


class HTTPBuildSource(BuildSource):
    """
    Reads raw ingestion records from `GET /builds/limit/.../offset/...`.

    The endpoint answers with `{"data": [record, ...]}`.
    """

    def __init__(
        self, server_url: str = "http://localhost:8000", transport: Transport | None = None
    ):
        """
        Initialize the source.

        Args:
            server_url: Base URL of the CI server
            transport: HTTP client (an HTTPTransport is created if omitted)
        """
        self.server_url = server_url
        self._owns_transport = transport is None
        self.transport = transport or HTTPTransport()

    async def fetch_page(
        self, limit: int, offset: int, build_filter: BuildFilter, user_id: int
    ) -> list[Any]:
        url = builds_url(self.server_url, limit, offset, build_filter, user_id)
        response = await self.transport.get_json(url)
        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, list):
            raise TransportError(f"Unexpected response shape from {url}", url)
        return data

    async def close(self) -> None:
        if self._owns_transport:
            self.transport.close()
