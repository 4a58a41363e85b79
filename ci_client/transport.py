"""
HTTP transport for JSON endpoints.

Requests are made in a worker thread so that callers on the event loop never
block on network I/O. requests sessions are not safe to share between
threads, so each worker thread gets its own session.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Any

import requests

from ci_common.errors import TransportError

logger = logging.getLogger(__name__)


class HTTPTransport:
    """Asynchronous GET-and-decode-JSON client backed by requests."""

    def __init__(
        self,
        timeout: float = 30.0,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        """
        Initialize the transport.

        Args:
            timeout: Seconds before a request is abandoned
            session_factory: Creates the session used by each worker thread
        """
        self.timeout = timeout
        self.session_factory = session_factory
        self._local = threading.local()
        self._lock = threading.Lock()
        self._sessions: list[requests.Session] = []

    async def get_json(self, url: str) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            TransportError: On network failure, non-2xx status or invalid JSON
        """
        return await asyncio.to_thread(self._get_json, url)

    def session(self) -> requests.Session:
        """Session of the calling thread, created on first use."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self.session_factory()
            session.headers.setdefault("Accept", "application/json")
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def _get_json(self, url: str) -> Any:
        logger.debug(f"GET {url}")
        try:
            response = self.session().get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Error requesting {url}: {e}", url) from e
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {url}: {e}", url) from e

    def close(self) -> None:
        """Close every session created so far."""
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()
