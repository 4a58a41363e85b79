"""
Runtime configuration for build retrieval.

Environment Variables:
    CI_SERVER_URL: Base URL of the build backing store (default: http://localhost:8000)
    CI_GITHUB_API_URL: Base URL for profile lookups (default: https://api.github.com)
    CI_PAGE_SIZE: Builds requested per page (default: 5)
    CI_USER_ID: User whose builds are listed (default: 1)
    CI_BUILD_FILTER: "all", "pr" or "commits" (default: all)
    CI_HTTP_TIMEOUT: Seconds before an HTTP request is abandoned (default: 30.0)
"""

import logging
import os
from dataclasses import dataclass

from ci_common.models import BuildFilter

from .enrichment import DEFAULT_GITHUB_API_URL
from .orchestrator import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:8000"
DEFAULT_USER_ID = 1
DEFAULT_HTTP_TIMEOUT = 30.0


@dataclass(frozen=True)
class BuildsConfig:
    """Settings shared by the CLI and anything embedding the engine."""

    server_url: str = DEFAULT_SERVER_URL
    github_api_url: str = DEFAULT_GITHUB_API_URL
    page_size: int = DEFAULT_PAGE_SIZE
    user_id: int = DEFAULT_USER_ID
    build_filter: BuildFilter = BuildFilter.ALL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def get_server_url() -> str:
    """
    Get the backing store URL from environment or use default.

    Returns:
        Server URL without a trailing slash
    """
    return os.environ.get("CI_SERVER_URL", DEFAULT_SERVER_URL).rstrip("/")


def get_github_api_url() -> str:
    """Get the profile lookup API URL from environment or use default."""
    return os.environ.get("CI_GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/")


def get_page_size() -> int:
    """
    Get the page size from environment.

    Returns:
        Positive page size, or the default if the variable is invalid
    """
    raw = os.environ.get("CI_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))
    try:
        page_size = int(raw)
    except ValueError:
        logger.warning(f"Invalid CI_PAGE_SIZE={raw}, using default {DEFAULT_PAGE_SIZE}")
        return DEFAULT_PAGE_SIZE
    if page_size <= 0:
        logger.warning(
            f"Invalid CI_PAGE_SIZE={page_size}, using default {DEFAULT_PAGE_SIZE}"
        )
        return DEFAULT_PAGE_SIZE
    return page_size


def get_user_id() -> int:
    """Get the subject user ID from environment."""
    raw = os.environ.get("CI_USER_ID", str(DEFAULT_USER_ID))
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid CI_USER_ID={raw}, using default {DEFAULT_USER_ID}")
        return DEFAULT_USER_ID


def get_build_filter() -> BuildFilter:
    """Get the build filter from environment."""
    raw = os.environ.get("CI_BUILD_FILTER", BuildFilter.ALL.value)
    try:
        return BuildFilter(raw.lower())
    except ValueError:
        logger.warning(f"Invalid CI_BUILD_FILTER={raw}, using default 'all'")
        return BuildFilter.ALL


def get_http_timeout() -> float:
    """
    Get the HTTP timeout from environment.

    Returns:
        Positive timeout in seconds, or the default if the variable is invalid
    """
    raw = os.environ.get("CI_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning(
            f"Invalid CI_HTTP_TIMEOUT={raw}, using default {DEFAULT_HTTP_TIMEOUT}"
        )
        return DEFAULT_HTTP_TIMEOUT
    if timeout <= 0:
        logger.warning(
            f"Invalid CI_HTTP_TIMEOUT={timeout}, using default {DEFAULT_HTTP_TIMEOUT}"
        )
        return DEFAULT_HTTP_TIMEOUT
    return timeout


def load_config() -> BuildsConfig:
    """Build the configuration from the environment."""
    return BuildsConfig(
        server_url=get_server_url(),
        github_api_url=get_github_api_url(),
        page_size=get_page_size(),
        user_id=get_user_id(),
        build_filter=get_build_filter(),
        http_timeout=get_http_timeout(),
    )
