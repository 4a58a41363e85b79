"""
Best-effort profile lookups for builds.

Some webhook payloads only name a user without giving an avatar or display
name. The enrichment client fills those gaps from the provider's user
endpoint. A failed lookup leaves the field unset; it is never retried and
never fails the build.
"""

import dataclasses
import logging
from collections.abc import Sequence
from urllib.parse import quote

from ci_common.errors import TransportError
from ci_common.models import EnrichmentRequest, Profile, ProviderExtract
from ci_common.repository import Transport

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_API_URL = "https://api.github.com"

# Extract field filled by a lookup -> Profile attribute it is read from
PROFILE_FIELDS = {
    "author_avatar_url": "avatar_url",
    "display_name": "display_name",
}


class EnrichmentClient:
    """
    Resolves pending profile lookups declared by provider normalizers.

    At most one lookup is made per build.
    """

    def __init__(self, transport: Transport, api_url: str = DEFAULT_GITHUB_API_URL):
        """
        Initialize the enrichment client.

        Args:
            transport: HTTP client used for the user endpoint
            api_url: Base URL of the GitHub-shaped API
        """
        self.transport = transport
        self.api_url = api_url.rstrip("/")

    async def fetch_profile(self, username: str) -> Profile:
        """
        Fetch a user's profile.

        Args:
            username: Provider login of the user

        Returns:
            Profile with avatar URL and display name (either may be None)

        Raises:
            TransportError: If the lookup fails or returns a non-object
        """
        url = f"{self.api_url}/users/{quote(username, safe='')}"
        data = await self.transport.get_json(url)
        if not isinstance(data, dict):
            raise TransportError(f"unexpected profile response for {username}", url)
        return Profile.from_dict(data)

    async def enrich(
        self, extract: ProviderExtract, pending: Sequence[EnrichmentRequest]
    ) -> ProviderExtract:
        """
        Complete an extract with the result of its pending lookup.

        Args:
            extract: Extract produced by a provider normalizer
            pending: Lookups the normalizer declared

        Returns:
            A new extract with the looked-up field set, or the original
            extract if there was nothing to do or the lookup failed
        """
        if not pending:
            return extract

        request, *skipped = pending
        if skipped:
            logger.warning(
                f"Ignoring {len(skipped)} extra profile lookup(s), "
                f"only {request.username} is fetched"
            )

        attribute = PROFILE_FIELDS.get(request.field)
        if attribute is None:
            logger.warning(f"Cannot enrich unknown field {request.field!r}")
            return extract

        try:
            profile = await self.fetch_profile(request.username)
        except Exception as e:
            logger.warning(f"Profile lookup for {request.username} failed: {e}")
            return extract

        value = getattr(profile, attribute)
        if value is None:
            logger.debug(f"Profile of {request.username} has no {attribute}")
            return extract
        return dataclasses.replace(extract, **{request.field: value})
