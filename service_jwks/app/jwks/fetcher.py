"""
Fetcher for upstream JSON Web Key Sets.
"""

from __future__ import annotations

import httpx
from pydantic import ValidationError

from shared.errors import DecodeFailedError, FetchFailedError
from shared.logging import get_logger

from ..models import JWKS, KeySet
from ..sources.registry import SourceDescriptor


class JWKSFetcher:
    """Retrieves and decodes one publisher's key set per call.

    The fetcher holds no cache and never retries: the next scheduled
    refresh is the retry mechanism.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client
        self.logger = get_logger("jwks.fetcher")

    async def fetch(self, descriptor: SourceDescriptor) -> KeySet:
        """Return the decoded key set for `descriptor`.

        Raises FetchFailedError on transport problems (connection, timeout,
        non-2xx, body read) and DecodeFailedError when the body is not a
        `{"keys": [...]}` document.
        """
        try:
            response = await self._client.get(descriptor.url)
            response.raise_for_status()
            body = response.content
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchFailedError(descriptor.source_id, exc) from exc

        try:
            document = JWKS.model_validate_json(body)
        except ValidationError as exc:
            raise DecodeFailedError(descriptor.source_id, exc) from exc

        self.logger.debug(
            "JWKS fetched",
            source=descriptor.source_id,
            keys_count=len(document.keys),
        )
        return document.keys
