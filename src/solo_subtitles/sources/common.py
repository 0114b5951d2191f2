"""Helpers shared by the ID-mapping providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..errors import ProviderError, ValidationError

log = logging.getLogger("solo_subtitles.sources")


def require_catalog_id(catalog_id: Any) -> str:
    if catalog_id is None or str(catalog_id).strip() == "":
        raise ValidationError("MAL ID is required", field="catalog_id")
    return str(catalog_id).strip()


class MappingProvider(ABC):
    """Base for providers translating a MyAnimeList id into other platform ids.

    Subclasses build the request; this class handles transport, the
    provider's 404 "no mapping" answer and JSON decoding. ``lookup`` returns
    ``None`` for a missing mapping and raises ``ProviderError`` for anything
    else that goes wrong.
    """

    name = "mapping"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @abstractmethod
    def _request(self, catalog_id: str) -> httpx.Request:
        """Build the lookup request for one MyAnimeList id."""

    async def lookup_all(self, catalog_id: Any) -> Optional[Dict[str, Any]]:
        """Return every platform id known for ``catalog_id`` or ``None``."""
        mal_id = require_catalog_id(catalog_id)
        request = self._request(mal_id)
        try:
            response = await self._client.send(request)
        except httpx.HTTPError as exc:
            raise ProviderError(f"{self.name} request failed: {exc}", provider=self.name) from exc

        if response.status_code == 404:
            log.info("No mapping found for MAL ID %s in %s", mal_id, self.name)
            return None
        if not response.is_success:
            raise ProviderError(
                f"{self.name} API error: {response.status_code} {response.reason_phrase}".strip(),
                provider=self.name,
                status=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(f"{self.name} returned invalid JSON", provider=self.name) from exc

        if data is None:
            return None
        if not isinstance(data, dict):
            raise ProviderError(f"{self.name} returned an unexpected payload", provider=self.name)
        return data

    async def lookup(self, catalog_id: Any) -> Optional[str]:
        """Return the IMDb id mapped to ``catalog_id`` or ``None``."""
        data = await self.lookup_all(catalog_id)
        imdb_id = (data or {}).get("imdb")
        if not imdb_id:
            log.info("No IMDb ID available for MAL ID %s in %s", catalog_id, self.name)
            return None
        return str(imdb_id)
