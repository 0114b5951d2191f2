from __future__ import annotations

import httpx

from ..settings import Settings
from .common import MappingProvider


class ArmProvider(MappingProvider):
    """anime-relations mapping (arm.haglund.dev); public, no key required."""

    name = "arm"

    def __init__(self, config: Settings, client: httpx.AsyncClient) -> None:
        super().__init__(client)
        self._base_url = config.arm_api_url.rstrip("/")

    def _request(self, catalog_id: str) -> httpx.Request:
        return self._client.build_request(
            "GET",
            f"{self._base_url}/api/v2/ids",
            params={"source": "myanimelist", "id": catalog_id},
            headers={"Content-Type": "application/json"},
        )
