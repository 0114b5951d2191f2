from __future__ import annotations

import httpx

from ..errors import ConfigurationError
from ..settings import Settings
from .common import MappingProvider


class IdsMoeProvider(MappingProvider):
    """ids.moe mapping; every request needs ``IDS_MOE_API_KEY``."""

    name = "idsmoe"

    def __init__(self, config: Settings, client: httpx.AsyncClient) -> None:
        super().__init__(client)
        self._config = config
        self._base_url = config.ids_moe_api_url.rstrip("/")

    def _request(self, catalog_id: str) -> httpx.Request:
        api_key = self._config.ids_moe_api_key
        if not api_key:
            raise ConfigurationError("IDS_MOE_API_KEY is not configured", field="ids_moe_api_key")
        return self._client.build_request(
            "GET",
            f"{self._base_url}/ids/{catalog_id}",
            params={"platform": "mal"},
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )
