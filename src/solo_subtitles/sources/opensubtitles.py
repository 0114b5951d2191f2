from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from ..errors import AuthError, ConfigurationError, ProviderError, ValidationError
from ..metrics import DOWNLOAD_COUNT, LOGIN_COUNT, SEARCH_COUNT
from ..models import SessionToken, SubtitleCandidate
from ..settings import Settings
from ..srt import decode_subtitle_bytes
from ..token_cache import SessionTokenCache

log = logging.getLogger("solo_subtitles.sources.opensubtitles")

PROVIDER = "opensubtitles"

# Checked in this order so the error names the first missing variable.
REQUIRED_CREDENTIALS = (
    ("opensubtitles_api_key", "OPENSUBTITLES_API_KEY"),
    ("opensubtitles_useragent", "OPENSUBTITLES_USERAGENT"),
    ("opensubtitles_username", "OPENSUBTITLES_USERNAME"),
    ("opensubtitles_password", "OPENSUBTITLES_PASSWORD"),
)


def _numeric_imdb_id(raw_id: str) -> str:
    token = str(raw_id).strip()
    if token.lower().startswith("tt"):
        token = token[2:]
    return token


def _status_text(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def _candidates_from_payload(payload: Dict[str, Any]) -> List[SubtitleCandidate]:
    """Map search results to candidates; items without a usable file entry are skipped."""
    data = payload.get("data")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ProviderError("Search response has unexpected shape", provider=PROVIDER)

    candidates: List[SubtitleCandidate] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        attrs = item.get("attributes")
        if not isinstance(attrs, dict):
            continue
        files = attrs.get("files")
        if not isinstance(files, list) or not files or not isinstance(files[0], dict):
            continue
        file_entry = files[0]
        file_id = file_entry.get("file_id")
        if file_id is None or file_id == "":
            continue
        uploader = attrs.get("uploader")
        candidates.append(
            SubtitleCandidate(
                file_id=file_id,
                file_name=file_entry.get("file_name") or "",
                language=attrs.get("language"),
                download_count=attrs.get("download_count") or 0,
                rating=attrs.get("ratings") or 0,
                release=attrs.get("release") or "",
                uploader=(uploader.get("name") if isinstance(uploader, dict) else None) or "Unknown",
            )
        )
    return candidates


class OpenSubtitlesClient:
    """Async client for the OpenSubtitles REST API (v1).

    Search and download calls authenticate with a bearer token kept in a
    ``SessionTokenCache``; one client (and so one cache) is shared per
    process.
    """

    def __init__(
        self,
        config: Settings,
        *,
        client: Optional[httpx.AsyncClient] = None,
        token_cache: Optional[SessionTokenCache] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=config.request_timeout, follow_redirects=True)
        self._clock = clock
        self.token_cache = token_cache or SessionTokenCache(self.login, clock=clock)

    @property
    def base_url(self) -> str:
        return self._config.opensubtitles_api_url.rstrip("/")

    async def __aenter__(self) -> "OpenSubtitlesClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _require_credentials(self) -> None:
        for attr, env_name in REQUIRED_CREDENTIALS:
            if not getattr(self._config, attr):
                raise ConfigurationError(f"{env_name} is not configured", field=attr)

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Api-Key": self._config.opensubtitles_api_key or "",
            "User-Agent": self._config.opensubtitles_useragent or "",
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def login(self) -> SessionToken:
        """Exchange the configured credentials for a session token."""
        self._require_credentials()
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        body = {
            "username": self._config.opensubtitles_username,
            "password": self._config.opensubtitles_password,
        }
        try:
            response = await self._client.post(f"{self.base_url}/login", headers=headers, json=body)
        except httpx.HTTPError as exc:
            LOGIN_COUNT.labels(outcome="error").inc()
            raise AuthError(f"Failed to login: {exc}") from exc

        if not response.is_success:
            LOGIN_COUNT.labels(outcome="rejected").inc()
            raise AuthError(f"Login failed: {_status_text(response)}", status=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            LOGIN_COUNT.labels(outcome="error").inc()
            raise AuthError("Login response was not valid JSON", status=response.status_code) from exc

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            LOGIN_COUNT.labels(outcome="error").inc()
            raise AuthError("Login response missing token", status=response.status_code)

        LOGIN_COUNT.labels(outcome="ok").inc()
        log.info("OpenSubtitles login ok status=%s", response.status_code)
        return SessionToken(token=token, expires_at=self._clock() + self._config.token_ttl)

    async def _send(self, method: str, url: str, token: str, **kwargs: Any) -> httpx.Response:
        headers = self._headers(token)
        headers.update(kwargs.pop("headers", {}))
        try:
            return await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderError(f"OpenSubtitles request failed: {exc}", provider=PROVIDER) from exc

    async def _authorized(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        token = await self.token_cache.get()
        response = await self._send(method, url, token, **kwargs)
        if response.status_code == 401:
            # Token revoked before its expiry; log in again once.
            log.warning("OpenSubtitles rejected cached token on %s; re-authenticating", path)
            self.token_cache.invalidate()
            token = await self.token_cache.refresh()
            response = await self._send(method, url, token, **kwargs)
        return response

    async def search(
        self,
        cross_ref_id: Optional[str],
        season: Optional[int] = None,
        episode: Optional[int] = None,
        languages: Optional[Sequence[str]] = None,
    ) -> List[SubtitleCandidate]:
        """Search subtitles by IMDb ID; season is omitted for movies."""
        if not cross_ref_id:
            raise ValidationError("IMDb ID is required", field="cross_ref_id")
        self._require_credentials()

        langs = [lang for lang in (languages or self._config.default_languages) if lang]
        params: Dict[str, str] = {
            "imdb_id": _numeric_imdb_id(cross_ref_id),
            "languages": ",".join(langs),
        }
        if episode:
            params["episode_number"] = str(episode)
        if season:
            params["season_number"] = str(season)

        response = await self._authorized("GET", "/subtitles", params=params)
        if not response.is_success:
            SEARCH_COUNT.labels(outcome="error").inc()
            raise ProviderError(
                f"Search failed: {_status_text(response)}",
                provider=PROVIDER,
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            SEARCH_COUNT.labels(outcome="error").inc()
            raise ProviderError("Search response was not valid JSON", provider=PROVIDER) from exc
        if not isinstance(payload, dict):
            SEARCH_COUNT.labels(outcome="error").inc()
            raise ProviderError("Search response has unexpected shape", provider=PROVIDER)

        try:
            candidates = _candidates_from_payload(payload)
        except ProviderError:
            SEARCH_COUNT.labels(outcome="error").inc()
            raise
        SEARCH_COUNT.labels(outcome="ok" if candidates else "empty").inc()
        log.info(
            "OpenSubtitles search ok imdb=%s season=%s episode=%s items=%d",
            params["imdb_id"],
            season,
            episode,
            len(candidates),
        )
        return candidates

    async def fetch(self, file_id: Optional[str]) -> str:
        """Resolve ``file_id`` to a one-time link and return the caption file as text."""
        if file_id is None or str(file_id).strip() == "":
            raise ValidationError("File ID is required", field="file_id")
        try:
            numeric_id = int(str(file_id).strip())
        except ValueError as exc:
            raise ValidationError(f"File ID must be numeric: {file_id!r}", field="file_id") from exc
        self._require_credentials()

        response = await self._authorized(
            "POST",
            "/download",
            json={"file_id": numeric_id},
            headers={"Content-Type": "application/json"},
        )
        if not response.is_success:
            DOWNLOAD_COUNT.labels(outcome="error").inc()
            raise ProviderError(
                f"Download failed: {_status_text(response)}",
                provider=PROVIDER,
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            DOWNLOAD_COUNT.labels(outcome="error").inc()
            raise ProviderError("Download response was not valid JSON", provider=PROVIDER) from exc
        link = data.get("link") if isinstance(data, dict) else None
        if not link:
            DOWNLOAD_COUNT.labels(outcome="error").inc()
            raise ProviderError("No download link provided", provider=PROVIDER)

        try:
            file_response = await self._client.get(link)
        except httpx.HTTPError as exc:
            DOWNLOAD_COUNT.labels(outcome="error").inc()
            raise ProviderError(f"File download failed: {exc}", provider=PROVIDER) from exc
        if not file_response.is_success:
            DOWNLOAD_COUNT.labels(outcome="error").inc()
            raise ProviderError(
                f"File download failed: {file_response.status_code}",
                provider=PROVIDER,
                status=file_response.status_code,
            )

        DOWNLOAD_COUNT.labels(outcome="ok").inc()
        log.info(
            "OpenSubtitles download ok file_id=%s size=%d remaining=%s",
            numeric_id,
            len(file_response.content),
            data.get("remaining"),
        )
        return decode_subtitle_bytes(file_response.content)
