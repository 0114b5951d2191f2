from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .mapping import IdMapper
from .models import SubtitleCandidate
from .settings import Settings
from .sources.arm import ArmProvider
from .sources.idsmoe import IdsMoeProvider
from .sources.opensubtitles import OpenSubtitlesClient
from .srt import parse_srt
from .timing import extract_text_by_timing, normalize_time

log = logging.getLogger("solo_subtitles.service")


class SubtitleService:
    """Pipeline entry points: search, download+parse, and timed text extraction."""

    def __init__(
        self,
        subtitles: OpenSubtitlesClient,
        mapper: IdMapper,
        config: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.subtitles = subtitles
        self.mapper = mapper
        self._config = config
        self._http_client = http_client

    async def aclose(self) -> None:
        await self.subtitles.aclose()
        if self._http_client is not None:
            await self._http_client.aclose()

    async def search_subtitles(
        self,
        cross_ref_id: Optional[str],
        season: Optional[int] = None,
        episode: Optional[int] = None,
        languages: Optional[Sequence[str]] = None,
    ) -> List[SubtitleCandidate]:
        return await self.subtitles.search(cross_ref_id, season=season, episode=episode, languages=languages)

    async def search_anime_subtitles(
        self,
        anime_id: Any,
        season: Optional[int] = None,
        episode: Optional[int] = None,
        languages: Optional[Sequence[str]] = None,
        mapping_service: Optional[str] = None,
    ) -> List[SubtitleCandidate]:
        """Map a MAL id to IMDb, then search; an unmapped title yields no candidates."""
        service = mapping_service or self._config.default_mapping_service
        log.info("Using %s service to map MAL ID %s to IMDb ID", service, anime_id)
        imdb_id = await self.mapper.resolve(anime_id, service)
        if not imdb_id:
            return []
        return await self.search_subtitles(imdb_id, season=season, episode=episode, languages=languages)

    async def download_subtitle(self, file_id: Optional[str]) -> Dict[str, List[Dict[str, str]]]:
        raw_text = await self.subtitles.fetch(file_id)
        entries = parse_srt(raw_text)
        log.info("Downloaded subtitle file_id=%s entries=%d", file_id, len(entries))
        return {"entries": [entry.to_dict() for entry in entries]}

    async def extract_subtitle_text(self, file_id: Optional[str], start_time: str, end_time: str) -> Dict[str, str]:
        # Reject bad times before spending a download on them.
        normalize_time(start_time)
        normalize_time(end_time)

        raw_text = await self.subtitles.fetch(file_id)
        entries = parse_srt(raw_text)
        text = extract_text_by_timing(entries, start_time, end_time)
        log.info(
            "Extracted subtitle text file_id=%s range=%s-%s chars=%d",
            file_id,
            start_time,
            end_time,
            len(text),
        )
        return {"text": text}

    async def anime_ids(self, anime_id: Any, mapping_service: Optional[str] = None) -> Optional[Dict[str, Any]]:
        service = mapping_service or self._config.default_mapping_service
        return await self.mapper.all_ids(anime_id, service)


def build_service(config: Settings) -> SubtitleService:
    """Wire the production object graph: one OpenSubtitles client (and token cache) per process."""
    http_client = httpx.AsyncClient(timeout=config.request_timeout, follow_redirects=True)
    mapper = IdMapper(
        {
            ArmProvider.name: ArmProvider(config, http_client),
            IdsMoeProvider.name: IdsMoeProvider(config, http_client),
        }
    )
    return SubtitleService(OpenSubtitlesClient(config), mapper, config, http_client=http_client)
