from typing import List

import pytest

from solo_subtitles.errors import ParseError, ValidationError
from solo_subtitles.models import SubtitleCandidate
from solo_subtitles.service import SubtitleService
from solo_subtitles.settings import Settings

SRT_TEXT = """1
00:00:01,000 --> 00:00:03,000
Hi

2
00:00:05,000 --> 00:00:07,000
<b>there</b>

3
00:00:09,000 --> 00:00:10,000
later
"""


class FakeSubtitles:
    def __init__(self, text: str = SRT_TEXT) -> None:
        self.text = text
        self.fetched: List[str] = []
        self.searches: List[dict] = []

    async def search(self, cross_ref_id, season=None, episode=None, languages=None):
        self.searches.append(
            {"cross_ref_id": cross_ref_id, "season": season, "episode": episode, "languages": languages}
        )
        return [SubtitleCandidate(file_id=111, file_name="ep01.srt", language="en")]

    async def fetch(self, file_id):
        self.fetched.append(file_id)
        return self.text

    async def aclose(self):
        pass


class FakeMapper:
    def __init__(self, imdb_id=None) -> None:
        self.imdb_id = imdb_id
        self.calls: List[tuple] = []

    async def resolve(self, catalog_id, preferred="arm"):
        self.calls.append((catalog_id, preferred))
        return self.imdb_id

    async def all_ids(self, catalog_id, preferred="arm"):
        self.calls.append((catalog_id, preferred))
        return {"imdb": self.imdb_id} if self.imdb_id else None


def _service(subtitles=None, mapper=None, **config) -> SubtitleService:
    return SubtitleService(subtitles or FakeSubtitles(), mapper or FakeMapper(), Settings(**config))


@pytest.mark.asyncio
async def test_extract_subtitle_text_returns_cleaned_overlap():
    subtitles = FakeSubtitles()
    result = await _service(subtitles).extract_subtitle_text("111", "00:00:02", "00:00:06")

    assert result == {"text": "Hi there"}
    assert subtitles.fetched == ["111"]


@pytest.mark.asyncio
async def test_extract_subtitle_text_without_overlap_is_empty():
    result = await _service().extract_subtitle_text("111", "00:10:00", "00:10:05")
    assert result == {"text": ""}


@pytest.mark.asyncio
async def test_extract_rejects_bad_time_before_download():
    subtitles = FakeSubtitles()
    with pytest.raises(ValidationError):
        await _service(subtitles).extract_subtitle_text("111", "soon", "00:00:06")
    assert subtitles.fetched == []


@pytest.mark.asyncio
async def test_download_subtitle_returns_entry_dicts():
    result = await _service().download_subtitle("111")

    assert result["entries"][0] == {"startTime": "00:00:01.000", "endTime": "00:00:03.000", "text": "Hi"}
    assert result["entries"][1]["text"] == "<b>there</b>"
    assert len(result["entries"]) == 3


@pytest.mark.asyncio
async def test_download_empty_document_raises_parse_error():
    with pytest.raises(ParseError):
        await _service(FakeSubtitles(text="  \n")).download_subtitle("111")


@pytest.mark.asyncio
async def test_anime_search_maps_then_searches():
    subtitles = FakeSubtitles()
    mapper = FakeMapper(imdb_id="tt22248376")

    results = await _service(subtitles, mapper).search_anime_subtitles(52991, season=1, episode=3, languages=["en"])

    assert [c.file_id for c in results] == [111]
    assert mapper.calls == [(52991, "arm")]
    assert subtitles.searches == [{"cross_ref_id": "tt22248376", "season": 1, "episode": 3, "languages": ["en"]}]


@pytest.mark.asyncio
async def test_anime_search_without_mapping_returns_empty_and_skips_search():
    subtitles = FakeSubtitles()
    results = await _service(subtitles, FakeMapper(imdb_id=None)).search_anime_subtitles(1)

    assert results == []
    assert subtitles.searches == []


@pytest.mark.asyncio
async def test_anime_search_honours_configured_default_mapping_service():
    mapper = FakeMapper(imdb_id="tt1")
    await _service(mapper=mapper, default_mapping_service="idsmoe").search_anime_subtitles(7)
    assert mapper.calls == [(7, "idsmoe")]


@pytest.mark.asyncio
async def test_anime_ids_passes_requested_service():
    mapper = FakeMapper(imdb_id="tt1")
    assert await _service(mapper=mapper).anime_ids(7, "idsmoe") == {"imdb": "tt1"}
    assert mapper.calls == [(7, "idsmoe")]
