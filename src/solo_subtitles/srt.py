from __future__ import annotations

import logging
import re
from typing import List

from charset_normalizer import from_bytes

from .errors import ParseError
from .models import SubtitleEntry
from .timing import time_to_seconds

log = logging.getLogger("solo_subtitles.srt")

BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")
TIMING_LINE_RE = re.compile(
    r"(?P<start>\d{2}:\d{2}:\d{2}[,.]\d{3})\s*-->\s*(?P<end>\d{2}:\d{2}:\d{2}[,.]\d{3})"
)
CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def decode_subtitle_bytes(data: bytes) -> str:
    """Decode a downloaded caption file whatever its encoding (SRT files are often cp1252/latin-1)."""
    if not data:
        return ""
    try:
        match = from_bytes(data).best()
    except Exception:  # noqa: BLE001
        log.debug("Charset detection failed; decoding as UTF-8", exc_info=True)
        match = None
    if match is not None:
        return str(match)
    return data.decode("utf-8", errors="replace")


def normalize_subtitle_text(text: str) -> str:
    text = text.replace("\ufeff", "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return CONTROL_CHAR_RE.sub("", text)


def parse_srt(raw_text: str) -> List[SubtitleEntry]:
    """Parse SRT text into timed entries, keeping file order.

    Blocks with fewer than three lines, an unrecognised timing line, or an
    end before their start are dropped; the rest of the document still
    parses. Only an empty document is an error.
    """
    content = normalize_subtitle_text(raw_text or "").strip()
    if not content:
        raise ParseError("Subtitle document is empty")

    entries: List[SubtitleEntry] = []
    skipped = 0
    for block in BLOCK_SPLIT_RE.split(content):
        lines = block.strip().split("\n")
        if len(lines) < 3:
            skipped += 1
            continue

        match = TIMING_LINE_RE.search(lines[1])
        if not match:
            skipped += 1
            continue

        start_time = match.group("start").replace(",", ".")
        end_time = match.group("end").replace(",", ".")
        if time_to_seconds(end_time) < time_to_seconds(start_time):
            skipped += 1
            continue

        text = "\n".join(lines[2:]).strip()
        entries.append(SubtitleEntry(start_time=start_time, end_time=end_time, text=text))

    if skipped:
        log.debug("Dropped %d malformed SRT blocks", skipped)
    log.debug("Parsed %d SRT entries", len(entries))
    return entries
