"""Select the caption text spoken inside a user-supplied time window.

User times arrive as ``MM:SS`` or ``HH:MM:SS``, optionally with a fractional
part separated by ``.`` or ``,``. They are normalized to ``HH:MM:SS.mmm``
before being compared with entry timestamps.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List

from .errors import ValidationError
from .models import SubtitleEntry

log = logging.getLogger("solo_subtitles.timing")

TIME_RE = re.compile(r"^\d+:\d{1,2}:\d{1,2}(?:[.,]\d*)?$")
TAG_RE = re.compile(r"<[^>]*>")
WHITESPACE_RE = re.compile(r"\s+")


def normalize_time(value: str) -> str:
    """Bring ``MM:SS`` / ``HH:MM:SS`` (with or without fraction) to ``HH:MM:SS.mmm`` shape."""
    time_str = (value or "").strip()
    if not time_str:
        raise ValidationError("Time value is required", field="time")

    if time_str.count(":") == 1:
        time_str = f"00:{time_str}"
    if "." not in time_str and "," not in time_str:
        time_str = f"{time_str}.000"

    if not TIME_RE.match(time_str):
        raise ValidationError(f"Invalid time format: {value!r}", field="time")
    return time_str


def time_to_seconds(value: str) -> float:
    parts = value.replace(",", ".").split(":")
    if len(parts) != 3:
        raise ValidationError(f"Invalid time format: {value!r}", field="time")
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = float(parts[2])
    except ValueError as exc:
        raise ValidationError(f"Invalid time format: {value!r}", field="time") from exc
    return hours * 3600 + minutes * 60 + seconds


def entry_overlaps(entry_start: float, entry_end: float, start: float, end: float) -> bool:
    # Inclusive on both ends; an entry spanning the whole window also counts.
    return (
        (start <= entry_start <= end)
        or (start <= entry_end <= end)
        or (entry_start <= start and entry_end >= end)
    )


def select_entries(entries: Iterable[SubtitleEntry], start_time: str, end_time: str) -> List[SubtitleEntry]:
    start = time_to_seconds(normalize_time(start_time))
    end = time_to_seconds(normalize_time(end_time))
    return [
        entry
        for entry in entries
        if entry_overlaps(time_to_seconds(entry.start_time), time_to_seconds(entry.end_time), start, end)
    ]


def clean_text(texts: Iterable[str]) -> str:
    joined = " ".join(texts)
    joined = TAG_RE.sub("", joined)
    return WHITESPACE_RE.sub(" ", joined).strip()


def extract_text_by_timing(entries: List[SubtitleEntry], start_time: str, end_time: str) -> str:
    """Concatenate the text of every entry overlapping ``[start_time, end_time]``.

    Entries keep their original list order. HTML-like tags are removed and
    whitespace is collapsed. Returns ``""`` when nothing overlaps.
    """
    matching = select_entries(entries, start_time, end_time)
    log.debug(
        "Timing window %s-%s matched %d of %d entries",
        start_time,
        end_time,
        len(matching),
        len(entries),
    )
    if not matching:
        return ""
    return clean_text(entry.text for entry in matching)
