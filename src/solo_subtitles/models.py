from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union


@dataclass(frozen=True)
class SubtitleEntry:
    """One caption block with canonical ``HH:MM:SS.mmm`` timestamps."""

    start_time: str
    end_time: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"startTime": self.start_time, "endTime": self.end_time, "text": self.text}


@dataclass
class SubtitleCandidate:
    file_id: Union[int, str]
    file_name: str = ""
    language: Optional[str] = None
    download_count: int = 0
    rating: float = 0
    release: str = ""
    uploader: str = "Unknown"

    def to_dict(self) -> Dict[str, object]:
        return {
            "fileId": self.file_id,
            "fileName": self.file_name,
            "language": self.language,
            "downloadCount": self.download_count,
            "rating": self.rating,
            "release": self.release,
            "uploader": self.uploader,
        }


@dataclass(frozen=True)
class SessionToken:
    """Provider auth token plus the absolute instant (epoch seconds) it stops being trusted."""

    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return bool(self.token) and now < self.expires_at
