"""Subtitle retrieval and timing-alignment pipeline for anime extracts."""

from .errors import (
    AuthError,
    ConfigurationError,
    MappingError,
    ParseError,
    ProviderError,
    SubtitlePipelineError,
    ValidationError,
)
from .mapping import IdMapper, LookupOutcome, LookupResult
from .models import SessionToken, SubtitleCandidate, SubtitleEntry
from .service import SubtitleService, build_service
from .srt import parse_srt
from .timing import extract_text_by_timing, normalize_time, time_to_seconds
from .token_cache import SessionTokenCache

__version__ = "0.1.0"

__all__ = [
    "AuthError",
    "ConfigurationError",
    "IdMapper",
    "LookupOutcome",
    "LookupResult",
    "MappingError",
    "ParseError",
    "ProviderError",
    "SessionToken",
    "SessionTokenCache",
    "SubtitleCandidate",
    "SubtitleEntry",
    "SubtitlePipelineError",
    "SubtitleService",
    "ValidationError",
    "build_service",
    "extract_text_by_timing",
    "normalize_time",
    "parse_srt",
    "time_to_seconds",
]
