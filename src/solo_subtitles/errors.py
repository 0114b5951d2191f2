"""
Error hierarchy for the subtitle pipeline.

Exception Hierarchy:
    SubtitlePipelineError (base)
    ├── ValidationError - missing or malformed caller input
    ├── ConfigurationError - missing credentials or settings
    ├── AuthError - subtitle provider rejected the login
    ├── ProviderError - non-success response from an upstream service
    ├── ParseError - structurally unusable subtitle document
    └── MappingError - every ID-mapping provider failed
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SubtitlePipelineError(Exception):
    """Base exception for all pipeline errors."""

    status_code = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(SubtitlePipelineError):
    """Caller supplied missing or unusable input."""

    status_code = 400

    def __init__(self, message: str, *, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.field = field


class ConfigurationError(SubtitlePipelineError):
    """A credential or setting the pipeline needs is not configured."""

    status_code = 503

    def __init__(self, message: str, *, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.field = field


class AuthError(SubtitlePipelineError):
    status_code = 502

    def __init__(self, message: str, *, status: Optional[int] = None, details: Optional[Dict[str, Any]] = None) -> None:
        details = details or {}
        if status is not None:
            details["status"] = status
        super().__init__(message, details=details)
        self.status = status


class ProviderError(SubtitlePipelineError):
    """An upstream call answered with a non-success status or failed in transit."""

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if provider:
            details["provider"] = provider
        if status is not None:
            details["status"] = status
        super().__init__(message, details=details)
        self.provider = provider
        self.status = status


class ParseError(SubtitlePipelineError):
    status_code = 422


class MappingError(SubtitlePipelineError):
    """Both the preferred and the fallback mapping provider failed."""

    status_code = 502

    def __init__(self, message: str, *, provider: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details=details)
        self.provider = provider
