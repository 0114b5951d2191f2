"""Translate anime catalog (MyAnimeList) ids into IMDb ids.

Two symmetric providers are available (ARM and ids.moe). The preferred one
is asked first; a "no mapping" answer is final, while any other failure
triggers exactly one attempt with the alternate provider.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .errors import MappingError, ValidationError
from .metrics import MAPPING_FALLBACK_COUNT
from .sources.common import MappingProvider

log = logging.getLogger("solo_subtitles.mapping")


class LookupOutcome(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILURE = "failure"


@dataclass(frozen=True)
class LookupResult:
    outcome: LookupOutcome
    value: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def found(cls, value: str) -> "LookupResult":
        return cls(LookupOutcome.FOUND, value=value)

    @classmethod
    def not_found(cls) -> "LookupResult":
        return cls(LookupOutcome.NOT_FOUND)

    @classmethod
    def failure(cls, error: BaseException) -> "LookupResult":
        return cls(LookupOutcome.FAILURE, error=error)


async def attempt_lookup(provider: MappingProvider, catalog_id: Any) -> LookupResult:
    """Run one provider lookup and classify the outcome instead of raising.

    ``ValidationError`` is the caller's fault and is re-raised untouched.
    """
    try:
        value = await provider.lookup(catalog_id)
    except ValidationError:
        raise
    except Exception as exc:  # noqa: BLE001
        log.warning("Mapping provider %s failed for %s: %s", provider.name, catalog_id, exc)
        return LookupResult.failure(exc)
    if value is None:
        return LookupResult.not_found()
    return LookupResult.found(value)


class IdMapper:
    def __init__(self, providers: Mapping[str, MappingProvider]) -> None:
        if len(providers) != 2:
            raise ValueError("IdMapper expects exactly two providers (preferred + fallback)")
        self._providers: Dict[str, MappingProvider] = dict(providers)

    def _pick(self, preferred: str) -> "tuple[MappingProvider, MappingProvider]":
        if preferred not in self._providers:
            raise ValidationError(
                f"Unknown mapping service {preferred!r}; expected one of {', '.join(self._providers)}",
                field="mapping_service",
            )
        alternate = next(name for name in self._providers if name != preferred)
        return self._providers[preferred], self._providers[alternate]

    async def resolve(self, catalog_id: Any, preferred: str = "arm") -> Optional[str]:
        """Return the IMDb id for ``catalog_id``; ``None`` when no mapping exists."""
        primary, fallback = self._pick(preferred)

        result = await attempt_lookup(primary, catalog_id)
        if result.outcome is LookupOutcome.FOUND:
            log.info("Mapped MAL ID %s to %s via %s", catalog_id, result.value, primary.name)
            return result.value
        if result.outcome is LookupOutcome.NOT_FOUND:
            log.info("No IMDb ID found for MAL ID %s using %s", catalog_id, primary.name)
            return None

        log.info("Trying %s as fallback for MAL ID %s", fallback.name, catalog_id)
        second = await attempt_lookup(fallback, catalog_id)
        MAPPING_FALLBACK_COUNT.labels(provider=fallback.name, outcome=second.outcome.value).inc()
        if second.outcome is LookupOutcome.FOUND:
            log.info("Mapped MAL ID %s to %s via fallback %s", catalog_id, second.value, fallback.name)
            return second.value
        if second.outcome is LookupOutcome.NOT_FOUND:
            return None

        raise MappingError(
            f"Failed to get IMDb ID with both services: {result.error}",
            provider=primary.name,
            details={"fallback_error": str(second.error)},
        ) from result.error

    async def all_ids(self, catalog_id: Any, preferred: str = "arm") -> Optional[Dict[str, Any]]:
        """Every platform id the preferred provider knows for ``catalog_id``; no fallback."""
        primary, _ = self._pick(preferred)
        return await primary.lookup_all(catalog_id)
