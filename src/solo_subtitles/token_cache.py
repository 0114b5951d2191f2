from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from .models import SessionToken

log = logging.getLogger("solo_subtitles.token_cache")

LoginFn = Callable[[], Awaitable[SessionToken]]


class SessionTokenCache:
    """Process-wide holder for the subtitle provider's session token.

    ``get()`` returns the cached token while it is valid and logs in again
    once it is absent or expired. Refreshes are single-flight: callers that
    find the token stale while a login is already running await that same
    login instead of starting their own. The in-flight task is shared, so no
    lock is held while the login request is outstanding.
    """

    def __init__(self, login: LoginFn, *, clock: Callable[[], float] = time.time) -> None:
        self._login = login
        self._clock = clock
        self._current: Optional[SessionToken] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def current(self) -> Optional[SessionToken]:
        return self._current

    async def get(self) -> str:
        current = self._current
        if current is not None and current.is_valid(self._clock()):
            return current.token
        return await self.refresh()

    async def refresh(self) -> str:
        task = self._inflight
        if task is None or task.done():
            task = asyncio.ensure_future(self._do_refresh())
            self._inflight = task
        else:
            log.debug("Joining in-flight token refresh")
        # Waiters must not cancel the shared login when they are cancelled.
        session = await asyncio.shield(task)
        return session.token

    def invalidate(self) -> None:
        self._current = None

    async def _do_refresh(self) -> SessionToken:
        try:
            session = await self._login()
            self._current = session
            log.info("Provider token refreshed; valid for %.0fs", session.expires_at - self._clock())
            return session
        finally:
            self._inflight = None
