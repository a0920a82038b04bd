"""
Session manager guaranteeing a usable access token before API calls.

Owns the single :class:`Session` of the process: the current credentials,
the instant by which they must be refreshed, the OAuth client id and the
cached home id. ``ensure_valid_session()`` is safe to call on every poll
tick:

1. The first call loads the persisted token record (absence is fine).
2. A refresh is attempted; it is a no-op while the refresh deadline lies in
   the future.
3. If the refresh fails, the full device-code flow runs instead.
4. Whichever path succeeds, the new credentials are persisted and then
   swapped in before the call returns.

The refresh deadline is ``issued_at + expires_in - REFRESH_MARGIN_S`` so a
refresh always happens strictly before the token actually expires.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

import httpx

from exporter.src.auth import AUTH_TOKEN_URL, DeviceAuthFlow, refresh_tokens
from exporter.src.errors import AuthError
from exporter.src.models import Credentials
from exporter.src.token_store import TokenStore

logger = logging.getLogger(__name__)

REFRESH_MARGIN_S: int = 10
"""Seconds cut from the issued token lifetime when computing the deadline."""


def compute_refresh_deadline(issued_at: float, expires_in: int) -> float:
    """Return the instant by which a token issued at *issued_at* must be refreshed."""
    return issued_at + (expires_in - REFRESH_MARGIN_S)


class Session:
    """Mutable authentication state shared by the session manager and client.

    Attributes:
        credentials: Current token pair. Replaced, never mutated in place.
        refresh_deadline: Monotonic instant after which a refresh is due, or
            ``None`` when no token has been issued during this process.
        client_id: OAuth2 client identifier.
        home_id: First home of the account, once resolved.
    """

    def __init__(self, client_id: str) -> None:
        self.credentials = Credentials()
        self.refresh_deadline: float | None = None
        self.client_id = client_id
        self.home_id: int | None = None


class SessionManager:
    """Keeps the session authenticated, refreshing or re-authorizing as needed.

    All state transitions run under one asyncio lock, so concurrent callers
    never start two refreshes or two device flows.

    Args:
        http: Shared async HTTP client.
        client_id: OAuth2 client identifier.
        token_store: Persistence for the token record.
        device_flow: Device-code flow to fall back on. Built from *http*
            when omitted.
        token_url: Token endpoint used for refreshes.
        clock: Monotonic clock in seconds.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        client_id: str,
        token_store: TokenStore,
        device_flow: DeviceAuthFlow | None = None,
        token_url: str = AUTH_TOKEN_URL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http
        self._token_store = token_store
        self._device_flow = device_flow or DeviceAuthFlow(http, client_id=client_id)
        self._token_url = token_url
        self._clock = clock
        self._lock = asyncio.Lock()
        self._loaded = False
        self.session = Session(client_id)

    @property
    def access_token(self) -> str:
        """Access token of the live credentials."""
        return self.session.credentials.access_token

    async def ensure_valid_session(self) -> None:
        """Make sure the session holds credentials that are not about to expire.

        Raises:
            AuthError: Both the refresh and the device-code flow failed.
            TokenStoreError: New credentials could not be persisted.
        """
        async with self._lock:
            if not self._loaded:
                stored = self._token_store.load()
                if stored is not None:
                    self.session.credentials = stored
                self._loaded = True

            try:
                await self._refresh()
                return
            except AuthError as exc:
                logger.warning(
                    "Token refresh failed (%s), falling back to device authentication",
                    exc,
                )

            credentials = await self._device_flow.run()
            self._install(credentials)

    async def refresh(self) -> None:
        """Refresh the access token if the refresh deadline has passed.

        Raises:
            AuthError: The refresh was attempted and failed.
        """
        async with self._lock:
            await self._refresh()

    def reset_home(self) -> None:
        """Forget the cached home id so the next request resolves it again."""
        self.session.home_id = None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _refresh(self) -> None:
        deadline = self.session.refresh_deadline
        if deadline is not None and self._clock() < deadline:
            return

        credentials = await refresh_tokens(
            self._http,
            client_id=self.session.client_id,
            refresh_token=self.session.credentials.refresh_token,
            token_url=self._token_url,
        )
        self._install(credentials)
        logger.info("API access tokens refreshed")

    def _install(self, credentials: Credentials) -> None:
        """Persist *credentials*, then make them the live session credentials."""
        issued_at = self._clock()
        self._token_store.save(credentials)
        self.session.credentials = credentials
        self.session.refresh_deadline = compute_refresh_deadline(
            issued_at, credentials.expires_in
        )
