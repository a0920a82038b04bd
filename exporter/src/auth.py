"""
OAuth2 device-code grant and token refresh against the tado° login service.

tado° only accepts the device authorization grant (RFC 8628) for its public
REST API. The flow is a small state machine:

    NOT_STARTED -> STARTED -> POLLING -> COMPLETED
                                      -> FAILED   (definitive rejection)
                                      -> EXPIRED  (device code timed out)

The verification URL is logged for the operator, who approves the login in
a browser. Nothing here drives the browser.

Operations:
- DeviceAuthFlow.run(): full handshake, returns fresh Credentials.
- refresh_tokens(): exchange a refresh token for a new token pair.

Both talk form-encoded HTTP to the login endpoints and raise AuthError on
any failure; the session manager decides what to do next.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from exporter.src.api_models import (
    AuthStartResponse,
    AuthTokensErrorResponse,
    AuthTokensResponse,
)
from exporter.src.converter import convert_credentials
from exporter.src.errors import AuthError, AuthTimeoutError
from exporter.src.models import Credentials

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

AUTH_START_URL = "https://login.tado.com/oauth2/device_authorize"
AUTH_TOKEN_URL = "https://login.tado.com/oauth2/token"

AUTH_PENDING_MESSAGE = "authorization_pending"
"""Token endpoint error while the user has not yet approved the login."""

DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"


class AuthState(enum.Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


# ---------------------------------------------------------------------------
# Shared HTTP helpers
# ---------------------------------------------------------------------------


async def _post_form(
    http: httpx.AsyncClient,
    url: str,
    params: dict[str, str],
) -> Any:
    """POST a form-encoded body, mapping transport failures to AuthError."""
    try:
        return await http.post(url, data=params)
    except httpx.HTTPError as exc:
        raise AuthError(f"Request to {url} failed: {exc}", url=url) from exc


def _parse(response: Any, model: type[_ModelT], url: str) -> _ModelT:
    """Decode a login endpoint JSON body into *model*."""
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise AuthError(
            f"Malformed response from {url}",
            status_code=response.status_code,
            url=url,
        ) from exc


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


# ---------------------------------------------------------------------------
# Token refresh
# ---------------------------------------------------------------------------


async def refresh_tokens(
    http: httpx.AsyncClient,
    *,
    client_id: str,
    refresh_token: str,
    token_url: str = AUTH_TOKEN_URL,
) -> Credentials:
    """Exchange a refresh token for a new token pair.

    Never falls back to the device flow itself; any failure is raised so
    the caller can decide.

    Args:
        http: Shared async HTTP client.
        client_id: OAuth2 client identifier.
        refresh_token: Refresh token of the current pair.
        token_url: Token endpoint URL.

    Returns:
        The freshly issued credentials.

    Raises:
        AuthError: No refresh token, transport failure, non-2xx status or a
            malformed response.
    """
    if not refresh_token:
        raise AuthError("No refresh token available")

    params = {
        "client_id": client_id,
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
    }
    response = await _post_form(http, token_url, params)
    if not _is_success(response.status_code):
        raise AuthError(
            f"Token refresh rejected with HTTP {response.status_code}",
            status_code=response.status_code,
            url=token_url,
        )
    return convert_credentials(_parse(response, AuthTokensResponse, token_url))


# ---------------------------------------------------------------------------
# Device-code flow
# ---------------------------------------------------------------------------


class DeviceAuthFlow:
    """Device authorization grant as an explicit state machine.

    A flow object can be run repeatedly; each :meth:`run` starts over from
    ``NOT_STARTED``. The clock and the sleep function are injectable so the
    polling schedule can be driven deterministically.

    Args:
        http: Shared async HTTP client.
        client_id: OAuth2 client identifier.
        start_url: Device authorization endpoint.
        token_url: Token endpoint.
        clock: Monotonic clock in seconds.
        sleep: Coroutine function used between polls.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        client_id: str,
        start_url: str = AUTH_START_URL,
        token_url: str = AUTH_TOKEN_URL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._http = http
        self._client_id = client_id
        self._start_url = start_url
        self._token_url = token_url
        self._clock = clock
        self._sleep = sleep
        self._state = AuthState.NOT_STARTED
        self.polls = 0

    @property
    def state(self) -> AuthState:
        """State reached by the most recent run."""
        return self._state

    async def run(self) -> Credentials:
        """Run the whole handshake and return the issued credentials.

        Raises:
            AuthError: The flow failed (transport, rejection, bad status).
            AuthTimeoutError: The device code expired before approval.
        """
        self._state = AuthState.NOT_STARTED
        self.polls = 0
        try:
            start = await self._start()
            return await self._poll(start)
        except AuthTimeoutError:
            self._state = AuthState.EXPIRED
            raise
        except AuthError:
            self._state = AuthState.FAILED
            raise

    async def _start(self) -> AuthStartResponse:
        params = {"client_id": self._client_id, "scope": "offline_access"}
        response = await _post_form(self._http, self._start_url, params)
        if not _is_success(response.status_code):
            raise AuthError(
                f"Device authorization rejected with HTTP {response.status_code}",
                status_code=response.status_code,
                url=self._start_url,
            )
        start = _parse(response, AuthStartResponse, self._start_url)
        self._state = AuthState.STARTED
        logger.warning(
            "Device authentication required: open %s to approve this exporter "
            "(expires in %ss)",
            start.verification_uri_complete,
            start.expires_in,
        )
        return start

    async def _poll(self, start: AuthStartResponse) -> Credentials:
        deadline = self._clock() + start.expires_in
        params = {
            "client_id": self._client_id,
            "device_code": start.device_code,
            "grant_type": DEVICE_CODE_GRANT,
        }
        self._state = AuthState.POLLING

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                break

            self.polls += 1
            try:
                response = await asyncio.wait_for(
                    _post_form(self._http, self._token_url, params),
                    timeout=remaining,
                )
            except TimeoutError:
                break

            status = response.status_code
            if status == 200:
                tokens = _parse(response, AuthTokensResponse, self._token_url)
                self._state = AuthState.COMPLETED
                logger.info("Device authentication flow completed")
                return convert_credentials(tokens)

            if status == 400:
                failure = _parse(response, AuthTokensErrorResponse, self._token_url)
                if failure.error != AUTH_PENDING_MESSAGE:
                    raise AuthError(
                        f"Device authentication rejected: {failure.error}",
                        status_code=status,
                        url=self._token_url,
                    )
            else:
                raise AuthError(
                    f"Unexpected HTTP {status} from {self._token_url}",
                    status_code=status,
                    url=self._token_url,
                )

            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            logger.info(
                "Device authentication flow still pending, retrying in %ss",
                start.interval,
            )
            await self._sleep(min(start.interval, remaining))

        raise AuthTimeoutError("Device authentication flow timed out")
