"""
Authenticated request client for the Tarkov backend.

This module provides the single network primitive of the package: one POST
round-trip, decorated with the headers the backend insists on, run through
the codec and resolved through the envelope/error mapper.

    async with RequestClient(config) as transport:
        data = await transport.call(url, {"uid": "..."}, SessionCookieAuth(session))

Key Features:
    - Async HTTP requests using httpx
    - Launcher vs. game-client header sets chosen by the auth mode
    - Transport failures and API failures raised as distinct exceptions
    - No retries; retry policy belongs to the caller
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

import httpx

from tarkov_api.api import codec
from tarkov_api.api.envelope import Envelope
from tarkov_api.api.errors import HttpStatusError, NetworkError
from tarkov_api.config import SESSION_COOKIE_NAME, Config

logger = logging.getLogger(__name__)


# =============================================================================
# AUTH MODES
# =============================================================================


@dataclass(frozen=True)
class NoAuth:
    """Unauthenticated launcher call (login, hardware activation)."""


@dataclass(frozen=True)
class BearerAuth:
    """Launcher call carrying an access token (token exchange)."""

    token: str = field(repr=False)


@dataclass(frozen=True)
class SessionCookieAuth:
    """Game-client call carrying the session cookie."""

    session: str = field(repr=False)


AuthMode = Union[NoAuth, BearerAuth, SessionCookieAuth]


# =============================================================================
# REQUEST CLIENT
# =============================================================================


@dataclass
class RequestClient:
    """
    Async HTTP client performing enveloped POST calls.

    The underlying ``httpx.AsyncClient`` is created on construction unless
    one is passed in. A borrowed client is never closed by this object.

    Attributes:
        config: Endpoints, version strings and timeout.

    Example:
        transport = RequestClient(Config())
        try:
            grant = await transport.call(config.login_url, body)
        finally:
            await transport.aclose()
    """

    config: Config = field(default_factory=Config)
    _http_client: httpx.AsyncClient | None = field(default=None, repr=False)
    _owns_http_client: bool = field(default=True, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_http_client = True

    @classmethod
    def borrowing(
        cls, http_client: httpx.AsyncClient, config: Config | None = None
    ) -> RequestClient:
        """Wrap an existing ``httpx.AsyncClient`` without taking ownership of it."""
        return cls(
            config=config or Config(),
            _http_client=http_client,
            _owns_http_client=False,
        )

    # -------------------------------------------------------------------------
    # Context Manager Protocol
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> RequestClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the connection pool if this object owns it. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        if self._http_client is not None and self._owns_http_client:
            await self._http_client.aclose()
        self._http_client = None

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def http_client(self) -> httpx.AsyncClient:
        """
        Get the HTTP client, ensuring it is still open.

        Raises:
            RuntimeError: If the RequestClient has been closed.
        """
        if self._http_client is None:
            raise RuntimeError("RequestClient is closed; create a new client to keep going.")
        return self._http_client

    # -------------------------------------------------------------------------
    # Request building
    # -------------------------------------------------------------------------

    def build_headers(self, auth: AuthMode) -> dict[str, str]:
        """
        Build the header set for ``auth``.

        Launcher calls (``NoAuth``/``BearerAuth``) identify as the launcher;
        session calls identify as the Unity game client.
        """
        headers = {"Content-Type": "application/json"}

        if isinstance(auth, SessionCookieAuth):
            headers["User-Agent"] = self.config.game_user_agent
            headers["App-Version"] = self.config.app_version
            headers["X-Unity-Version"] = self.config.unity_version
            headers["Cookie"] = f"{SESSION_COOKIE_NAME}={auth.session}"
            return headers

        headers["User-Agent"] = self.config.launcher_user_agent
        if isinstance(auth, BearerAuth):
            headers["Authorization"] = f"Bearer {auth.token}"
        return headers

    # -------------------------------------------------------------------------
    # Round-trip
    # -------------------------------------------------------------------------

    async def call(
        self,
        url: str,
        body: Any = None,
        auth: AuthMode | None = None,
        *,
        payload_required: bool = True,
    ) -> Any:
        """
        POST ``body`` to ``url`` and return the envelope payload.

        Args:
            url: Absolute endpoint URL.
            body: JSON-serializable request body; ``None`` sends ``{}``.
            auth: How to authenticate the call. Defaults to ``NoAuth()``.
            payload_required: Whether a success envelope must carry ``data``.

        Returns:
            The envelope ``data`` (may be ``None`` when not required).

        Raises:
            NetworkError: The request never completed.
            HttpStatusError: The server answered with a non-2xx status.
            CodecError: The body could not be encoded or decoded.
            ApiError: The envelope carried a non-zero code.
            ContractViolationError: Success without a required payload.
        """
        auth = auth if auth is not None else NoAuth()
        content = codec.encode(body)
        headers = self.build_headers(auth)

        logger.debug("POST %s (%s)", url, type(auth).__name__)
        # Bodies are raw zlib whatever Content-Encoding says, so httpx must not decode them
        try:
            async with self.http_client.stream(
                "POST", url, content=content, headers=headers
            ) as response:
                if not response.is_success:
                    logger.debug("POST %s -> HTTP %d", url, response.status_code)
                    raise HttpStatusError(status_code=response.status_code, url=url)
                raw = b"".join([chunk async for chunk in response.aiter_raw()])
        except httpx.TransportError as e:
            raise NetworkError(url=url, detail=str(e) or type(e).__name__) from e

        envelope = Envelope.from_json(codec.decode(raw))
        logger.debug("POST %s -> err=%d", url, envelope.code)
        return envelope.unwrap(payload_required=payload_required)
