"""
Client handle for the Tarkov backend.

A ``Client`` is what every login entry point produces: an open connection
pool, the hardware ID and the game session. Feature modules reach the
network only through ``Client.call``.

    client = await Client.login(email, password, hwid)
    async with client:
        await client.keep_alive()
        profiles = await get_profiles(client)

Captcha and 2FA are surfaced as ``ApiError`` rather than handled here; see
``tarkov_api.cli`` for an interactive retry loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from tarkov_api.api.transport import RequestClient, SessionCookieAuth
from tarkov_api.auth import (
    AuthInput,
    BearerToken,
    Credentials,
    CredentialsWithCaptcha,
    ExistingSession,
    Session,
    TwoFactorActivation,
    authenticate,
    hash_password,
    validate_fields,
)
from tarkov_api.config import Config
from tarkov_api.hwid import generate_hwid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Client:
    """
    Authenticated handle exposing the game API.

    Instances are immutable, so concurrent calls on one client need no
    locking. Close it with ``aclose()`` or ``async with`` to release the
    connection pool; the backend has no logout call.

    Attributes:
        session: The game session.
        hwid: Hardware ID sent with the login; fixed for the client's lifetime.
        transport: Request client used for every call.
    """

    session: Session
    hwid: str = field(repr=False)
    transport: RequestClient = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.session.session:
            raise ValueError("session cannot be empty")
        if not self.hwid:
            raise ValueError("hwid cannot be empty")

    # -------------------------------------------------------------------------
    # Login entry points
    # -------------------------------------------------------------------------

    @classmethod
    async def login(
        cls,
        email: str,
        password: str,
        hwid: str,
        *,
        config: Config | None = None,
        transport: RequestClient | None = None,
    ) -> Client:
        """
        Login with email and password.

        Raises:
            ApiError: ``INVALID_PARAMETERS`` for blank input (no request is
                sent), ``CAPTCHA_REQUIRED`` / ``TWO_FACTOR_REQUIRED`` when the
                caller must retry with ``login_with_captcha`` /
                ``login_with_two_factor``, or any other classified failure.
            TransportError: The handshake failed below the API envelope.
        """
        validate_fields(email=email, password=password, hwid=hwid)
        auth_input = Credentials(email=email, password_hash=hash_password(password), hwid=hwid)
        return await cls._establish(auth_input, config, transport)

    @classmethod
    async def login_with_captcha(
        cls,
        email: str,
        password: str,
        captcha: str,
        hwid: str,
        *,
        config: Config | None = None,
        transport: RequestClient | None = None,
    ) -> Client:
        """Login with email, password and a solved captcha token."""
        validate_fields(email=email, password=password, captcha=captcha, hwid=hwid)
        auth_input = CredentialsWithCaptcha(
            email=email,
            password_hash=hash_password(password),
            captcha=captcha,
            hwid=hwid,
        )
        return await cls._establish(auth_input, config, transport)

    @classmethod
    async def login_with_two_factor(
        cls,
        email: str,
        password: str,
        code: str,
        hwid: str,
        *,
        captcha: str | None = None,
        config: Config | None = None,
        transport: RequestClient | None = None,
    ) -> Client:
        """
        Login with email, password and the emailed 2FA code.

        The hardware ID is activated with ``code`` first; if activation fails
        the credentials are never submitted. ``captcha`` is sent with the
        credentials when the backend asked for both.
        """
        validate_fields(email=email, password=password, code=code, hwid=hwid)
        if captcha is not None:
            validate_fields(captcha=captcha)
        auth_input = TwoFactorActivation(
            email=email,
            password_hash=hash_password(password),
            code=code,
            hwid=hwid,
            captcha=captcha,
        )
        return await cls._establish(auth_input, config, transport)

    @classmethod
    async def from_access_token(
        cls,
        access_token: str,
        hwid: str,
        *,
        config: Config | None = None,
        transport: RequestClient | None = None,
    ) -> Client:
        """Skip the credential step and exchange an existing access token."""
        validate_fields(access_token=access_token, hwid=hwid)
        auth_input = BearerToken(access_token=access_token, hwid=hwid)
        return await cls._establish(auth_input, config, transport)

    @classmethod
    def from_session(
        cls,
        session: str,
        hwid: str | None = None,
        *,
        config: Config | None = None,
        transport: RequestClient | None = None,
    ) -> Client:
        """
        Wrap an existing session id without any network call.

        The session is unverified until the first call. A hardware ID is
        generated when none is given.
        """
        hwid = hwid if hwid is not None else generate_hwid()
        validate_fields(session=session, hwid=hwid)
        return cls(
            session=Session(session=session),
            hwid=hwid,
            transport=transport or RequestClient(config or Config()),
        )

    @classmethod
    async def _establish(
        cls,
        auth_input: AuthInput,
        config: Config | None,
        transport: RequestClient | None,
    ) -> Client:
        owned = transport is None
        transport = transport or RequestClient(config or Config())
        try:
            session = await authenticate(transport, auth_input)
        except BaseException:
            if owned:
                await transport.aclose()
            raise

        return cls(session=session, hwid=auth_input.hwid, transport=transport)

    # -------------------------------------------------------------------------
    # Calls
    # -------------------------------------------------------------------------

    @property
    def config(self) -> Config:
        return self.transport.config

    async def call(self, url: str, body: Any = None, *, payload_required: bool = True) -> Any:
        """
        Session-authenticated request; the primitive all feature calls use.

        Raises:
            ApiError: The backend rejected the request.
            TransportError: The request failed below the API envelope.
            ContractViolationError: Success without a required payload.
        """
        return await self.transport.call(
            url,
            body,
            SessionCookieAuth(self.session.session),
            payload_required=payload_required,
        )

    async def keep_alive(self) -> None:
        """
        Keep the current session alive.

        The backend drops idle sessions after about 30 seconds, after which
        calls fail with ``NOT_AUTHORIZED``. Scheduling is up to the caller;
        ``tarkov_api.keepalive.run_keep_alive`` is a ready-made loop.
        """
        await self.call(self.config.keep_alive_url, payload_required=False)
        logger.debug("Keep-alive acknowledged")

    # -------------------------------------------------------------------------
    # Resource management
    # -------------------------------------------------------------------------

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
