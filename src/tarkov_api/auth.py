"""
Login state machine.

Turning credentials into a game session takes up to three launcher calls:

    1. (2FA only) activate the hardware ID with the emailed code
    2. submit email + MD5(password) (+ captcha) -> access token
    3. exchange the access token for a session

The flow is::

    START -> CREDENTIALS_SUBMITTED -> TWO_FACTOR_PENDING
                                   -> CAPTCHA_PENDING
                                   -> TOKEN_EXCHANGE_PENDING -> SESSION_ESTABLISHED

The two *_PENDING states are not retried here. ``LoginFlow.run`` stops in
them and re-raises the ``ApiError`` so the caller can collect the captcha or
code and start a new attempt with the matching ``AuthInput``.

All five login entry points on ``Client`` are thin adapters that build an
``AuthInput`` and hand it to ``LoginFlow``.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from tarkov_api.api.envelope import payload_int, require_object
from tarkov_api.api.errors import ApiError, ContractViolationError, ErrorKind
from tarkov_api.api.transport import BearerAuth, NoAuth, RequestClient

logger = logging.getLogger(__name__)


# =============================================================================
# DATA
# =============================================================================


class LoginState(Enum):
    """Where a login attempt currently stands."""

    START = "start"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    TWO_FACTOR_PENDING = "two_factor_pending"
    CAPTCHA_PENDING = "captcha_pending"
    TOKEN_EXCHANGE_PENDING = "token_exchange_pending"
    SESSION_ESTABLISHED = "session_established"


@dataclass(frozen=True)
class Session:
    """
    Game session issued by the token exchange.

    Attributes:
        session: Opaque session id, sent as the ``PHPSESSID`` cookie.
        queued: True if the backend placed the login in a wait queue.
    """

    session: str = field(repr=False)
    queued: bool = False

    @classmethod
    def from_json(cls, data: Any) -> Session:
        data = require_object(data, "token exchange payload")
        session = data.get("session") or ""
        if not isinstance(session, str) or not session:
            raise ContractViolationError("token exchange succeeded without a session id")
        return cls(session=session, queued=bool(data.get("queued", False)))


@dataclass(frozen=True)
class AccessGrant:
    """Tokens returned by a successful credential submission."""

    access_token: str = field(repr=False)
    refresh_token: str = field(default="", repr=False)
    token_type: str = ""
    expires_in: int = 0

    @classmethod
    def from_json(cls, data: Any) -> AccessGrant:
        data = require_object(data, "login payload")
        access_token = data.get("access_token") or ""
        if not isinstance(access_token, str) or not access_token:
            raise ContractViolationError("login succeeded without an access token")
        return cls(
            access_token=access_token,
            refresh_token=data.get("refresh_token") or "",
            token_type=data.get("token_type") or "",
            expires_in=payload_int(data.get("expires_in"), "expires_in"),
        )


# -----------------------------------------------------------------------------
# Auth inputs. Passwords are stored as MD5 hex digests only.
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Credentials:
    email: str
    password_hash: str = field(repr=False)
    hwid: str = field(repr=False)


@dataclass(frozen=True)
class CredentialsWithCaptcha:
    email: str
    password_hash: str = field(repr=False)
    captcha: str = field(repr=False)
    hwid: str = field(repr=False)


@dataclass(frozen=True)
class TwoFactorActivation:
    email: str
    password_hash: str = field(repr=False)
    code: str = field(repr=False)
    hwid: str = field(repr=False)
    captcha: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class BearerToken:
    access_token: str = field(repr=False)
    hwid: str = field(repr=False)


@dataclass(frozen=True)
class ExistingSession:
    session: str = field(repr=False)
    hwid: str = field(repr=False)


AuthInput = Union[
    Credentials,
    CredentialsWithCaptcha,
    TwoFactorActivation,
    BearerToken,
    ExistingSession,
]


# =============================================================================
# HELPERS
# =============================================================================


def hash_password(password: str) -> str:
    """
    Hash a password the way the launcher does.

    MD5 is what the backend expects on the wire; it is not a choice this
    client gets to make.
    """
    return hashlib.md5(password.encode("utf-8"), usedforsecurity=False).hexdigest()  # nosec B324


def validate_fields(**fields: str | None) -> None:
    """
    Reject blank login parameters before anything touches the network.

    Raises:
        ApiError: ``INVALID_PARAMETERS`` naming every blank field.
    """
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ApiError.invalid_parameters(*missing)


# =============================================================================
# LAUNCHER CALLS
# =============================================================================


async def activate_hardware(transport: RequestClient, email: str, code: str, hwid: str) -> None:
    """Bind ``hwid`` to the account using the emailed 2FA ``code``."""
    body = {"email": email, "hwCode": hwid, "activateCode": code}
    await transport.call(
        transport.config.activate_hardware_url,
        body,
        NoAuth(),
        payload_required=False,
    )


async def submit_credentials(
    transport: RequestClient,
    email: str,
    password_hash: str,
    hwid: str,
    captcha: str | None = None,
) -> AccessGrant:
    """Submit email and hashed password, returning the access grant."""
    body = {"email": email, "pass": password_hash, "hwCode": hwid, "captcha": captcha}
    data = await transport.call(transport.config.login_url, body, NoAuth())
    return AccessGrant.from_json(data)


async def exchange_access_token(transport: RequestClient, access_token: str, hwid: str) -> Session:
    """Trade an access token for a game session."""
    config = transport.config
    body = {
        "version": {
            "major": config.game_version,
            "game": config.branch,
            "backend": config.backend_version,
        },
        "hwCode": hwid,
    }
    data = await transport.call(config.exchange_url, body, BearerAuth(access_token))
    return Session.from_json(data)


# =============================================================================
# STATE MACHINE
# =============================================================================

# Credential-step failures that park the attempt waiting for user input.
_PENDING_STATES = {
    ErrorKind.TWO_FACTOR_REQUIRED: LoginState.TWO_FACTOR_PENDING,
    ErrorKind.CAPTCHA_REQUIRED: LoginState.CAPTCHA_PENDING,
}


@dataclass
class LoginFlow:
    """
    One login attempt driven from an ``AuthInput`` to a ``Session``.

    Attributes:
        transport: Client used for every launcher call.
        auth_input: What the caller supplied.
        state: Current state; inspect it after a failure to see how far the
            attempt got.

    Example:
        flow = LoginFlow(transport, Credentials(email, hash_password(pw), hwid))
        try:
            session = await flow.run()
        except ApiError:
            if flow.state is LoginState.CAPTCHA_PENDING:
                ...
    """

    transport: RequestClient
    auth_input: AuthInput
    state: LoginState = LoginState.START

    def _advance(self, state: LoginState) -> None:
        logger.debug("Login %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self) -> Session:
        """
        Drive the attempt to completion.

        Returns:
            Session: The established session.

        Raises:
            ApiError: Any step was rejected; ``state`` shows where.
            TransportError: Any step failed below the API envelope.
        """
        if self.state is not LoginState.START:
            raise RuntimeError("LoginFlow.run() can only be called once per attempt")

        auth_input = self.auth_input

        if isinstance(auth_input, ExistingSession):
            session = Session(session=auth_input.session)
            self._advance(LoginState.SESSION_ESTABLISHED)
            return session

        if isinstance(auth_input, BearerToken):
            access_token = auth_input.access_token
        else:
            access_token = await self._submit_credentials(auth_input)

        self._advance(LoginState.TOKEN_EXCHANGE_PENDING)
        session = await exchange_access_token(self.transport, access_token, auth_input.hwid)

        self._advance(LoginState.SESSION_ESTABLISHED)
        if session.queued:
            logger.info("Session established; backend placed the login in a queue")
        else:
            logger.info("Session established")
        return session

    async def _submit_credentials(
        self, auth_input: Credentials | CredentialsWithCaptcha | TwoFactorActivation
    ) -> str:
        if isinstance(auth_input, TwoFactorActivation):
            logger.info("Activating hardware id for %s", auth_input.email)
            await activate_hardware(
                self.transport, auth_input.email, auth_input.code, auth_input.hwid
            )

        captcha: str | None = None
        if isinstance(auth_input, (CredentialsWithCaptcha, TwoFactorActivation)):
            captcha = auth_input.captcha

        self._advance(LoginState.CREDENTIALS_SUBMITTED)
        try:
            grant = await submit_credentials(
                self.transport,
                auth_input.email,
                auth_input.password_hash,
                auth_input.hwid,
                captcha,
            )
        except ApiError as e:
            pending = _PENDING_STATES.get(e.kind)
            if pending is not None:
                logger.warning("Login for %s needs more input: %s", auth_input.email, e)
                self._advance(pending)
            raise

        return grant.access_token


async def authenticate(transport: RequestClient, auth_input: AuthInput) -> Session:
    """Run a fresh ``LoginFlow`` for ``auth_input``."""
    return await LoginFlow(transport, auth_input).run()
