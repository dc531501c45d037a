"""Error taxonomy and typed exceptions for the request pipeline.

The backend answers almost every request with HTTP 200 and reports the
business outcome as a numeric ``err`` code inside the response envelope.
This module maps those codes onto a closed ``ErrorKind`` enum and defines
the exception hierarchy raised by the rest of the package.

Design intent:
    - ``classify`` is total: any integer maps to exactly one kind, and codes
      the table does not know become ``UNKNOWN_API_ERROR``. The raw code is
      always kept on the raised ``ApiError``.
    - Transport failures (network, HTTP status, undecodable body) and API
      failures (non-zero ``err``) are separate exception families so callers
      never confuse "the server said no" with "we never heard the server".
    - A success envelope that lacks its payload is a client/backend mismatch,
      raised as ``ContractViolationError`` outside the ``TarkovError`` family
      so broad ``except TarkovError`` handlers do not hide it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Classification of an embedded response code."""

    SUCCESS = "success"
    NOT_AUTHORIZED = "not authorized or game profile not selected"
    INVALID_USER_SELECTION = "invalid user id selected"
    BAD_CREDENTIALS = "bad login, invalid email or password"
    INVALID_PARAMETERS = "invalid or missing parameters"
    TWO_FACTOR_REQUIRED = "2fa is required"
    BAD_TWO_FACTOR_CODE = "bad 2fa code"
    CAPTCHA_REQUIRED = "captcha is required"
    RATE_LIMITED = "rate limited"
    WRONG_CLIENT_VERSION = "wrong client version"
    MARKET_INVALID_BARTER_ITEMS = "invalid barter items"
    MARKET_MAX_OFFER_COUNT = "maximum offer count reached"
    MARKET_INSUFFICIENT_FUNDS = "insufficient funds to pay the flea market fee"
    MARKET_OFFER_NOT_FOUND = "offer not found, sold out or out of stock"
    TRADE_BAD_LOYALTY_LEVEL = "loyalty level is not high enough"
    MARKET_OFFER_NOT_AVAILABLE_YET = "offer is not available yet"
    TRADE_TRANSACTION_ERROR = "transaction error"
    MAINTENANCE = "api is down for maintenance"
    BACKEND_ERROR = "backend error"
    UNKNOWN_API_ERROR = "unidentified api error"

    @property
    def description(self) -> str:
        return self.value

    @property
    def requires_user_input(self) -> bool:
        """True when a retry only makes sense after the user supplies something."""
        return self in _USER_INPUT_KINDS


_USER_INPUT_KINDS = frozenset(
    {
        ErrorKind.TWO_FACTOR_REQUIRED,
        ErrorKind.CAPTCHA_REQUIRED,
        ErrorKind.RATE_LIMITED,
    }
)

SUCCESS_CODE = 0
INVALID_PARAMETERS_CODE = 207

# Codes observed from the backend. Anything else is UNKNOWN_API_ERROR.
ERROR_CODES: dict[int, ErrorKind] = {
    SUCCESS_CODE: ErrorKind.SUCCESS,
    201: ErrorKind.NOT_AUTHORIZED,
    205: ErrorKind.INVALID_USER_SELECTION,
    206: ErrorKind.BAD_CREDENTIALS,
    INVALID_PARAMETERS_CODE: ErrorKind.INVALID_PARAMETERS,
    209: ErrorKind.TWO_FACTOR_REQUIRED,
    211: ErrorKind.BAD_TWO_FACTOR_CODE,
    214: ErrorKind.CAPTCHA_REQUIRED,
    228: ErrorKind.MARKET_INVALID_BARTER_ITEMS,
    230: ErrorKind.RATE_LIMITED,
    232: ErrorKind.WRONG_CLIENT_VERSION,
    263: ErrorKind.MAINTENANCE,
    1000: ErrorKind.BACKEND_ERROR,
    1501: ErrorKind.MARKET_MAX_OFFER_COUNT,
    1502: ErrorKind.MARKET_INSUFFICIENT_FUNDS,
    1507: ErrorKind.MARKET_OFFER_NOT_FOUND,
    1510: ErrorKind.TRADE_BAD_LOYALTY_LEVEL,
    1512: ErrorKind.MARKET_OFFER_NOT_AVAILABLE_YET,
    1514: ErrorKind.TRADE_TRANSACTION_ERROR,
}


def classify(code: int) -> ErrorKind:
    """Map an embedded response code to its ``ErrorKind``.

    Only ``0`` is success. Unrecognised codes, including negative ones, are
    ``UNKNOWN_API_ERROR``.
    """
    return ERROR_CODES.get(code, ErrorKind.UNKNOWN_API_ERROR)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class TarkovError(Exception):
    """Base exception for failures raised by the request pipeline."""


@dataclass
class ApiError(TarkovError):
    """
    The backend rejected a request with a non-zero embedded code.

    Attributes:
        kind: Classified failure. Match on this to drive retries, e.g.
            re-prompt for a captcha on ``ErrorKind.CAPTCHA_REQUIRED``.
        code: The raw ``err`` value from the envelope. ``None`` when the
            failure was detected locally before any request was sent.
        message: The ``errmsg`` string from the envelope, if any.

    Example:
        try:
            client = await Client.login(email, password, hwid)
        except ApiError as e:
            if e.kind is ErrorKind.CAPTCHA_REQUIRED:
                client = await Client.login_with_captcha(email, password, captcha, hwid)
            else:
                raise
    """

    kind: ErrorKind
    code: int | None = None
    message: str | None = None

    def __str__(self) -> str:
        """Return a formatted error message."""
        text = self.kind.description
        if self.kind is ErrorKind.UNKNOWN_API_ERROR:
            text = f"{text} with error code: {self.code}"
        elif self.code is not None:
            text = f"{text} (code {self.code})"
        if self.message:
            text = f"{text}: {self.message}"
        return text

    @classmethod
    def from_code(cls, code: int, message: str | None = None) -> ApiError:
        """Build the error for a non-success envelope code."""
        return cls(kind=classify(code), code=code, message=message)

    @classmethod
    def invalid_parameters(cls, *fields: str) -> ApiError:
        """Local validation failure for blank or missing ``fields``."""
        detail = f"missing {', '.join(fields)}" if fields else None
        return cls(kind=ErrorKind.INVALID_PARAMETERS, code=None, message=detail)


class TransportError(TarkovError):
    """Base exception for failures below the API envelope."""


@dataclass
class NetworkError(TransportError):
    """DNS, TLS, connect, read or timeout failure talking to ``url``."""

    url: str
    detail: str = ""

    def __str__(self) -> str:
        return f"request to {self.url} failed: {self.detail}"


@dataclass
class HttpStatusError(TransportError):
    """The server answered with a non-2xx HTTP status."""

    status_code: int
    url: str = ""

    def __str__(self) -> str:
        return f"non-success response from api: {self.status_code} ({self.url})"


@dataclass
class CodecError(TransportError):
    """
    A response body could not be turned into an envelope.

    Attributes:
        stage: Which step failed: ``"encode"``, ``"inflate"``, ``"utf-8"``,
            ``"json"`` or ``"envelope"``.
        detail: Underlying error text.
    """

    stage: str
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.stage} error: {self.detail}"


class ContractViolationError(RuntimeError):
    """The backend reported success but broke the response contract."""
