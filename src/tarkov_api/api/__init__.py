"""
Request pipeline for the Tarkov backend.

This package contains the transport layer every API call goes through:
the envelope codec, the numeric error taxonomy and the request client that
ties them to httpx.

Example:
    from tarkov_api.api import ApiError, ErrorKind, RequestClient

    async with RequestClient(config) as transport:
        data = await transport.call(config.login_url, body)
"""

from tarkov_api.api.envelope import Envelope
from tarkov_api.api.errors import (
    ApiError,
    CodecError,
    ContractViolationError,
    ErrorKind,
    HttpStatusError,
    NetworkError,
    TarkovError,
    TransportError,
    classify,
)
from tarkov_api.api.transport import (
    AuthMode,
    BearerAuth,
    NoAuth,
    RequestClient,
    SessionCookieAuth,
)

__all__ = [
    "ApiError",
    "AuthMode",
    "BearerAuth",
    "CodecError",
    "ContractViolationError",
    "Envelope",
    "ErrorKind",
    "HttpStatusError",
    "NetworkError",
    "NoAuth",
    "RequestClient",
    "SessionCookieAuth",
    "TarkovError",
    "TransportError",
    "classify",
]
