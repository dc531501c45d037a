"""Unofficial async client for the Escape from Tarkov game backend.

Log in with ``Client.login``, ``Client.from_access_token`` or
``Client.from_session``. A new session must select a profile with
``select_profile`` before most calls are accepted, and must be kept alive
with ``Client.keep_alive`` at least every 30 seconds.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from tarkov_api.api.errors import (
    ApiError,
    CodecError,
    ContractViolationError,
    ErrorKind,
    HttpStatusError,
    NetworkError,
    TarkovError,
    TransportError,
)
from tarkov_api.auth import LoginState, Session
from tarkov_api.client import Client
from tarkov_api.config import Config
from tarkov_api.hwid import generate_hwid

# ---------------------------------------------------------------------------
# Package version, read from pyproject.toml via importlib.metadata.
#
# If the package is imported without being installed we fall back to a
# "-dev" version so imports still work from a source checkout.
# ---------------------------------------------------------------------------
try:
    __version__: str = version("tarkov-api")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "ApiError",
    "Client",
    "CodecError",
    "Config",
    "ContractViolationError",
    "ErrorKind",
    "HttpStatusError",
    "LoginState",
    "NetworkError",
    "Session",
    "TarkovError",
    "TransportError",
    "__version__",
    "generate_hwid",
]
