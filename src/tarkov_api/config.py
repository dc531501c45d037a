"""
Configuration management for the Tarkov API client.

This module holds the endpoints, version strings and transport settings the
backend expects. Values come from the following sources, highest precedence
first:

1. Command-line arguments (see ``tarkov_api.cli``)
2. Environment variables (TARKOV_PROD_URL, TARKOV_REQUEST_TIMEOUT, ...)
3. Default values

The configuration is immutable once created and is injected into every
``RequestClient``. Nothing in the package reads endpoints from module
globals, so tests can point a client at a mock host.

Example:
    config = Config.from_env()
    print(config.login_url)
    print(config.timeout)     # 30.0 (default)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

# =============================================================================
# DEFAULT CONFIGURATION VALUES
# =============================================================================

DEFAULT_LAUNCHER_URL = "https://launcher.escapefromtarkov.com"
DEFAULT_PROD_URL = "https://prod.escapefromtarkov.com"
DEFAULT_TRADING_URL = "https://trading.escapefromtarkov.com"
DEFAULT_RAGFAIR_URL = "https://ragfair.escapefromtarkov.com"

# Version strings are part of the client fingerprint. The backend answers
# with WRONG_CLIENT_VERSION (232) once a game patch retires them.
DEFAULT_GAME_VERSION = "0.12.5.7295"
DEFAULT_LAUNCHER_VERSION = "10.1.0.1116"
DEFAULT_UNITY_VERSION = "2018.4.13f1"

DEFAULT_BRANCH = "live"
DEFAULT_BACKEND_VERSION = "6"

# Default HTTP request timeout in seconds.
DEFAULT_TIMEOUT = 30.0

DEFAULT_LOG_LEVEL = "WARNING"

# Cookie carrying the game session on authenticated calls.
SESSION_COOKIE_NAME = "PHPSESSID"

# Idle window after which the backend drops a session (observed, not documented).
SESSION_TIMEOUT = 30.0

# Environment variable names for configuration.
ENV_LAUNCHER_URL = "TARKOV_LAUNCHER_URL"
ENV_PROD_URL = "TARKOV_PROD_URL"
ENV_TRADING_URL = "TARKOV_TRADING_URL"
ENV_RAGFAIR_URL = "TARKOV_RAGFAIR_URL"
ENV_GAME_VERSION = "TARKOV_GAME_VERSION"
ENV_LAUNCHER_VERSION = "TARKOV_LAUNCHER_VERSION"
ENV_UNITY_VERSION = "TARKOV_UNITY_VERSION"
ENV_TIMEOUT = "TARKOV_REQUEST_TIMEOUT"
ENV_LOG_LEVEL = "TARKOV_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_URL_FIELDS = ("launcher_url", "prod_url", "trading_url", "ragfair_url")

# Maps Config field name -> environment variable for plain string settings.
_STRING_ENV_FIELDS = {
    "launcher_url": ENV_LAUNCHER_URL,
    "prod_url": ENV_PROD_URL,
    "trading_url": ENV_TRADING_URL,
    "ragfair_url": ENV_RAGFAIR_URL,
    "game_version": ENV_GAME_VERSION,
    "launcher_version": ENV_LAUNCHER_VERSION,
    "unity_version": ENV_UNITY_VERSION,
}


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for the API client.

    Attributes:
        launcher_url: Base URL of the launcher host (login, hardware activation).
        prod_url: Base URL of the game host (token exchange, keep-alive, profiles).
        trading_url: Base URL of the trader host.
        ragfair_url: Base URL of the flea market host.
        game_version: Game client version sent in ``App-Version`` and the
            token exchange.
        launcher_version: Launcher version sent in launcher requests.
        unity_version: Unity engine version sent by the game client.
        branch: Release branch requested at login.
        backend_version: Backend protocol version requested at token exchange.
        timeout: HTTP request timeout in seconds. Applied to all API calls.
        log_level: Level name used by the command line when configuring logging.

    Example:
        config = Config(prod_url="http://localhost:8080", timeout=5.0)
    """

    launcher_url: str = DEFAULT_LAUNCHER_URL
    prod_url: str = DEFAULT_PROD_URL
    trading_url: str = DEFAULT_TRADING_URL
    ragfair_url: str = DEFAULT_RAGFAIR_URL
    game_version: str = DEFAULT_GAME_VERSION
    launcher_version: str = DEFAULT_LAUNCHER_VERSION
    unity_version: str = DEFAULT_UNITY_VERSION
    branch: str = DEFAULT_BRANCH
    backend_version: str = DEFAULT_BACKEND_VERSION
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        """
        Validate configuration values and strip trailing slashes from URLs.

        Raises:
            ValueError: If a URL or version is empty, the timeout is not
                positive, or the log level is unknown.
        """
        for name in _URL_FIELDS:
            url = getattr(self, name).rstrip("/")
            if not url:
                raise ValueError(f"{name} cannot be empty")
            # Remove trailing slash so endpoint paths join cleanly
            object.__setattr__(self, name, url)

        for name in ("game_version", "launcher_version", "unity_version"):
            if not getattr(self, name):
                raise ValueError(f"{name} cannot be empty")

        if self.timeout <= 0:
            raise ValueError("timeout must be a positive number")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")

    # -------------------------------------------------------------------------
    # Header values
    # -------------------------------------------------------------------------

    @property
    def launcher_user_agent(self) -> str:
        """User-Agent sent on launcher calls (login, activation, token exchange)."""
        return f"BSG Launcher {self.launcher_version}"

    @property
    def game_user_agent(self) -> str:
        """User-Agent sent on session-authenticated game calls."""
        return f"UnityPlayer/{self.unity_version} (UnityWebRequest/1.0, libcurl/7.52.0-DEV)"

    @property
    def app_version(self) -> str:
        """Value of the ``App-Version`` header."""
        return f"EFT Client {self.game_version}"

    @property
    def numeric_log_level(self) -> int:
        """The configured log level as a ``logging`` constant."""
        return int(getattr(logging, self.log_level.upper()))

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    @property
    def login_url(self) -> str:
        return (
            f"{self.launcher_url}/launcher/login"
            f"?launcherVersion={self.launcher_version}&branch={self.branch}"
        )

    @property
    def activate_hardware_url(self) -> str:
        return (
            f"{self.launcher_url}/launcher/hardwareCode/activate"
            f"?launcherVersion={self.launcher_version}"
        )

    @property
    def exchange_url(self) -> str:
        return (
            f"{self.prod_url}/launcher/game/start"
            f"?launcherVersion={self.launcher_version}&branch={self.branch}"
        )

    @property
    def keep_alive_url(self) -> str:
        return self.prod_endpoint("/client/game/keepalive")

    def prod_endpoint(self, path: str) -> str:
        """Join ``path`` onto the game host URL."""
        return f"{self.prod_url}{path}"

    def trading_endpoint(self, path: str) -> str:
        """Join ``path`` onto the trader host URL."""
        return f"{self.trading_url}{path}"

    def ragfair_endpoint(self, path: str) -> str:
        """Join ``path`` onto the flea market host URL."""
        return f"{self.ragfair_url}{path}"

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """
        Create a Config from environment variables, falling back to defaults.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            Config: A fully populated configuration object.

        Raises:
            ValueError: If TARKOV_REQUEST_TIMEOUT is not a number, or any
                resolved value fails validation.
        """
        env = os.environ if environ is None else environ
        values: dict[str, str | float] = {}

        for name, env_name in _STRING_ENV_FIELDS.items():
            if env_value := env.get(env_name):
                values[name] = env_value

        if env_timeout := env.get(ENV_TIMEOUT):
            values["timeout"] = float(env_timeout)

        if env_log_level := env.get(ENV_LOG_LEVEL):
            values["log_level"] = env_log_level.upper()

        return cls(**values)  # type: ignore[arg-type]

    def with_overrides(self, **changes: object) -> Config:
        """Return a copy with ``changes`` applied; ``None`` values are ignored."""
        applied = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **applied)  # type: ignore[arg-type]
