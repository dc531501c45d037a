"""
Command-line interface for the Tarkov API client.

Provides CLI commands for working with sessions:
- login: Log in (prompting for captcha / 2FA when asked) and print the session id
- keepalive: Keep an existing session alive
- hwid: Print a freshly generated hardware ID

Usage:
    tarkov-api login [--email EMAIL] [--password PASSWORD] [--hwid HWID] [--keep-alive]
    tarkov-api keepalive [--session SESSION] [--interval SECONDS]
    tarkov-api hwid

Environment Variables:
    TARKOV_EMAIL: Account email (used by login if --email is not given)
    TARKOV_PASSWORD: Account password (used by login if --password is not given)
    TARKOV_HWID: Hardware ID to log in with (default: freshly generated)
    TARKOV_SESSION: Session id for keepalive
    TARKOV_REQUEST_TIMEOUT, TARKOV_LOG_LEVEL, TARKOV_*_URL: see tarkov_api.config
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import os
import sys
from collections.abc import Callable, Sequence

from tarkov_api.api.errors import ApiError, ErrorKind, TarkovError
from tarkov_api.client import Client
from tarkov_api.config import SESSION_TIMEOUT, Config
from tarkov_api.hwid import generate_hwid
from tarkov_api.keepalive import DEFAULT_KEEP_ALIVE_INTERVAL, run_keep_alive

ENV_EMAIL = "TARKOV_EMAIL"
ENV_PASSWORD = "TARKOV_PASSWORD"  # nosec B105 - environment variable name
ENV_HWID = "TARKOV_HWID"
ENV_SESSION = "TARKOV_SESSION"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_credentials_from_env() -> tuple[str, str] | None:
    """
    Get login credentials from environment variables.

    Returns:
        Tuple of (email, password) if both TARKOV_EMAIL and TARKOV_PASSWORD are set.
        None if either is missing.
    """
    email = os.environ.get(ENV_EMAIL)
    password = os.environ.get(ENV_PASSWORD)

    if email and password:
        return email, password
    return None


def prompt_for_credentials(email: str | None = None) -> tuple[str, str]:
    """
    Interactively prompt for whatever part of the credentials is missing.

    Raises:
        SystemExit: If the user cancels (Ctrl+C) during input.
    """
    try:
        while not email:
            email = input("Email: ").strip()
        password = ""
        while not password:
            password = getpass.getpass("Password: ")
    except (KeyboardInterrupt, EOFError):
        print()
        raise SystemExit(1) from None
    return email, password


def build_config(args: argparse.Namespace) -> Config:
    """Resolve configuration with precedence CLI > environment > defaults."""
    log_level = "DEBUG" if getattr(args, "verbose", False) else None
    return Config.from_env().with_overrides(
        timeout=getattr(args, "timeout", None),
        log_level=log_level,
    )


def configure_logging(config: Config) -> None:
    logging.basicConfig(level=config.numeric_log_level, format=LOG_FORMAT)


# ============================================================================
# LOGIN
# ============================================================================


async def login_interactively(
    email: str,
    password: str,
    hwid: str,
    config: Config,
    prompt: Callable[[str], str] = input,
) -> Client:
    """
    Log in, asking the user for a captcha or 2FA code when the backend wants one.

    Each kind of extra input is asked for at most once; a second request for
    the same thing propagates the ``ApiError``.

    Raises:
        ApiError: Any rejection that cannot be fixed by prompting.
        TransportError: The handshake failed below the API envelope.
    """
    captcha: str | None = None
    code: str | None = None
    activated = False

    while True:
        try:
            if code is not None and not activated:
                return await Client.login_with_two_factor(
                    email, password, code, hwid, captcha=captcha, config=config
                )
            if captcha is not None:
                return await Client.login_with_captcha(
                    email, password, captcha, hwid, config=config
                )
            return await Client.login(email, password, hwid, config=config)
        except ApiError as e:
            if e.kind is ErrorKind.CAPTCHA_REQUIRED and captcha is None:
                # Only the credential step asks for a captcha, so any code is already spent
                activated = code is not None
                captcha = prompt("Captcha required. Solved captcha response: ").strip()
            elif e.kind is ErrorKind.TWO_FACTOR_REQUIRED and code is None:
                code = prompt("2FA required. Code from your email: ").strip()
            else:
                raise


async def _login_and_maybe_keep_alive(args: argparse.Namespace, config: Config) -> int:
    email, password = _resolve_credentials(args)
    hwid = args.hwid or os.environ.get(ENV_HWID)
    if not hwid:
        hwid = generate_hwid()
        print(
            "Generated a new hardware ID. Reuse it with --hwid to skip 2FA next time:\n" + hwid,
            file=sys.stderr,
        )

    client = await login_interactively(email, password, hwid, config)
    async with client:
        if client.session.queued:
            print("Login was queued by the backend.", file=sys.stderr)
        print(client.session.session)
        if args.keep_alive:
            await run_keep_alive(client, args.interval)
    return 0


def _resolve_credentials(args: argparse.Namespace) -> tuple[str, str]:
    email = args.email
    password = args.password
    if email and password:
        return email, password

    env_creds = get_credentials_from_env()
    if env_creds:
        return email or env_creds[0], password or env_creds[1]

    return prompt_for_credentials(email)


def cmd_login(args: argparse.Namespace) -> int:
    """
    Log in and print the session id.

    Credentials come from --email/--password, then TARKOV_EMAIL/TARKOV_PASSWORD,
    then interactive prompts.

    Returns:
        0 on success (or clean shutdown with Ctrl+C), 1 on error
    """
    config = build_config(args)
    configure_logging(config)

    if args.keep_alive and not 0 < args.interval < SESSION_TIMEOUT:
        print(f"Error: --interval must be below {SESSION_TIMEOUT:g} seconds.", file=sys.stderr)
        return 2

    try:
        return asyncio.run(_login_and_maybe_keep_alive(args, config))
    except TarkovError as e:
        print(f"Login failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


# ============================================================================
# KEEPALIVE
# ============================================================================


async def _keep_session_alive(session: str, args: argparse.Namespace, config: Config) -> int:
    async with Client.from_session(session, args.hwid, config=config) as client:
        await run_keep_alive(client, args.interval, beats=args.beats)
    return 0


def cmd_keepalive(args: argparse.Namespace) -> int:
    """
    Keep an existing session alive until interrupted or it lapses.

    Returns:
        0 on clean shutdown, 1 when the session is rejected, 2 on bad arguments
    """
    config = build_config(args)
    configure_logging(config)

    session = args.session or os.environ.get(ENV_SESSION)
    if not session:
        print(f"Error: no session given. Use --session or set {ENV_SESSION}.", file=sys.stderr)
        return 2

    if not 0 < args.interval < SESSION_TIMEOUT:
        print(f"Error: --interval must be below {SESSION_TIMEOUT:g} seconds.", file=sys.stderr)
        return 2

    try:
        return asyncio.run(_keep_session_alive(session, args, config))
    except TarkovError as e:
        print(f"Keep-alive failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


# ============================================================================
# HWID
# ============================================================================


def cmd_hwid(args: argparse.Namespace) -> int:
    """Print a freshly generated hardware ID."""
    print(generate_hwid())
    return 0


# ============================================================================
# ENTRY POINT
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tarkov-api",
        description="Unofficial Escape from Tarkov API client",
    )
    parser.add_argument(
        "--timeout",
        "-t",
        type=float,
        default=None,
        help="Request timeout in seconds (default: 30, or TARKOV_REQUEST_TIMEOUT env var)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every request at DEBUG level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # login command
    login_parser = subparsers.add_parser(
        "login",
        help="Log in and print the session id",
        description=(
            "Log in with email and password. Prompts for a captcha or 2FA code "
            "when the backend asks for one."
        ),
    )
    login_parser.add_argument("--email", "-e", help="Account email (or TARKOV_EMAIL env var)")
    login_parser.add_argument(
        "--password", "-p", help="Account password (or TARKOV_PASSWORD env var)"
    )
    login_parser.add_argument("--hwid", help="Hardware ID (or TARKOV_HWID env var)")
    login_parser.add_argument(
        "--keep-alive",
        action="store_true",
        help="Keep the new session alive until interrupted",
    )
    login_parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_KEEP_ALIVE_INTERVAL,
        help=f"Seconds between keep-alive calls (default: {DEFAULT_KEEP_ALIVE_INTERVAL:g})",
    )
    login_parser.set_defaults(func=cmd_login)

    # keepalive command
    keepalive_parser = subparsers.add_parser(
        "keepalive",
        help="Keep an existing session alive",
    )
    keepalive_parser.add_argument("--session", "-s", help="Session id (or TARKOV_SESSION env var)")
    keepalive_parser.add_argument("--hwid", help="Hardware ID the session was created with")
    keepalive_parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_KEEP_ALIVE_INTERVAL,
        help=f"Seconds between keep-alive calls (default: {DEFAULT_KEEP_ALIVE_INTERVAL:g})",
    )
    keepalive_parser.add_argument(
        "--beats",
        type=int,
        default=None,
        help="Stop after this many keep-alive calls (default: run until interrupted)",
    )
    keepalive_parser.set_defaults(func=cmd_keepalive)

    # hwid command
    hwid_parser = subparsers.add_parser("hwid", help="Print a generated hardware ID")
    hwid_parser.set_defaults(func=cmd_hwid)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
