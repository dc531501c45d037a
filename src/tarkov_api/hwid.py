"""Hardware ID generation.

The backend binds accounts to a client fingerprint string made of MD5
segments. Any value in the expected layout is accepted, so a random one is
generated once per installation and reused for every login.
"""

from __future__ import annotations

import hashlib
import secrets

HWID_PREFIX = "#1-"
HWID_LENGTH = 258


def _random_md5() -> str:
    # md5 here is a fingerprint format, not a security primitive
    return hashlib.md5(secrets.token_bytes(4), usedforsecurity=False).hexdigest()  # nosec B324


def generate_hwid() -> str:
    """
    Generate a random hardware ID in the layout the launcher produces.

    Returns:
        str: ``#1-<md5>:<md5>:<md5>-<md5>-<md5>-<md5>-<md5>-<md5 minus 8 chars>``,
        258 characters long.
    """
    short_md5 = _random_md5()[:-8]
    return (
        f"{HWID_PREFIX}{_random_md5()}:{_random_md5()}:{_random_md5()}"
        f"-{_random_md5()}-{_random_md5()}-{_random_md5()}-{_random_md5()}"
        f"-{short_md5}"
    )
