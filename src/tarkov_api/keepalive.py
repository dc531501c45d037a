"""Periodic session keep-alive.

The backend forgets a session after roughly 30 idle seconds. ``Client``
only exposes the single ``keep_alive()`` call; this module is the timer loop
around it for callers that have nothing better to schedule it with.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tarkov_api.client import Client
from tarkov_api.config import SESSION_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_KEEP_ALIVE_INTERVAL = 20.0


async def run_keep_alive(
    client: Client,
    interval: float = DEFAULT_KEEP_ALIVE_INTERVAL,
    *,
    beats: int | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> int:
    """
    Call ``client.keep_alive()`` every ``interval`` seconds.

    The first beat is sent immediately. Errors are not retried: the first
    failing beat propagates, since a lapsed session cannot be revived by
    calling again.

    Args:
        client: The client whose session to keep.
        interval: Seconds between beats; must be below the server timeout.
        beats: Stop after this many successful beats. ``None`` runs until
            cancelled or until a beat fails.
        sleep: Awaitable sleep, replaceable in tests.

    Returns:
        int: Number of successful beats.

    Raises:
        ValueError: If ``interval`` is not in ``(0, SESSION_TIMEOUT)`` or
            ``beats`` is negative.
        TarkovError: From the first failing beat.
    """
    if not 0 < interval < SESSION_TIMEOUT:
        raise ValueError(
            f"interval must be greater than 0 and below the {SESSION_TIMEOUT:g}s session timeout"
        )
    if beats is not None and beats < 0:
        raise ValueError("beats cannot be negative")

    sent = 0
    while beats is None or sent < beats:
        if sent:
            await sleep(interval)
        await client.keep_alive()
        sent += 1
        logger.debug("Keep-alive beat %d sent", sent)

    return sent
