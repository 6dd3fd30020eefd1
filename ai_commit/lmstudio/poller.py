"""
Polls the server until it answers or a deadline passes.
"""

import asyncio
from typing import Awaitable, Callable, Optional
from loguru import logger

from .probe import is_server_reachable


ProbeFunc = Callable[[str, str], Awaitable[bool]]

DEFAULT_MAX_WAIT = 30.0
DEFAULT_INTERVAL = 1.0


async def wait_for_server(
    base_url: str,
    api_key: str,
    max_wait: float = DEFAULT_MAX_WAIT,
    interval: float = DEFAULT_INTERVAL,
    probe: Optional[ProbeFunc] = None,
    on_attempt: Optional[Callable[[int], None]] = None,
) -> bool:
    """Return True on the first successful probe, False once `max_wait` elapses.

    Every failed probe is followed by a sleep of exactly `interval`.
    """
    probe = probe or is_server_reachable
    loop = asyncio.get_running_loop()
    started = loop.time()
    attempt = 0

    while loop.time() - started < max_wait:
        attempt += 1
        if on_attempt:
            on_attempt(attempt)
        if await probe(base_url, api_key):
            logger.debug(f"Server reachable after {attempt} attempt(s)")
            return True
        await asyncio.sleep(interval)

    logger.debug(f"Server not reachable after {attempt} attempt(s) in {max_wait:g}s")
    return False
