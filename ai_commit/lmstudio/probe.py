"""
Reachability check against the OpenAI-compatible model listing endpoint.
"""

import aiohttp
from loguru import logger


PROBE_TIMEOUT = 2.0


def models_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/models"


async def is_server_reachable(base_url: str, api_key: str, timeout: float = PROBE_TIMEOUT) -> bool:
    """Check whether `{base_url}/models` answers with a 2xx status.

    Never raises: connection errors, timeouts and bad URLs all count as
    unreachable.
    """
    url = models_url(base_url)
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=aiohttp.ClientTimeout(total=timeout)
            ) as response:
                reachable = 200 <= response.status < 300
                if not reachable:
                    logger.debug(f"LM Studio probe got HTTP {response.status} from {url}")
                return reachable
    except Exception as e:
        logger.debug(f"LM Studio probe failed for {url}: {e!r}")
        return False
