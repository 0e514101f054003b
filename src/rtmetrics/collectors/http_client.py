"""
Small aiohttp helpers shared by the HTTP fetchers.
"""

import asyncio
import json
import logging
from typing import Any

import aiohttp

from ..validation import CollectionError

logger = logging.getLogger(__name__)


class HttpFetcher:
    """
    Base class for fetchers that GET a URL on the server.

    A new session is opened per request; collection runs once a minute, so
    there is nothing to gain from keeping connections alive.
    """

    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds

    async def _get_text(self, url: str) -> str:
        """
        GET a URL and return the body as text.

        Raises:
            CollectionError: On connection errors, timeouts and non-200 replies
        """
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            ) as sess:
                async with sess.get(url) as r:
                    if r.status != 200:
                        raise CollectionError(f"GET {url} returned HTTP {r.status}")
                    return await r.text()
        except asyncio.TimeoutError as e:
            raise CollectionError(f"GET {url} timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise CollectionError(f"GET {url} failed: {e}") from e

    async def _get_json(self, url: str) -> Any:
        text = await self._get_text(url)
        try:
            return json.loads(text)
        except ValueError as e:
            raise CollectionError(f"GET {url} did not return valid JSON: {e}") from e
