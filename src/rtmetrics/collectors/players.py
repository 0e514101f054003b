"""
Player count over HTTP.

The server publishes its connected players as a JSON array at
``http://<endpoint>/players.json``; the count is the array length.
"""

import logging
from typing import Optional

from ..host.interfaces import PlayerSource
from ..validation import CollectionError
from .http_client import HttpFetcher

logger = logging.getLogger(__name__)


class HttpPlayerCountFetcher(HttpFetcher):
    """Reads the player count of any server endpoint."""

    async def fetch_player_count(self, endpoint: str) -> int:
        """
        Fetch the number of players connected to a server.

        Args:
            endpoint: ``host:port`` of the server

        Raises:
            CollectionError: If the request fails or the reply is not a JSON array
        """
        url = f"http://{endpoint}/players.json"
        players = await self._get_json(url)
        if not isinstance(players, list):
            raise CollectionError(f"GET {url} did not return a JSON array")
        return len(players)


class HttpPlayerSource(PlayerSource):
    """PlayerSource reading a fixed endpoint."""

    def __init__(self, endpoint: str, fetcher: Optional[HttpPlayerCountFetcher] = None):
        self.endpoint = endpoint
        self.fetcher = fetcher or HttpPlayerCountFetcher()

    async def get_online_count(self) -> int:
        return await self.fetcher.fetch_player_count(self.endpoint)
