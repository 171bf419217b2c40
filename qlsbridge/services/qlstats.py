"""
Client for the QLStats ranking API.

Two calls are used by the bridge: the server directory
(``/server/skillrating``) and the per-server player rankings
(``/server/{ip:port}/players``).
"""

import logging
from typing import List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from ..errors import DirectoryFetchError
from ..schemas import PlayerRanking, PlayersPayload, ServerAddress, ServerSummary

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://api.qlstats.net/api"
KEEPALIVE_CONNECTIONS = 20

_directory_adapter = TypeAdapter(List[ServerSummary])


class QLStatsClient:
    """Thin wrapper over one shared ``httpx.AsyncClient``."""

    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    @classmethod
    def create(
        cls,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "QLStatsClient":
        # No client-side timeout: the request deadline bounds every fetch.
        # No connection cap: every requested server gets its own fetch.
        http = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=None,
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=KEEPALIVE_CONNECTIONS),
            headers={"Accept": "application/json"},
        )
        return cls(http)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_servers(self) -> List[ServerSummary]:
        """Fetch the full list of ranked servers.

        Raises:
            DirectoryFetchError: On any transport, status or decode failure.
        """
        try:
            response = await self._http.get("/server/skillrating")
            response.raise_for_status()
            return _directory_adapter.validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as e:
            logger.error("Error getting ranked servers: %s", e)
            raise DirectoryFetchError(f"server directory unavailable: {e}") from e

    async def fetch_player_rankings(self, address: ServerAddress) -> Optional[List[PlayerRanking]]:
        """Fetch one server's ranked players, tagged with ``address``.

        Returns ``None`` when the fetch fails for any reason; an empty list
        means the server answered with no ranked players.
        """
        try:
            response = await self._http.get(f"/server/{address}/players")
            response.raise_for_status()
            payload = PlayersPayload.model_validate_json(response.content)
        except httpx.HTTPError as e:
            logger.error("Error requesting data for %s: %s", address, e)
            return None
        except ValidationError as e:
            logger.error("JSON decode error for %s: %s", address, e)
            return None

        return [player.attribute(address) for player in payload.players or []]
