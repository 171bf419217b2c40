"""
Concurrent fan-out of player ranking fetches.

The aggregator queries every requested server at once, merges the players of
the servers that answered and counts them. A server that fails only lowers
the count; the whole call fails only when the request deadline runs out.
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Set

from ..errors import DeadlineExceeded
from ..schemas import AggregationResult, PlayerRanking, ServerAddress
from .qlstats import QLStatsClient

logger = logging.getLogger(__name__)


class _Accumulator:
    """Merged results of one ``aggregate`` call.

    Players and the success counter only change together, under ``lock``.
    Once sealed, late results are dropped.
    """

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.players: List[PlayerRanking] = []
        self.server_count = 0
        self.sealed = False

    async def add(self, players: List[PlayerRanking]) -> bool:
        async with self.lock:
            if self.sealed:
                return False
            self.players.extend(players)
            self.server_count += 1
            return True

    async def seal(self) -> AggregationResult:
        async with self.lock:
            self.sealed = True
            return AggregationResult(
                ranked_server_count=self.server_count,
                ranked_player_count=len(self.players),
                ranked_players=list(self.players),
            )

    def abandon(self) -> None:
        self.sealed = True


class RankingAggregator:
    def __init__(self, client: QLStatsClient):
        self.client = client
        # Strong references to fetches still running past a deadline.
        self._abandoned: Set["asyncio.Task[None]"] = set()

    @property
    def abandoned_count(self) -> int:
        return len(self._abandoned)

    async def _collect(self, address: ServerAddress, accumulator: _Accumulator) -> None:
        players = await self.client.fetch_player_rankings(address)
        if players is None:
            return
        if not await accumulator.add(players):
            logger.debug("Discarding late result for %s", address)

    async def aggregate(
        self,
        addresses: Sequence[ServerAddress],
        timeout: Optional[float] = None,
    ) -> AggregationResult:
        """Fetch and merge the rankings of every address.

        Args:
            addresses: Servers to query. Duplicates are queried independently.
            timeout: Seconds left before the request deadline; ``None`` waits
                for every fetch.

        Returns:
            AggregationResult: counts and players of the servers that answered.

        Raises:
            DeadlineExceeded: If fetches are still pending when ``timeout``
                elapses. They are left running and their results are discarded.
        """
        accumulator = _Accumulator()
        if not addresses:
            return await accumulator.seal()

        tasks = [
            asyncio.ensure_future(self._collect(address, accumulator))
            for address in addresses
        ]
        done, pending = await asyncio.wait(tasks, timeout=timeout)

        if pending:
            accumulator.abandon()
            for task in pending:
                self._abandoned.add(task)
                task.add_done_callback(self._forget)
            logger.warning(
                "Deadline reached with %d of %d ranking fetches pending",
                len(pending),
                len(tasks),
            )
            raise DeadlineExceeded(f"{len(pending)} of {len(tasks)} fetches still pending")

        for task in done:
            # Surfaces programming errors; fetch failures never raise.
            task.result()

        result = await accumulator.seal()
        logger.info(
            "Aggregated %d players from %d of %d servers",
            result.ranked_player_count,
            result.ranked_server_count,
            len(tasks),
        )
        return result

    def _forget(self, task: "asyncio.Task[None]") -> None:
        self._abandoned.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Abandoned ranking fetch failed: %s", task.exception())
