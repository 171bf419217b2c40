import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ..deadline import Deadline
from ..schemas import AggregationResult, ErrorResponse, ServerSummary
from ..services.addresses import populated_addresses, resolve_addresses, split_server_list
from ..services.aggregator import RankingAggregator
from ..services.qlstats import QLStatsClient

# Configure logging
logger = logging.getLogger(__name__)

SERVERS_PARAM = "servers"

router = APIRouter(
    tags=["rankings"],
    responses={
        404: {"model": ErrorResponse, "description": "Not found"},
        500: {"model": ErrorResponse, "description": "Server error"},
        503: {"model": ErrorResponse, "description": "Request timeout"},
    },
)


def get_deadline(request: Request) -> Deadline:
    """Start the request's time budget."""
    return Deadline(request.app.state.settings.request_timeout)


def get_qlstats(request: Request) -> QLStatsClient:
    return request.app.state.qlstats


def get_aggregator(request: Request) -> RankingAggregator:
    return request.app.state.aggregator


def get_server_list(request: Request) -> List[str]:
    """Raw addresses from ``?servers=a:p,b:q``.

    The parameter name is matched case-insensitively and is the only one
    accepted.
    """
    raw = None
    for key, value in request.query_params.multi_items():
        if key.lower() != SERVERS_PARAM:
            raise HTTPException(status_code=404, detail=f"Unknown query parameter {key}")
        if raw is None:
            raw = value
    addresses = split_server_list(raw)
    if not addresses or not addresses[0]:
        raise HTTPException(status_code=404, detail="No servers given")
    return addresses


@router.get("/rankings", response_model=AggregationResult)
async def get_rankings(
    deadline: Deadline = Depends(get_deadline),
    raw_addresses: List[str] = Depends(get_server_list),
    aggregator: RankingAggregator = Depends(get_aggregator),
):
    """
    Get the merged rankings of the given servers.

    - **servers**: comma-separated ``host:port`` list; malformed entries are ignored
    """
    addresses = await deadline.run(resolve_addresses(raw_addresses))
    if not addresses:
        raise HTTPException(status_code=404, detail="No valid server addresses")
    return await aggregator.aggregate(addresses, timeout=deadline.remaining())


@router.get("/allrankings", response_model=AggregationResult)
async def get_all_rankings(
    deadline: Deadline = Depends(get_deadline),
    qlstats: QLStatsClient = Depends(get_qlstats),
    aggregator: RankingAggregator = Depends(get_aggregator),
):
    """Get the merged rankings of every populated ranked server."""
    servers = await deadline.run(qlstats.fetch_servers())
    addresses = populated_addresses(servers)
    logger.info(f"{len(addresses)} of {len(servers)} ranked servers are populated")
    return await aggregator.aggregate(addresses, timeout=deadline.remaining())


@router.get("/rankedservers", response_model=List[ServerSummary])
async def get_ranked_servers(
    deadline: Deadline = Depends(get_deadline),
    qlstats: QLStatsClient = Depends(get_qlstats),
):
    """List every server known to the ranking service."""
    return await deadline.run(qlstats.fetch_servers())
