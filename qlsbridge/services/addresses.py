"""Turning caller input and directory listings into server addresses."""
import asyncio
import ipaddress
import logging
import socket
from typing import Iterable, List, Optional

from ..schemas import ServerAddress, ServerSummary

logger = logging.getLogger(__name__)


def split_server_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated ``servers`` query value."""
    if not value:
        return []
    return value.split(",")


async def _lookup_ipv4(host: str, port: int) -> Optional[str]:
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, port, family=socket.AF_INET, type=socket.SOCK_STREAM)
    except (OSError, UnicodeError) as e:
        logger.debug("Could not resolve %s: %s", host, e)
        return None
    if not infos:
        return None
    return infos[0][4][0]


async def resolve_address(raw: str) -> Optional[ServerAddress]:
    """Resolve ``host:port`` to an IPv4 address, or ``None`` if it is malformed."""
    host, sep, port_text = raw.strip().rpartition(":")
    if not sep or not host or not (port_text.isascii() and port_text.isdigit()):
        return None
    port = int(port_text)
    if port > 65535:
        return None

    try:
        ip: Optional[str] = str(ipaddress.IPv4Address(host))
    except ValueError:
        ip = await _lookup_ipv4(host, port)
    if ip is None:
        return None
    return ServerAddress(ip=ip, port=port)


async def resolve_addresses(raw_addresses: Iterable[str]) -> List[ServerAddress]:
    """Resolve every raw address, keeping caller order and dropping bad ones."""
    resolved = await asyncio.gather(*(resolve_address(raw) for raw in raw_addresses))
    return [address for address in resolved if address is not None]


def populated_addresses(servers: Iterable[ServerSummary]) -> List[ServerAddress]:
    """Addresses of the directory entries with players or spectators on them."""
    addresses = []
    for summary in servers:
        if not summary.is_populated:
            continue
        try:
            addresses.append(ServerAddress.parse(summary.server))
        except ValueError:
            logger.warning("Skipping malformed directory entry %r", summary.server)
    return addresses
