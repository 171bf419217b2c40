from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field


def _host_of(server: str) -> str:
    return server.rsplit(":", 1)[0]


class ServerAddress(BaseModel):
    """A validated ``ip:port`` pair identifying one upstream server."""

    model_config = ConfigDict(frozen=True)

    ip: str
    port: int = Field(..., ge=0, le=65535)

    @classmethod
    def parse(cls, value: str) -> "ServerAddress":
        """Build an address from the ``ip:port`` form used by the upstream directory.

        Raises:
            ValueError: If ``value`` has no host or no numeric port.
        """
        host, sep, port = value.strip().rpartition(":")
        if not sep or not host or not (port.isascii() and port.isdigit()):
            raise ValueError(f"not an ip:port address: {value!r}")
        return cls(ip=host, port=int(port))

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


class ServerSummary(BaseModel):
    """One entry of the upstream ``/server/skillrating`` directory."""

    model_config = ConfigDict(frozen=True)

    server: str
    gt: str = ""
    min: int = 0
    avg: int = 0
    max: int = 0
    pc: int = 0  # players
    sc: int = 0  # spectators
    bc: int = 0  # bots

    @computed_field
    @property
    def ip(self) -> str:
        return _host_of(self.server)

    @property
    def is_populated(self) -> bool:
        return self.pc > 0 or self.sc > 0


class UpstreamPlayer(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    steam_id: str = Field(
        ...,
        validation_alias=AliasChoices("steamid", "steamID", "steam_id"),
        serialization_alias="steamID",
    )
    name: str = ""
    team: int = 0
    rating: int = 0
    rd: int = 0
    time: int = 0

    def attribute(self, address: ServerAddress) -> "PlayerRanking":
        return PlayerRanking(**self.model_dump(), server=str(address))


class PlayerRanking(UpstreamPlayer):
    """A ranked player tagged with the server the bridge fetched it from."""

    server: str

    @computed_field
    @property
    def ip(self) -> str:
        return _host_of(self.server)


class PlayersPayload(BaseModel):
    """The upstream ``/server/{address}/players`` document.

    The ``ok`` flag is not consulted: any payload that decodes is an answer.
    """

    players: Optional[List[UpstreamPlayer]] = None


class AggregationResult(BaseModel):
    """Merged ranking data for every server that answered."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ranked_server_count: int = Field(0, alias="rankedServerCount")
    ranked_player_count: int = Field(0, alias="rankedPlayerCount")
    ranked_players: List[PlayerRanking] = Field(
        default_factory=list, alias="rankedPlayers"
    )


class ErrorDetail(BaseModel):
    code: int
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail
