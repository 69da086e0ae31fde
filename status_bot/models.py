from dataclasses import dataclass, field

DEFAULT_MAX_CAPACITY = 24
UNKNOWN = "Unknown"


def _to_int(v, default: int = 0) -> int:
    if v is None:
        return default
    try:
        return int(float(v))
    except (TypeError, ValueError, OverflowError):
        return default


def _to_str(v, default: str = UNKNOWN) -> str:
    if v is None:
        return default
    s = str(v).strip()
    return s or default


@dataclass(frozen=True)
class PlayerRecord:
    name: str
    score: int = 0
    connected_seconds: int = 0

    @property
    def is_named(self) -> bool:
        # blank names are players still connecting
        return bool(self.name.strip())

    @classmethod
    def from_api(cls, data: dict) -> "PlayerRecord":
        return cls(
            name=str(data.get("name") or ""),
            score=_to_int(data.get("score")),
            connected_seconds=_to_int(data.get("time")),
        )


@dataclass(frozen=True)
class RemoteState:
    """One snapshot of the game server as reported by the status API."""

    human_count: int = 0
    max_capacity: int = DEFAULT_MAX_CAPACITY
    bot_count: int = 0
    server_address: str = UNKNOWN
    server_name: str = UNKNOWN
    map_name: str = UNKNOWN
    players: tuple[PlayerRecord, ...] = field(default_factory=tuple)

    @property
    def named_players(self) -> list[PlayerRecord]:
        return [p for p in self.players if p.is_named]

    @property
    def connecting_count(self) -> int:
        return sum(1 for p in self.players if not p.is_named)

    @classmethod
    def from_api(cls, data: dict) -> "RemoteState":
        """Parse the server-info JSON body. Absent fields fall back to 0 / "Unknown" / no players."""
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        raw_players = data.get("humanData")
        players = tuple(
            PlayerRecord.from_api(p) for p in (raw_players if isinstance(raw_players, list) else []) if isinstance(p, dict)
        )
        return cls(
            human_count=_to_int(data.get("numHumans")),
            max_capacity=_to_int(data.get("maxClients")) or DEFAULT_MAX_CAPACITY,
            bot_count=_to_int(data.get("numBots")),
            server_address=_to_str(data.get("serverIP")),
            server_name=_to_str(data.get("serverName") or data.get("name")),
            map_name=_to_str(data.get("map")),
            players=players,
        )
