"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
The API layer (higher) and domain layers (lower) use the models defined here to send to/receive from the Service
(Decouples the data model specific to the repositories, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Optional

from chessmatch.core.shared_types import Color, ResultReason, Status

# Type aliases to make the models easier to read
Identity = str
SessionId = str


@dataclass
class PlayerModel:
    identity: Identity
    display_name: Optional[str]
    rating: int


@dataclass
class ResultModel:
    reason: ResultReason
    winner: Optional[Identity] = None
    loser: Optional[Identity] = None


@dataclass
class SessionModel:
    """Transport-safe snapshot of a game session."""

    session_id: SessionId
    serialized_position: str
    side_to_move: Color
    status: Status
    players: dict[Color, PlayerModel]
    result: Optional[ResultModel] = None
    moves_uci: list[str] = field(default_factory=list)


@dataclass
class MatchModel:
    """Outcome of joining / polling the matchmaking queue."""

    matched: bool
    session_id: Optional[SessionId] = None
    assigned_color: Optional[Color] = None
    opponent: Optional[PlayerModel] = None
    serialized_position: Optional[str] = None


@dataclass
class RatingModel:
    identity: Identity
    rating: int
