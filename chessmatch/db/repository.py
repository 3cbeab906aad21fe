"""Protocol repositories. The orchestrator only talks to these interfaces (in-memory dicts or SQLAlchemy behind them)."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from chessmatch.chess.game import GameSession


@dataclass
class QueueEntry:
    identity: str
    display_name: Optional[str]
    rating: int
    enqueued_at: datetime


class QueueRepository(Protocol):
    """Players waiting for an opponent, keyed by identity"""

    def upsert(self, entry: QueueEntry) -> None:
        """Insert, or overwrite in place when the identity is already waiting."""
        ...

    def get(self, identity: str) -> QueueEntry | None: ...

    def remove(self, identity: str) -> QueueEntry | None: ...

    def entries(self) -> list[QueueEntry]:
        """All waiting entries, in insertion order."""
        ...


class SessionRepository(Protocol):
    """Game sessions by ID. Sessions are never removed (kept for post-game polling)."""

    def add(self, session: GameSession) -> None: ...

    def get(self, session_id: str) -> GameSession | None: ...

    def find_active_for(self, identity: str) -> GameSession | None:
        """Unfinished session the identity is seated in, if any."""
        ...


class RatingRepository(Protocol):
    """identity -> rating"""

    def get_rating(self, identity: str) -> int | None:
        """None for identities never stored."""
        ...

    def set_rating(self, identity: str, rating: int) -> None: ...
