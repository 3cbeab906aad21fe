"""Implementations of the repositories using plain dictionaries (process lifetime only), guarded by a lock."""

from threading import Lock

from chessmatch.chess.game import GameSession
from chessmatch.db.repository import QueueEntry


class InMemoryQueueRepository:
    def __init__(self) -> None:
        self._entries: dict[str, QueueEntry] = {}
        self._lock = Lock()

    def upsert(self, entry: QueueEntry) -> None:
        with self._lock:
            # NOTE: assigning to an existing key keeps its place in the insertion order
            self._entries[entry.identity] = entry

    def get(self, identity: str) -> QueueEntry | None:
        with self._lock:
            return self._entries.get(identity)

    def remove(self, identity: str) -> QueueEntry | None:
        with self._lock:
            return self._entries.pop(identity, None)

    def entries(self) -> list[QueueEntry]:
        with self._lock:
            return list(self._entries.values())


class InMemorySessionRepository:
    def __init__(self) -> None:
        self._sessions: dict[str, GameSession] = {}
        self._lock = Lock()

    def add(self, session: GameSession) -> None:
        with self._lock:
            self._sessions[session.id] = session

    def get(self, session_id: str) -> GameSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def find_active_for(self, identity: str) -> GameSession | None:
        with self._lock:
            sessions = list(self._sessions.values())
        return next(
            (
                session
                for session in sessions
                if not session.is_finished and session.has_player(identity)
            ),
            None,
        )


class InMemoryRatingRepository:
    def __init__(self) -> None:
        self._ratings: dict[str, int] = {}
        self._lock = Lock()

    def get_rating(self, identity: str) -> int | None:
        with self._lock:
            return self._ratings.get(identity)

    def set_rating(self, identity: str, rating: int) -> None:
        with self._lock:
            self._ratings[identity] = rating
