"""
Matchmaking queue: pairs a joining player with the waiting player closest in rating.

Pairing is a linear scan over the waiting players on every join, fine for small waiting pools.
The queue size is not bounded.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from threading import RLock
from typing import Optional

from chessmatch.chess.game import utc_now
from chessmatch.db.repository import QueueEntry, QueueRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pairing:
    """Two players taken off the queue, colors already assigned."""

    white: QueueEntry
    black: QueueEntry


class MatchmakingQueue:
    def __init__(
        self, repository: QueueRepository, rng: Optional[random.Random] = None
    ) -> None:
        self.repo = repository
        self.rng = rng or random.Random()
        self._lock = RLock()

    def join(
        self,
        identity: str,
        display_name: Optional[str],
        rating: int,
        now: Optional[datetime] = None,
    ) -> Optional[Pairing]:
        """
        Enter the queue and try to find an opponent right away.
        ----

        1. insert (or overwrite) the entry for this identity, with a fresh timestamp
        2. find the waiting player with the smallest rating difference
        3. found? take both off the queue and flip a coin for the colors.
        Otherwise stay in the queue until someone else joins.

        The whole sequence holds the lock: two joiners can never both pair with the same waiting player.
        """
        with self._lock:
            me = QueueEntry(
                identity=identity,
                display_name=display_name,
                rating=rating,
                enqueued_at=now or utc_now(),
            )
            self.repo.upsert(me)

            opponent = self._closest_opponent(me)
            if opponent is None:
                logger.debug("%s is waiting for an opponent (rating %d)", identity, rating)
                return None

            self.repo.remove(me.identity)
            self.repo.remove(opponent.identity)
            pairing = self._assign_colors(me, opponent)
            logger.info(
                "Paired %s (white, %d) with %s (black, %d)",
                pairing.white.identity,
                pairing.white.rating,
                pairing.black.identity,
                pairing.black.rating,
            )
            return pairing

    def leave(self, identity: str) -> bool:
        with self._lock:
            return self.repo.remove(identity) is not None

    def is_waiting(self, identity: str) -> bool:
        return self.repo.get(identity) is not None

    def waiting_count(self) -> int:
        return len(self.repo.entries())

    # -- PRIVATE HELPERS ---
    def _closest_opponent(self, me: QueueEntry) -> Optional[QueueEntry]:
        """Smallest absolute rating difference. Ties go to whoever has been waiting longest (then queue order)."""
        candidates = [
            entry for entry in self.repo.entries() if entry.identity != me.identity
        ]
        if not candidates:
            return None
        # min() keeps the first of equal keys, so the queue order breaks any remaining tie
        return min(
            candidates,
            key=lambda entry: (abs(entry.rating - me.rating), entry.enqueued_at),
        )

    def _assign_colors(self, me: QueueEntry, opponent: QueueEntry) -> Pairing:
        """Unbiased coin flip"""
        if self.rng.random() < 0.5:
            return Pairing(white=me, black=opponent)
        return Pairing(white=opponent, black=me)
