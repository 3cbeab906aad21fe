"""Skill ratings: identity -> integer rating, only changed by decisive game results."""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from chessmatch.db.repository import RatingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingRules:
    default_rating: int = 1500
    win_bonus: int = 5
    # loser was rated above the winner
    upset_penalty: int = 4
    loss_penalty: int = 3
    floor: int = 0


class RatingStore:
    def __init__(
        self, repository: RatingRepository, rules: Optional[RatingRules] = None
    ) -> None:
        self.repo = repository
        self.rules = rules or RatingRules()
        self._lock = Lock()

    def rating(self, identity: str) -> int:
        """Unseen identities get the default rating. Looking it up does not store anything."""
        with self._lock:
            return self._current(identity)

    def is_known(self, identity: str) -> bool:
        with self._lock:
            return self.repo.get_rating(identity) is not None

    def register(self, identity: str, rating: Optional[int] = None) -> int:
        """Store a rating for an identity seen for the first time. Known identities keep theirs."""
        with self._lock:
            existing = self.repo.get_rating(identity)
            if existing is not None:
                return existing
            initial = self.rules.default_rating if rating is None else rating
            self.repo.set_rating(identity, initial)
            return initial

    def adjust(self, winner: str, loser: str) -> tuple[int, int]:
        """
        Decisive result: the winner gains a fixed bonus, the loser pays a penalty
        (bigger when the loser was the higher rated player) but never drops below the floor.
        """
        with self._lock:
            winner_before = self._current(winner)
            loser_before = self._current(loser)

            penalty = (
                self.rules.upset_penalty
                if loser_before > winner_before
                else self.rules.loss_penalty
            )
            winner_after = winner_before + self.rules.win_bonus
            loser_after = max(self.rules.floor, loser_before - penalty)

            self.repo.set_rating(winner, winner_after)
            self.repo.set_rating(loser, loser_after)

        logger.info(
            "Ratings updated: %s %d -> %d, %s %d -> %d",
            winner,
            winner_before,
            winner_after,
            loser,
            loser_before,
            loser_after,
        )
        return winner_after, loser_after

    def _current(self, identity: str) -> int:
        stored = self.repo.get_rating(identity)
        return self.rules.default_rating if stored is None else stored
