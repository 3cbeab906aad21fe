"""Orchestration of communication from API router to matchmaking, game sessions and ratings (and the reverse direction)."""

import logging
from datetime import datetime, timedelta
from threading import RLock
from typing import Callable, Optional

from chessmatch.chess.game import GameResult, GameSession, PlayerInfo, utc_now
from chessmatch.chess.moves import Move
from chessmatch.chess.square import Square
from chessmatch.core.exceptions import (
    IllegalMoveError,
    InvalidRequestError,
    SessionNotFoundError,
)
from chessmatch.core.models import (
    MatchModel,
    PlayerModel,
    RatingModel,
    SessionModel,
)
from chessmatch.core.shared_types import PieceType
from chessmatch.db.repository import QueueEntry, SessionRepository
from chessmatch.matchmaking.pairing import MatchmakingQueue, Pairing
from chessmatch.services.notifications import LoggingNotifier, Notifier
from chessmatch.services.rating_store import RatingStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class MatchService:
    """Orchestration of the matchmaking queue, the game sessions and the rating store."""

    def __init__(
        self,
        queue: MatchmakingQueue,
        sessions: SessionRepository,
        ratings: RatingStore,
        move_timeout: timedelta,
        notifier: Optional[Notifier] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.queue = queue
        self.sessions = sessions
        self.ratings = ratings
        self.move_timeout = move_timeout
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock
        # pairing + session creation and poll-match see each other as one step
        self._match_lock = RLock()

    # -- API routes logic ---
    def enqueue_and_match(
        self,
        identity: str,
        display_name: Optional[str] = None,
        rating_hint: Optional[int] = None,
        notify: bool = True,
    ) -> MatchModel:
        """
        Player wants an opponent. Either gets paired right away, or waits in the queue (and polls).

        notify=False leaves the pairing messages to the caller (see `notify_pairing`).
        """
        if not identity:
            raise InvalidRequestError("identity is required.")

        rating = self._rating_for_join(identity, rating_hint)
        now = self.clock()
        with self._match_lock:
            pairing = self.queue.join(identity, display_name, rating, now=now)
            if pairing is None:
                return MatchModel(matched=False)

            session = self._start_session(pairing, now)

        if notify:
            self._notify_pairing(session)
        return self._match_model(session, identity)

    def poll_match(self, identity: str) -> MatchModel:
        """
        Has a waiting player been paired in the meantime?
        ----
        Used in "polling" loop by frontend while waiting in the queue.
        A game whose clock ran out gets decided first and no longer counts as a match.
        """
        with self._match_lock:
            session = self.sessions.find_active_for(identity)
        if session is None:
            return MatchModel(matched=False)

        with session.lock:
            session.check_timeout(self.clock(), self.move_timeout)
            if session.is_finished:
                return MatchModel(matched=False)
            return self._match_model(session, identity)

    def notify_pairing(self, session_id: str) -> None:
        """Send the pairing messages for a session (best effort)."""
        self._notify_pairing(self._fetch_session(session_id))

    def get_session(self, session_id: str) -> SessionModel:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        A game whose clock ran out gets decided first.
        """
        session = self._fetch_session(session_id)
        with session.lock:
            session.check_timeout(self.clock(), self.move_timeout)
            return self._session_model(session)

    def submit_move(
        self,
        session_id: str,
        identity: Optional[str],
        from_square: Optional[str],
        to_square: Optional[str],
        promotion: Optional[PieceType] = None,
    ) -> SessionModel:
        """
        Make a move attempt.
        ----

        The timeout check runs first, under the same lock as the move:
        a move arriving after the deadline always loses against the forfeit.
        """
        if not (identity and from_square and to_square):
            raise InvalidRequestError(
                "identity, from_square and to_square are required."
            )

        session = self._fetch_session(session_id)
        move = self._parse_move(from_square, to_square, promotion)

        now = self.clock()
        with session.lock:
            session.check_timeout(now, self.move_timeout)
            applied = session.attempt_move(identity, move, now=now)
            logger.debug("Game %s: %s played %s", session.id, identity, applied.to_uci())
            return self._session_model(session)

    def get_rating(self, identity: str) -> RatingModel:
        return RatingModel(identity=identity, rating=self.ratings.rating(identity))

    # -- Internal helpers --
    def _rating_for_join(self, identity: str, rating_hint: Optional[int]) -> int:
        """A known identity keeps its stored rating. The hint only seeds the store for newcomers."""
        if self.ratings.is_known(identity) or rating_hint is None:
            return self.ratings.rating(identity)
        return self.ratings.register(identity, rating_hint)

    def _start_session(self, pairing: Pairing, now: datetime) -> GameSession:
        session = GameSession.start(
            white=self._player_info(pairing.white),
            black=self._player_info(pairing.black),
            now=now,
            on_finished=self._record_result,
        )
        self.sessions.add(session)
        logger.info(
            "Game %s started: %s (white) vs %s (black)",
            session.id,
            pairing.white.identity,
            pairing.black.identity,
        )
        return session

    def _record_result(self, result: GameResult) -> None:
        """Only decisive results move the ratings (no change after stalemate)."""
        if result.is_decisive:
            # for the type checker: decisive results always name both players
            assert result.winner is not None and result.loser is not None
            self.ratings.adjust(result.winner, result.loser)

    def _notify_pairing(self, session: GameSession) -> None:
        """Best effort: a failing notifier is logged, the pairing stands."""
        for color, player in session.players.items():
            opponent = self._player_model(session.players[color.opponent])
            try:
                self.notifier.notify_matched(player.identity, opponent)
            except Exception:
                logger.warning(
                    "Could not notify %s about game %s",
                    player.identity,
                    session.id,
                    exc_info=True,
                )

    def _parse_move(
        self, from_square: str, to_square: str, promotion: Optional[PieceType]
    ) -> Move:
        """Text never travels past this point: the rest of the core only sees Move values."""
        try:
            return Move(
                from_square=Square.from_algebraic(from_square),
                to_square=Square.from_algebraic(to_square),
                promotion=promotion,
            )
        except InvalidRequestError as err:
            raise IllegalMoveError(
                f"Move not allowed: {from_square}{to_square}"
            ) from err

    def _fetch_session(self, session_id: str) -> GameSession:
        """Attempt to find the session in the repository and raise error if it fails."""
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Game with {session_id=} not found.")
        return session

    def _player_info(self, entry: QueueEntry) -> PlayerInfo:
        return PlayerInfo(identity=entry.identity, display_name=entry.display_name)

    def _player_model(self, player: PlayerInfo) -> PlayerModel:
        return PlayerModel(
            identity=player.identity,
            display_name=player.display_name,
            rating=self.ratings.rating(player.identity),
        )

    def _session_model(self, session: GameSession) -> SessionModel:
        ratings = {
            player.identity: self.ratings.rating(player.identity)
            for player in session.players.values()
        }
        return session.to_model(ratings)

    def _match_model(self, session: GameSession, identity: str) -> MatchModel:
        color = session.color_of(identity)
        # for the type checker: the identity is always seated in sessions handed to this method
        assert color is not None
        return MatchModel(
            matched=True,
            session_id=session.id,
            assigned_color=color,
            opponent=self._player_model(session.players[color.opponent]),
            serialized_position=session.serialize(),
        )
