"""
The GameSession is the entrypoint into the domain layer for the service layer.
It binds two players to the colors, owns a RulesEngine and tracks status/result and the time of the last move.

States: in_progress --> finished (terminal, no way back)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Callable, Optional, Self, Union
from uuid import uuid4

from chessmatch.chess.engine import RulesEngine
from chessmatch.chess.moves import Move
from chessmatch.core.exceptions import (
    GameAlreadyOverError,
    IllegalMoveError,
    NotAParticipantError,
    OutOfTurnError,
)
from chessmatch.core.models import PlayerModel, ResultModel, SessionModel
from chessmatch.core.shared_types import Color, ResultReason, Status

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PlayerInfo:
    identity: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class GameResult:
    reason: ResultReason
    winner: Optional[str] = None
    loser: Optional[str] = None

    @property
    def is_decisive(self) -> bool:
        return self.winner is not None and self.loser is not None


FinishedCallback = Callable[[GameResult], None]


@dataclass
class GameSession:
    players: dict[Color, PlayerInfo]
    engine: RulesEngine = field(default_factory=RulesEngine)
    id: str = field(default_factory=lambda: uuid4().hex)
    status: Status = Status.IN_PROGRESS
    result: Optional[GameResult] = None
    last_move_at: datetime = field(default_factory=utc_now)
    on_finished: Optional[FinishedCallback] = field(default=None, repr=False)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    @classmethod
    def start(
        cls,
        white: PlayerInfo,
        black: PlayerInfo,
        now: Optional[datetime] = None,
        on_finished: Optional[FinishedCallback] = None,
    ) -> Self:
        """New game from the standard starting position."""
        return cls(
            players={Color.WHITE: white, Color.BLACK: black},
            last_move_at=now or utc_now(),
            on_finished=on_finished,
        )

    # --- QUERIES ---
    @property
    def is_finished(self) -> bool:
        return self.status == Status.FINISHED

    @property
    def side_to_move(self) -> Color:
        return self.engine.side_to_move

    def serialize(self) -> str:
        return self.engine.serialize()

    def has_player(self, identity: str) -> bool:
        return self.color_of(identity) is not None

    def color_of(self, identity: str) -> Optional[Color]:
        return next(
            (
                color
                for color, player in self.players.items()
                if player.identity == identity
            ),
            None,
        )

    def opponent_of(self, identity: str) -> Optional[PlayerInfo]:
        color = self.color_of(identity)
        if color is None:
            return None
        return self.players[color.opponent]

    # --- TRANSITIONS ---
    def attempt_move(
        self, identity: str, move: Union[Move, str], now: Optional[datetime] = None
    ) -> Move:
        """
        Attempt to make a move
        -----

        1. the caller must be seated at one of the colors
        2. the game must (still) be in progress
        3. it must be the caller's turn
        4. the engine must accept the move (all-or-nothing: a rejected move leaves the position as is)
        5. record the time of the move, then look for checkmate / stalemate
        """
        with self.lock:
            player_color = self.color_of(identity)
            if player_color is None:
                raise NotAParticipantError(
                    f"{identity!r} is not playing in game {self.id}."
                )

            if self.is_finished:
                raise GameAlreadyOverError(f"Game {self.id} is already over.")

            if player_color != self.side_to_move:
                raise OutOfTurnError(
                    f"It is not your turn. Waiting for {self.players[self.side_to_move].identity!r} to make a move first."
                )

            applied = self.engine.apply_move(move)
            if applied is None:
                shown = move if isinstance(move, str) else move.to_uci()
                raise IllegalMoveError(f"Move not allowed: {shown}")

            self.last_move_at = now or utc_now()
            self._update_game_status(mover=player_color)
            return applied

    def check_timeout(
        self, now: datetime, timeout: timedelta
    ) -> Optional[GameResult]:
        """
        Forfeit the side to move if it let the clock run out.
        ----

        Returns the result when this call ended the game. None when the game is still on time or was already decided.
        """
        with self.lock:
            if self.is_finished:
                return None
            if now - self.last_move_at <= timeout:
                return None

            loser = self.players[self.side_to_move]
            winner = self.players[self.side_to_move.opponent]
            return self._finish(
                GameResult(
                    reason=ResultReason.TIMEOUT,
                    winner=winner.identity,
                    loser=loser.identity,
                )
            )

    def to_model(self, ratings: dict[str, int]) -> SessionModel:
        """Encode into a format the Service layer uses (ratings: live rating per identity)"""
        with self.lock:
            result = (
                ResultModel(
                    reason=self.result.reason,
                    winner=self.result.winner,
                    loser=self.result.loser,
                )
                if self.result
                else None
            )
            return SessionModel(
                session_id=self.id,
                serialized_position=self.serialize(),
                side_to_move=self.side_to_move,
                status=self.status,
                players={
                    color: PlayerModel(
                        identity=player.identity,
                        display_name=player.display_name,
                        rating=ratings[player.identity],
                    )
                    for color, player in self.players.items()
                },
                result=result,
                moves_uci=[move.to_uci() for move in self.engine.history],
            )

    # -- PRIVATE HELPERS ---
    def _update_game_status(self, mover: Color) -> None:
        """Performs checks to see if game has ended and changes status accordingly.

        NOTE the move has already been made. At this point the side to move is the opponent of the mover.
        """
        if self.engine.is_checkmate():
            self._finish(
                GameResult(
                    reason=ResultReason.CHECKMATE,
                    winner=self.players[mover].identity,
                    loser=self.players[mover.opponent].identity,
                )
            )
        elif self.engine.is_stalemate():
            self._finish(GameResult(reason=ResultReason.STALEMATE))

    def _finish(self, result: GameResult) -> GameResult:
        self.status = Status.FINISHED
        self.result = result
        logger.info(
            "Game %s finished by %s (winner=%s, loser=%s)",
            self.id,
            result.reason,
            result.winner,
            result.loser,
        )
        if self.on_finished is not None:
            self.on_finished(result)
        return result
