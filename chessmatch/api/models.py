"""Requests and Response models"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from chessmatch.chess.pieces import FEN_TO_PIECE
from chessmatch.core.shared_types import Color, PieceType, ResultReason, Status


# --- REQUEST MODELS ---
# NOTE: required fields are Optional here. The service reports missing ones as 'missing-fields'
class JoinQueueRequest(BaseModel):
    identity: Optional[str] = None
    display_name: Optional[str] = None
    rating: Optional[int] = None
    init_data: Optional[str] = None

    @field_validator("identity", mode="before")
    @classmethod
    def stringify_identity(cls, value: Any) -> Any:
        """Telegram user ids arrive as numbers"""
        if isinstance(value, int):
            return str(value)
        return value


class MoveRequest(BaseModel):
    identity: Optional[str] = None
    from_square: Optional[str] = None
    to_square: Optional[str] = None
    promote_to: Optional[PieceType] = None

    @field_validator("identity", mode="before")
    @classmethod
    def stringify_identity(cls, value: Any) -> Any:
        """Same identity as in JoinQueueRequest, also when sent as a number"""
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("promote_to", mode="before")
    @classmethod
    def accept_piece_letter(cls, value: Any) -> Any:
        """Accept 'q' as well as 'queen'"""
        if isinstance(value, str) and value.lower() in FEN_TO_PIECE:
            return FEN_TO_PIECE[value.lower()]
        return value


# --- RESPONSE MODELS ---
class PlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    identity: str
    display_name: Optional[str]
    rating: int


class ResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reason: ResultReason
    winner: Optional[str]
    loser: Optional[str]


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    matched: bool
    session_id: Optional[str] = None
    assigned_color: Optional[Color] = None
    opponent: Optional[PlayerResponse] = None
    serialized_position: Optional[str] = None


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    serialized_position: str
    side_to_move: Color
    status: Status
    players: dict[Color, PlayerResponse]
    result: Optional[ResultResponse] = None
    moves_uci: list[str]


class RatingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    identity: str
    rating: int


class ErrorResponse(BaseModel):
    error: str
    detail: str


# --- TELEGRAM WEBHOOK ---
# Only the parts of a Telegram Update the bot reads. Everything else is ignored.
class TelegramChat(BaseModel):
    id: int


class TelegramWebAppData(BaseModel):
    data: str


class TelegramMessage(BaseModel):
    chat: TelegramChat
    web_app_data: Optional[TelegramWebAppData] = None


class TelegramUpdate(BaseModel):
    update_id: int
    message: Optional[TelegramMessage] = None
