"""HTTP routes. Thin: parse the request, call the MatchService, wrap the answer."""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request
from fastapi.responses import JSONResponse

from chessmatch.api.models import (
    ErrorResponse,
    JoinQueueRequest,
    MatchResponse,
    MoveRequest,
    RatingResponse,
    SessionResponse,
    TelegramUpdate,
)
from chessmatch.core.config import Settings
from chessmatch.core.exceptions import (
    GameAlreadyOverError,
    GameError,
    IllegalMoveError,
    InitDataError,
    InvalidRequestError,
    NotAParticipantError,
    OutOfTurnError,
    SessionNotFoundError,
    WebhookSecretError,
)
from chessmatch.services.bot import BotCommandHandler
from chessmatch.services.match_service import MatchService
from chessmatch.services.telegram import verify_init_data

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS_CODES: dict[type[GameError], int] = {
    InvalidRequestError: 400,
    InitDataError: 403,
    NotAParticipantError: 403,
    SessionNotFoundError: 404,
    OutOfTurnError: 409,
    GameAlreadyOverError: 409,
    IllegalMoveError: 409,
}


def get_service(request: Request) -> MatchService:
    return request.app.state.match_service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_bot(request: Request) -> BotCommandHandler:
    return request.app.state.bot


async def game_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Every GameError becomes {"error": <code>, "detail": <message>} with a matching status code."""
    assert isinstance(exc, GameError)
    status_code = next(
        (
            ERROR_STATUS_CODES[cls]
            for cls in type(exc).__mro__
            if cls in ERROR_STATUS_CODES
        ),
        400,
    )
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
    body = ErrorResponse(error=exc.code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("/match", response_model=MatchResponse)
def enqueue_and_match(
    request: JoinQueueRequest,
    background_tasks: BackgroundTasks,
    service: MatchService = Depends(get_service),
    settings: Settings = Depends(get_settings),
) -> MatchResponse:
    if settings.verify_init_data:
        if not (
            settings.bot_token
            and request.init_data
            and verify_init_data(request.init_data, settings.bot_token)
        ):
            raise InitDataError("initData signature could not be verified.")

    match = service.enqueue_and_match(
        identity=request.identity or "",
        display_name=request.display_name,
        rating_hint=request.rating,
        notify=False,
    )
    if match.matched and match.session_id is not None:
        # the response does not wait for Telegram
        background_tasks.add_task(service.notify_pairing, match.session_id)
    return MatchResponse.model_validate(match)


@router.get("/match/{identity}", response_model=MatchResponse)
def poll_match(
    identity: str, service: MatchService = Depends(get_service)
) -> MatchResponse:
    return MatchResponse.model_validate(service.poll_match(identity))


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str, service: MatchService = Depends(get_service)
) -> SessionResponse:
    return SessionResponse.model_validate(service.get_session(session_id))


@router.post("/sessions/{session_id}/moves", response_model=SessionResponse)
def submit_move(
    session_id: str,
    request: MoveRequest,
    service: MatchService = Depends(get_service),
) -> SessionResponse:
    session = service.submit_move(
        session_id=session_id,
        identity=request.identity,
        from_square=request.from_square,
        to_square=request.to_square,
        promotion=request.promote_to,
    )
    return SessionResponse.model_validate(session)


@router.get("/ratings/{identity}", response_model=RatingResponse)
def get_rating(
    identity: str, service: MatchService = Depends(get_service)
) -> RatingResponse:
    return RatingResponse.model_validate(service.get_rating(identity))


@router.post("/telegram/webhook")
def telegram_webhook(
    update: TelegramUpdate,
    background_tasks: BackgroundTasks,
    bot: BotCommandHandler = Depends(get_bot),
    settings: Settings = Depends(get_settings),
    secret_token: Optional[str] = Header(
        default=None, alias="X-Telegram-Bot-Api-Secret-Token"
    ),
) -> dict[str, bool]:
    """
    Telegram Bot API webhook.
    ----

    Acknowledged right away; a `web_app_data` message is handled after the response is sent.
    """
    if settings.webhook_secret and not hmac.compare_digest(
        secret_token or "", settings.webhook_secret
    ):
        raise WebhookSecretError("Webhook secret token does not match.")

    message = update.message
    if message is not None and message.web_app_data is not None:
        background_tasks.add_task(
            bot.handle_web_app_data, str(message.chat.id), message.web_app_data.data
        )
    return {"ok": True}
