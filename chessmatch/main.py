"""
Process bootstrap: builds the process-wide singletons once (queue, sessions, ratings, notifier) and the FastAPI app around them.

Run with `chessmatch` (console script) or `uvicorn --factory chessmatch.main:create_app`.
"""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chessmatch.api.routes import game_error_handler, router
from chessmatch.core.config import Settings, get_settings
from chessmatch.core.exceptions import GameError
from chessmatch.core.logging_config import configure_logging
from chessmatch.db.database import create_db_engine, create_session_factory
from chessmatch.db.memory_repository import (
    InMemoryQueueRepository,
    InMemorySessionRepository,
)
from chessmatch.db.sql_repository import SQLRatingRepository
from chessmatch.matchmaking.pairing import MatchmakingQueue
from chessmatch.services.bot import BotCommandHandler
from chessmatch.services.match_service import MatchService
from chessmatch.services.notifications import LoggingNotifier, Notifier
from chessmatch.services.rating_store import RatingRules, RatingStore
from chessmatch.services.telegram import TelegramNotifier

logger = logging.getLogger(__name__)


def build_notifier(settings: Settings) -> Notifier:
    if settings.bot_token:
        return TelegramNotifier(settings.bot_token)
    logger.warning("No bot token configured, pairings are only logged")
    return LoggingNotifier()


def build_match_service(settings: Settings) -> MatchService:
    session_factory = create_session_factory(create_db_engine(settings.database_url))
    ratings = RatingStore(
        SQLRatingRepository(session_factory()),
        RatingRules(
            default_rating=settings.default_rating,
            win_bonus=settings.win_bonus,
            upset_penalty=settings.upset_penalty,
            loss_penalty=settings.loss_penalty,
            floor=settings.rating_floor,
        ),
    )
    return MatchService(
        queue=MatchmakingQueue(InMemoryQueueRepository()),
        sessions=InMemorySessionRepository(),
        ratings=ratings,
        move_timeout=settings.move_timeout,
        notifier=build_notifier(settings),
    )


def create_app(
    settings: Optional[Settings] = None, service: Optional[MatchService] = None
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="chessmatch")
    app.state.settings = settings
    app.state.match_service = service or build_match_service(settings)
    app.state.bot = BotCommandHandler(
        app.state.match_service, app.state.match_service.notifier
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GameError, game_error_handler)
    app.include_router(router)
    return app


def run() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
