"""Unit tests for chessmatch/services/bot.py"""

import json
from datetime import timedelta
from unittest.mock import Mock

import pytest

from chessmatch.db.memory_repository import (
    InMemoryQueueRepository,
    InMemoryRatingRepository,
    InMemorySessionRepository,
)
from chessmatch.matchmaking.pairing import MatchmakingQueue
from chessmatch.services.bot import (
    SEARCHING_MESSAGE,
    BotCommandHandler,
    parse_web_app_data,
)
from chessmatch.services.match_service import MatchService
from chessmatch.services.rating_store import RatingStore


@pytest.fixture
def notifier() -> Mock:
    return Mock()


@pytest.fixture
def service() -> MatchService:
    return MatchService(
        queue=MatchmakingQueue(InMemoryQueueRepository()),
        sessions=InMemorySessionRepository(),
        ratings=RatingStore(InMemoryRatingRepository()),
        move_timeout=timedelta(minutes=5),
        notifier=Mock(),
    )


@pytest.fixture
def bot(service: MatchService, notifier: Mock) -> BotCommandHandler:
    return BotCommandHandler(service, notifier)


def find_opponent(identity: int, name: str, rating=1500) -> str:
    return json.dumps({"action": "findOpponent", "id": identity, "name": name, "rating": rating})


def sent(notifier: Mock) -> dict[str, str]:
    return {call.args[0]: call.args[1] for call in notifier.send_message.call_args_list}


@pytest.mark.parametrize("data", ["", "not json", "[1, 2]", "42", '{"id": 1}'])
def test_parse_and_ignore_other_data(bot: BotCommandHandler, notifier: Mock, data: str) -> None:
    assert bot.handle_web_app_data("1", data) is None
    notifier.send_message.assert_not_called()


def test_parse_web_app_data() -> None:
    assert parse_web_app_data('{"action": "findOpponent"}') == {"action": "findOpponent"}
    assert parse_web_app_data("[]") is None


def test_first_player_is_searching(bot: BotCommandHandler, notifier: Mock, service: MatchService) -> None:
    match = bot.handle_web_app_data("100", find_opponent(100, "Magnus"))

    assert match is not None and not match.matched
    notifier.send_message.assert_called_once_with("100", SEARCHING_MESSAGE)
    assert service.queue.is_waiting("100")


def test_pairing_sends_matched_payload_to_both(bot: BotCommandHandler, notifier: Mock) -> None:
    bot.handle_web_app_data("100", find_opponent(100, "Magnus", 1510))
    notifier.reset_mock()

    match = bot.handle_web_app_data("200", find_opponent(200, "Judit", "1500"))

    assert match is not None and match.matched
    messages = {chat_id: json.loads(text) for chat_id, text in sent(notifier).items()}
    assert set(messages) == {"100", "200"}
    assert messages["200"]["action"] == "matched"
    assert messages["200"]["opponent"] == {"identity": "100", "display_name": "Magnus", "rating": 1510}
    assert messages["100"]["opponent"]["identity"] == "200"
    assert messages["100"]["session_id"] == messages["200"]["session_id"]
    assert {messages["100"]["assigned_color"], messages["200"]["assigned_color"]} == {"white", "black"}


@pytest.mark.parametrize("rating", [None, "abc", 0, -20])
def test_unusable_rating_falls_back_to_default(bot: BotCommandHandler, service: MatchService, rating) -> None:
    bot.handle_web_app_data("100", find_opponent(100, "Magnus", rating))
    assert service.queue.repo.get("100").rating == 1500


def test_missing_id_is_rejected_quietly(bot: BotCommandHandler, notifier: Mock, service: MatchService) -> None:
    assert bot.handle_web_app_data("100", json.dumps({"action": "findOpponent"})) is None
    notifier.send_message.assert_not_called()
    assert service.queue.waiting_count() == 0


def test_failing_bot_does_not_undo_the_pairing(bot: BotCommandHandler, notifier: Mock, service: MatchService) -> None:
    notifier.send_message.side_effect = RuntimeError("telegram is down")
    bot.handle_web_app_data("100", find_opponent(100, "Magnus"))
    match = bot.handle_web_app_data("200", find_opponent(200, "Judit"))

    assert match is not None and match.matched
    assert service.poll_match("100").session_id == match.session_id
