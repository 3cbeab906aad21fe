"""
Bot side of matchmaking
---

Besides the HTTP API, the Telegram WebApp can ask for an opponent with `Telegram.WebApp.sendData`.
The bot receives that as a message carrying `web_app_data`, e.g.

    {"action": "findOpponent", "id": 42, "name": "Magnus", "rating": 1510}

It joins the same queue. The reply goes back through the bot: a "searching" note, or a JSON `matched` payload to both players.
"""

import json
import logging
from dataclasses import asdict
from typing import Any, Optional

from chessmatch.core.exceptions import GameError
from chessmatch.core.models import MatchModel
from chessmatch.services.match_service import MatchService
from chessmatch.services.notifications import Notifier

logger = logging.getLogger(__name__)

FIND_OPPONENT = "findOpponent"
SEARCHING_MESSAGE = "Searching for opponent…"


def parse_web_app_data(data: str) -> Optional[dict[str, Any]]:
    """JSON object sent by the WebApp. None for anything else."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def matched_payload(match: MatchModel) -> str:
    return json.dumps({"action": "matched", **asdict(match)})


def _rating_hint(value: Any) -> Optional[int]:
    """Anything that is not a positive number falls back to the stored / default rating."""
    try:
        rating = int(value)
    except (TypeError, ValueError):
        return None
    return rating if rating > 0 else None


class BotCommandHandler:
    def __init__(self, service: MatchService, notifier: Notifier) -> None:
        self.service = service
        self.notifier = notifier

    def handle_web_app_data(self, chat_id: str, data: str) -> Optional[MatchModel]:
        """
        Run a `findOpponent` request coming from the WebApp.
        ----

        Unknown actions and unreadable payloads are ignored (None).
        Rejections by the service are logged: there is no HTTP caller to hand them to.
        """
        payload = parse_web_app_data(data)
        if payload is None or payload.get("action") != FIND_OPPONENT:
            logger.debug("Ignored web_app_data from chat %s: %r", chat_id, data)
            return None

        identity = str(payload.get("id") or "")
        try:
            match = self.service.enqueue_and_match(
                identity=identity,
                display_name=payload.get("name"),
                rating_hint=_rating_hint(payload.get("rating")),
                notify=False,
            )
        except GameError as err:
            logger.warning("Bot join from chat %s rejected: %s", chat_id, err)
            return None

        if not match.matched:
            self._send(chat_id, SEARCHING_MESSAGE)
            return match

        # for the type checker: a match always names the opponent
        assert match.opponent is not None
        self._send(identity, matched_payload(match))
        self._send(
            match.opponent.identity,
            matched_payload(self.service.poll_match(match.opponent.identity)),
        )
        return match

    def _send(self, chat_id: str, text: str) -> None:
        """Best effort, like the pairing notifications."""
        try:
            self.notifier.send_message(chat_id, text)
        except Exception:
            logger.warning("Could not message %s", chat_id, exc_info=True)
