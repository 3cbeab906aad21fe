"""Best-effort messages to players. Delivery failures must never undo a pairing, the caller only logs them."""

import logging
from typing import Protocol

from chessmatch.core.models import PlayerModel

logger = logging.getLogger(__name__)


def matched_message(opponent: PlayerModel) -> str:
    name = opponent.display_name or opponent.identity
    return f"Matched vs {name} ({opponent.rating})"


class Notifier(Protocol):
    def send_message(self, chat_id: str, text: str) -> None: ...

    def notify_matched(self, identity: str, opponent: PlayerModel) -> None: ...


class LoggingNotifier:
    """Used when no bot is configured."""

    def send_message(self, chat_id: str, text: str) -> None:
        logger.info("Message to %s: %s", chat_id, text)

    def notify_matched(self, identity: str, opponent: PlayerModel) -> None:
        self.send_message(identity, matched_message(opponent))
