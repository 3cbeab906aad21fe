"""
Telegram integration
---

* `TelegramNotifier` pushes the pairing message through the Bot API.
* `verify_init_data` checks the signature of the `initData` string a Telegram WebApp sends along.
"""

import hashlib
import hmac
import logging
from typing import Optional
from urllib.parse import parse_qsl

import httpx

from chessmatch.core.models import PlayerModel
from chessmatch.services.notifications import matched_message

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramNotifier:
    def __init__(
        self,
        bot_token: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
    ) -> None:
        self.bot_token = bot_token
        self.client = client or httpx.Client(base_url=TELEGRAM_API_URL, timeout=timeout)

    def send_message(self, chat_id: str, text: str) -> None:
        """Raises httpx.HTTPError when Telegram cannot be reached or refuses the message."""
        response = self.client.post(
            f"/bot{self.bot_token}/sendMessage",
            json={"chat_id": chat_id, "text": text},
        )
        response.raise_for_status()
        logger.debug("Telegram message sent to %s", chat_id)

    def notify_matched(self, identity: str, opponent: PlayerModel) -> None:
        self.send_message(identity, matched_message(opponent))


def verify_init_data(init_data: str, bot_token: str) -> bool:
    """
    Telegram WebApp data check
    ----

    1. all fields except `hash`, sorted by key, joined as "key=value" lines
    2. secret key = HMAC-SHA256(key="WebAppData", msg=bot token)
    3. the hex HMAC-SHA256 of the lines under that secret must equal `hash`
    """
    fields = dict(parse_qsl(init_data, keep_blank_values=True))
    received_hash = fields.pop("hash", None)
    if not received_hash:
        return False

    data_check_string = "\n".join(f"{key}={fields[key]}" for key in sorted(fields))
    secret_key = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    expected_hash = hmac.new(
        secret_key, data_check_string.encode(), hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected_hash, received_hash)
