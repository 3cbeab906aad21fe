"""Unit tests for chessmatch/services/telegram.py and chessmatch/services/notifications.py"""

import hashlib
import hmac
import json
import logging
from urllib.parse import urlencode

import httpx
import pytest

from chessmatch.core.models import PlayerModel
from chessmatch.services.notifications import LoggingNotifier, matched_message
from chessmatch.services.telegram import (
    TELEGRAM_API_URL,
    TelegramNotifier,
    verify_init_data,
)

BOT_TOKEN = "123456:test-token"
OPPONENT = PlayerModel(identity="42", display_name="Magnus", rating=1510)


def sign(fields: dict[str, str], bot_token: str = BOT_TOKEN) -> str:
    """Build an initData query string the way Telegram signs it."""
    data_check_string = "\n".join(f"{key}={fields[key]}" for key in sorted(fields))
    secret_key = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    digest = hmac.new(secret_key, data_check_string.encode(), hashlib.sha256).hexdigest()
    return urlencode({**fields, "hash": digest})


INIT_FIELDS = {
    "auth_date": "1700000000",
    "query_id": "AAH",
    "user": json.dumps({"id": 42, "first_name": "Magnus"}),
}


# --- MESSAGES ---
def test_matched_message() -> None:
    assert matched_message(OPPONENT) == "Matched vs Magnus (1510)"
    anonymous = PlayerModel(identity="42", display_name=None, rating=1500)
    assert matched_message(anonymous) == "Matched vs 42 (1500)"


def test_logging_notifier(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="chessmatch"):
        LoggingNotifier().notify_matched("7", OPPONENT)
    assert "Matched vs Magnus (1510)" in caplog.text


# --- INIT DATA ---
def test_valid_init_data() -> None:
    assert verify_init_data(sign(INIT_FIELDS), BOT_TOKEN)


def test_init_data_signed_with_other_token() -> None:
    assert not verify_init_data(sign(INIT_FIELDS, "999:other"), BOT_TOKEN)


def test_tampered_init_data() -> None:
    init_data = sign(INIT_FIELDS).replace("1700000000", "1800000000")
    assert not verify_init_data(init_data, BOT_TOKEN)


@pytest.mark.parametrize("init_data", ["", "auth_date=1700000000", "hash="])
def test_init_data_without_hash(init_data: str) -> None:
    assert not verify_init_data(init_data, BOT_TOKEN)


# --- BOT API ---
def test_notifier_posts_send_message() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True})

    client = httpx.Client(base_url=TELEGRAM_API_URL, transport=httpx.MockTransport(handler))
    TelegramNotifier(BOT_TOKEN, client=client).notify_matched("7", OPPONENT)

    assert len(requests) == 1
    assert requests[0].url.path == f"/bot{BOT_TOKEN}/sendMessage"
    assert json.loads(requests[0].content) == {
        "chat_id": "7",
        "text": "Matched vs Magnus (1510)",
    }


def test_notifier_raises_on_refusal() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(403, json={"ok": False}))
    client = httpx.Client(base_url=TELEGRAM_API_URL, transport=transport)

    with pytest.raises(httpx.HTTPStatusError):
        TelegramNotifier(BOT_TOKEN, client=client).notify_matched("7", OPPONENT)
