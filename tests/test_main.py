"""Tests for chessmatch/main.py (wiring only)"""

from chessmatch.core.config import Settings
from chessmatch.main import build_match_service, build_notifier, create_app
from chessmatch.services.notifications import LoggingNotifier
from chessmatch.services.telegram import TelegramNotifier


def test_notifier_depends_on_bot_token() -> None:
    assert isinstance(build_notifier(Settings(_env_file=None, bot_token=None)), LoggingNotifier)
    assert isinstance(build_notifier(Settings(_env_file=None, bot_token="1:abc")), TelegramNotifier)


def test_ratings_survive_in_the_configured_database() -> None:
    settings = Settings(_env_file=None, bot_token=None, default_rating=1200, win_bonus=7)
    service = build_match_service(settings)

    assert service.get_rating("alice").rating == 1200
    assert service.ratings.adjust("alice", "bob") == (1207, 1197)
    assert service.get_rating("alice").rating == 1207


def test_create_app_keeps_the_singletons() -> None:
    settings = Settings(_env_file=None, bot_token=None)
    app = create_app(settings)
    assert app.state.settings is settings
    assert app.state.match_service.move_timeout == settings.move_timeout
