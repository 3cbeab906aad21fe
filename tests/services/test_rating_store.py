"""Unit tests for chessmatch/services/rating_store.py"""

import pytest

from chessmatch.db.memory_repository import InMemoryRatingRepository
from chessmatch.services.rating_store import RatingRules, RatingStore


@pytest.fixture
def store() -> RatingStore:
    return RatingStore(InMemoryRatingRepository())


def test_unknown_identity_gets_default_without_storing(store: RatingStore) -> None:
    assert store.rating("newbie") == 1500
    assert not store.is_known("newbie")


def test_register(store: RatingStore) -> None:
    assert store.register("alice", 1620) == 1620
    assert store.is_known("alice")
    assert store.rating("alice") == 1620


def test_register_keeps_known_rating(store: RatingStore) -> None:
    store.register("alice", 1620)
    assert store.register("alice", 900) == 1620
    assert store.rating("alice") == 1620


def test_register_without_rating_uses_default(store: RatingStore) -> None:
    assert store.register("bob") == 1500


def test_win_against_higher_rated(store: RatingStore) -> None:
    """Upset: the loser was rated above the winner and pays the bigger penalty."""
    store.register("underdog", 1400)
    store.register("favourite", 1600)

    assert store.adjust(winner="underdog", loser="favourite") == (1405, 1596)
    assert store.rating("underdog") == 1405
    assert store.rating("favourite") == 1596


def test_win_against_lower_rated(store: RatingStore) -> None:
    store.register("favourite", 1600)
    store.register("underdog", 1400)

    assert store.adjust(winner="favourite", loser="underdog") == (1605, 1397)


def test_equal_ratings_use_the_normal_penalty(store: RatingStore) -> None:
    assert store.adjust(winner="a", loser="b") == (1505, 1497)
    assert store.is_known("a") and store.is_known("b")


def test_rating_never_drops_below_floor() -> None:
    store = RatingStore(InMemoryRatingRepository(), RatingRules(default_rating=2))
    store.register("winner", 1)
    assert store.adjust(winner="winner", loser="loser") == (6, 0)
    assert store.adjust(winner="winner", loser="loser") == (11, 0)


def test_custom_rules() -> None:
    rules = RatingRules(default_rating=1000, win_bonus=10, upset_penalty=8, loss_penalty=6, floor=990)
    store = RatingStore(InMemoryRatingRepository(), rules)
    assert store.rating("x") == 1000
    assert store.adjust(winner="x", loser="y") == (1010, 994)
    assert store.adjust(winner="x", loser="y") == (1020, 990)
