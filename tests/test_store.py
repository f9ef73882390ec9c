"""
Tests for GameStore against an in-memory SQLite database.
"""
import pytest

from gameshare.models import Game
from gameshare.services.store import GameStore, Outcome

from conftest import add_comment, add_like, add_play, make_game, make_tag, make_user


@pytest.fixture
def catalog(db_session):
    arcade = make_tag(db_session, "arcade")
    puzzle = make_tag(db_session, "puzzle")
    games = {
        "snake": make_game(db_session, "Snake", [arcade], likes=3, day=0),
        "tetris": make_game(db_session, "Tetris", [arcade, puzzle], likes=7, day=2),
        "sokoban": make_game(db_session, "Sokoban", [puzzle], likes=3, day=1),
        "blank": make_game(db_session, "Blank", [], likes=0, day=3),
    }
    return games


class TestCatalogReads:
    """Reads used by the recommender."""

    def test_count_games(self, db_session, catalog):
        assert GameStore(db_session).count_games() == 4

    def test_count_games_empty(self, db_session):
        assert GameStore(db_session).count_games() == 0

    def test_top_by_likes_orders_by_counter_then_id(self, db_session, catalog):
        rows = GameStore(db_session).find_top_by_likes(3)
        assert [g.title for g in rows] == ["Tetris", "Snake", "Sokoban"]

    def test_top_by_play_count_only_played_games(self, db_session, catalog):
        u1, u2 = make_user(db_session, "u1"), make_user(db_session, "u2")
        add_play(db_session, u1, catalog["sokoban"], 10)
        add_play(db_session, u2, catalog["sokoban"], 20)
        add_play(db_session, u1, catalog["blank"], 30)

        rows = GameStore(db_session).find_top_by_play_count(10)

        assert [g.title for g in rows] == ["Sokoban", "Blank"]

    def test_by_creation_both_directions(self, db_session, catalog):
        store = GameStore(db_session)
        assert [g.title for g in store.find_by_creation("asc", 2)] == ["Snake", "Sokoban"]
        assert [g.title for g in store.find_by_creation("desc", 2)] == ["Blank", "Tetris"]

    def test_by_creation_rejects_unknown_order(self, db_session):
        with pytest.raises(ValueError):
            GameStore(db_session).find_by_creation("random", 3)

    def test_games_excluding(self, db_session, catalog):
        store = GameStore(db_session)
        excluded = {catalog["snake"].id, catalog["blank"].id}
        rows = store.find_games_excluding(excluded)
        assert {g.title for g in rows} == {"Tetris", "Sokoban"}
        assert len(store.find_games_excluding([])) == 4

    def test_interactions_come_with_tags(self, db_session, catalog):
        user = make_user(db_session, "reader")
        add_like(db_session, user, catalog["tetris"])
        add_comment(db_session, user, catalog["snake"])
        add_play(db_session, user, catalog["sokoban"], 42)
        db_session.expire_all()

        store = GameStore(db_session)
        liked = store.find_liked(user.id)
        commented = store.find_commented(user.id)
        played = store.find_played(user.id)

        assert len(liked) == 1 and len(liked[0].game.tag_ids) == 2
        assert commented[0].game.title == "Snake"
        assert played[0].play_time == 42

    def test_no_history_is_empty_not_error(self, db_session, catalog):
        user = make_user(db_session, "newbie")
        store = GameStore(db_session)
        assert store.find_liked(user.id) == []
        assert store.find_commented(user.id) == []
        assert store.find_played(user.id) == []


class TestWrites:
    """Typed results for the CRUD collaborators."""

    def test_like_increments_counter(self, db_session, catalog):
        user = make_user(db_session, "fan")
        store = GameStore(db_session)

        result = store.add_like(user.id, catalog["blank"].id)

        assert result.ok
        assert db_session.get(Game, catalog["blank"].id).likes == 1
        assert store.has_liked(user.id, catalog["blank"].id)
        assert store.count_likes(catalog["blank"].id) == 1

    def test_double_like_is_conflict(self, db_session, catalog):
        user = make_user(db_session, "fan")
        store = GameStore(db_session)
        store.add_like(user.id, catalog["snake"].id)

        result = store.add_like(user.id, catalog["snake"].id)

        assert result.outcome is Outcome.CONFLICT
        assert db_session.get(Game, catalog["snake"].id).likes == 4

    def test_like_unknown_game_is_not_found(self, db_session):
        user = make_user(db_session, "fan")
        assert GameStore(db_session).add_like(user.id, 999).outcome is Outcome.NOT_FOUND

    def test_unlike(self, db_session, catalog):
        user = make_user(db_session, "fan")
        store = GameStore(db_session)
        store.add_like(user.id, catalog["tetris"].id)

        assert store.remove_like(user.id, catalog["tetris"].id).ok
        assert db_session.get(Game, catalog["tetris"].id).likes == 7
        assert store.remove_like(user.id, catalog["tetris"].id).outcome is Outcome.CONFLICT

    def test_record_play_time_appends_sessions(self, db_session, catalog):
        user = make_user(db_session, "player")
        store = GameStore(db_session)

        store.record_play_time(user.id, catalog["snake"].id, 100)
        store.record_play_time(user.id, catalog["snake"].id, 50)

        assert [p.play_time for p in store.find_played(user.id)] == [100, 50]
        assert store.record_play_time(user.id, 999, 10).outcome is Outcome.NOT_FOUND

    def test_comments(self, db_session, catalog):
        user = make_user(db_session, "talker")
        store = GameStore(db_session)

        created = store.add_comment(user.id, catalog["snake"].id, "fun")
        assert created.ok
        assert created.value.created_at is not None
        assert created.value.updated_at is not None
        assert store.count_comments(catalog["snake"].id) == 1

        updated = store.update_comment(created.value.id, "very fun")
        assert updated.value.content == "very fun"

        assert store.delete_comment(created.value.id).ok
        assert store.delete_comment(created.value.id).outcome is Outcome.NOT_FOUND

    def test_duplicate_tag_is_conflict(self, db_session, catalog):
        store = GameStore(db_session)
        assert store.create_tag("arcade").outcome is Outcome.CONFLICT
        assert store.create_tag("racing").ok
        assert [t.name for t in store.list_tags()] == ["arcade", "puzzle", "racing"]

    def test_renaming_tag_to_existing_name_is_conflict(self, db_session, catalog):
        store = GameStore(db_session)
        racing = store.create_tag("racing").value
        assert store.update_tag(racing.id, "arcade").outcome is Outcome.CONFLICT
