"""
Unit tests for RankingService.
Tests: search_scores, top3, update_score
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from leaderboard.errors import NotFoundError, ValidationError
from leaderboard.models import db, game_table


@pytest.fixture
def scored_players(seed_players):
    seed_players('game_a', [
        {'name': 'Alice', 'nickname': 'Ace', 'department': 'Physics', 'score': 30},
        {'name': 'Bob', 'nickname': 'Bee', 'score': 50},
        {'name': 'Carol', 'score': 50},
    ])


class TestSearchScores:

    def test_ordered_by_score(self, app, db_session, scored_players):
        rows = app.ranking.search_scores('game_a')

        assert [row['score'] for row in rows] == [50, 50, 30]
        assert rows[-1] == {'name': 'Alice', 'score': 30, 'nickname': 'Ace', 'department': 'Physics'}

    def test_round_trip_with_add_member(self, app, db_session):
        app.membership.add_member('Carl')

        rows = app.ranking.search_scores('game_b')

        assert {'name': 'Carl', 'score': 0, 'nickname': None, 'department': None} in rows

    def test_empty_table(self, app, db_session):
        assert app.ranking.search_scores('game_c') == []

    def test_missing_table_fails_in_database(self, app, db_session):
        """No existence pre-check: the database reports the missing table."""
        with pytest.raises(SQLAlchemyError):
            app.ranking.search_scores('game_zzz')

    @pytest.mark.parametrize('game_name', ['players', 'game_a; DROP TABLE game_b', None, 5])
    def test_invalid_name(self, app, db_session, game_name):
        with pytest.raises(ValidationError):
            app.ranking.search_scores(game_name)


class TestTop3:

    def test_tie_handling(self, app, db_session, scored_players):
        """Scores [50, 50, 30] rank as dense [1, 1, 2] and rank [1, 1, 3]."""
        rows = app.ranking.top3()['game_a']

        assert [row['score'] for row in rows] == [50, 50, 30]
        assert [row['dense_rank'] for row in rows] == [1, 1, 2]
        assert [row['rank'] for row in rows] == [1, 1, 3]
        assert sorted(row['row_number'] for row in rows) == [1, 2, 3]

    def test_limited_to_three(self, app, db_session, seed_players):
        seed_players('game_b', [{'name': f'P{i}', 'score': i * 10} for i in range(6)])

        rows = app.ranking.top3()['game_b']

        assert [row['name'] for row in rows] == ['P5', 'P4', 'P3']

    def test_row_fields(self, app, db_session, scored_players):
        row = app.ranking.top3()['game_a'][2]

        assert set(row) == {'dense_rank', 'rank', 'row_number', 'name', 'score', 'nickname', 'department'}
        assert row['name'] == 'Alice'

    def test_every_game_table_listed(self, app, db_session, scored_players):
        game_table('game_extra').create(bind=db.engine)

        results = app.ranking.top3()

        assert sorted(results) == ['game_a', 'game_b', 'game_c', 'game_extra']
        assert results['game_b'] == []


class TestUpdateScore:

    def test_update_by_name(self, app, db_session, scored_players):
        player = app.ranking.update_score('game_a', 'Alice', None, 75, display_type=0)

        assert player['name'] == 'Alice'
        assert player['score'] == 75
        assert app.ranking.search_scores('game_a')[0]['name'] == 'Alice'

    def test_update_by_nickname(self, app, db_session, scored_players):
        player = app.ranking.update_score('game_a', None, 'Bee', 12, display_type=1)

        assert player['name'] == 'Bob'
        assert player['score'] == 12

    def test_display_type_as_string(self, app, db_session, scored_players):
        player = app.ranking.update_score('game_a', 'Alice', 'Bee', 5, display_type='1')
        assert player['name'] == 'Bob'

    def test_numeric_string_score(self, app, db_session, scored_players):
        assert app.ranking.update_score('game_a', 'Alice', None, '40')['score'] == 40

    def test_only_target_table_changes(self, app, db_session):
        app.membership.add_member('Carl')

        app.ranking.update_score('game_a', 'Carl', None, 99)

        assert app.ranking.search_scores('game_b')[0]['score'] == 0

    def test_missing_table(self, app, db_session):
        with pytest.raises(NotFoundError):
            app.ranking.update_score('game_zzz', 'Alice', None, 10)

    def test_missing_player_by_name(self, app, db_session, scored_players):
        with pytest.raises(NotFoundError) as exc_info:
            app.ranking.update_score('game_a', 'Nobody', None, 10)
        assert 'name' in exc_info.value.message

    def test_missing_player_by_nickname(self, app, db_session, scored_players):
        with pytest.raises(NotFoundError) as exc_info:
            app.ranking.update_score('game_a', 'Alice', 'Nope', 10, display_type=1)
        assert 'nickname' in exc_info.value.message

    def test_missing_key(self, app, db_session, scored_players):
        """A missing nickname must not match players without one."""
        with pytest.raises(ValidationError):
            app.ranking.update_score('game_a', 'Alice', None, 10, display_type=1)

    @pytest.mark.parametrize('score', ['abc', None, True, [1], 7.9, '7.9', float('nan')])
    def test_invalid_score(self, app, db_session, scored_players, score):
        with pytest.raises(ValidationError):
            app.ranking.update_score('game_a', 'Alice', None, score)

        assert app.ranking.search_scores('game_a')[-1] == {
            'name': 'Alice', 'score': 30, 'nickname': 'Ace', 'department': 'Physics'
        }

    def test_integral_float_score(self, app, db_session, scored_players):
        assert app.ranking.update_score('game_a', 'Alice', None, 60.0)['score'] == 60
