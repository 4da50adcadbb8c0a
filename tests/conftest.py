"""
Pytest configuration and fixtures for leaderboard tests.
"""
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Set testing environment before importing app
os.environ['FLASK_ENV'] = 'testing'

from sqlalchemy import func, select

from leaderboard.app import create_app
from leaderboard.models import db, game_table


GAME_TABLES = ['game_a', 'game_b', 'game_c']


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing.

    Every app gets its own in-memory SQLite database, so tests start with
    three empty game tables.
    """
    app = create_app('testing')

    upload_folder = str(tmp_path / 'uploads')
    app.config['UPLOAD_FOLDER'] = upload_folder
    app.importer.upload_folder = upload_folder

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Database session inside an application context."""
    with app.app_context():
        yield db.session
        db.session.rollback()


@pytest.fixture
def seed_players(app):
    """Insert rows straight into a game table, bypassing the services."""
    def _seed(table_name, players):
        with app.app_context():
            table = game_table(table_name)
            for player in players:
                db.session.execute(table.insert().values(**player))
            db.session.commit()
    return _seed


@pytest.fixture
def count_rows(app):
    """Count rows in a game table, optionally only those with a given name."""
    def _count(table_name, name=None):
        with app.app_context():
            table = game_table(table_name)
            query = select(func.count()).select_from(table)
            if name is not None:
                query = query.where(table.c.name == name)
            return db.session.execute(query).scalar()
    return _count


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a file and return its path."""
    def _write(content, filename='players.csv'):
        path = tmp_path / filename
        path.write_text(content, encoding='utf-8')
        return str(path)
    return _write
