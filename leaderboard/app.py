import logging
import logging.config
import os

from flask import Flask, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge

from .config import config
from .csv_import import CsvImporter
from .errors import LeaderboardError, ServerError
from .game_registry import GameRegistry
from .membership import MembershipManager
from .models import db
from .ranking import RankingService
from .schema import initialize_schema

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """Application factory for the leaderboard service."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)

    # Initialize services
    games = GameRegistry.from_config(
        app.config['GAME_NAMES'],
        app.config.get('GAME_DISPLAY_NAMES'),
        app.config.get('GAME_TABLE_PREFIX', 'game')
    )

    # Create game tables; the app is not usable without them
    with app.app_context():
        initialize_schema(games)

    # Store services on app for access in routes
    app.games = games
    app.importer = CsvImporter(games, app.config['UPLOAD_FOLDER'])
    app.membership = MembershipManager(games)
    app.ranking = RankingService(games)

    register_error_handlers(app)
    register_routes(app)

    from .routes import csv, games as games_routes, players
    app.register_blueprint(games_routes.bp)
    app.register_blueprint(players.bp)
    app.register_blueprint(csv.bp)

    return app


def configure_logging(app: Flask) -> None:
    log_level = app.config.get('LOG_LEVEL', 'INFO')

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'standard',
                'level': log_level,
                'stream': 'ext://sys.stdout',
            },
        },
        'loggers': {
            'leaderboard': {
                'level': log_level,
                'handlers': ['console'],
                'propagate': False,
            },
        },
    })


def register_error_handlers(app: Flask):
    """Render service errors as JSON carrying a stable error kind."""

    @app.errorhandler(LeaderboardError)
    def handle_leaderboard_error(e: LeaderboardError):
        if e.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.path}")
        error = ServerError()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(e):
        logger.warning(f"Upload too large for path {request.path}")
        return jsonify({'error': 'validation', 'message': 'File too large'}), 413


def register_routes(app: Flask):

    @app.route('/health')
    def health_check():
        """Health check endpoint."""
        try:
            db.session.execute(db.text('SELECT 1'))
            db_ok = True
        except SQLAlchemyError:
            logger.exception("Health check could not reach the database")
            db_ok = False

        status = 'healthy' if db_ok else 'unhealthy'
        code = 200 if db_ok else 503

        return jsonify({
            'status': status,
            'database': 'connected' if db_ok else 'disconnected'
        }), code
