from flask import Blueprint, current_app, jsonify

bp = Blueprint('games', __name__, url_prefix='/api/games')


@bp.route('', methods=['GET'])
@bp.route('/', methods=['GET'])
def list_games():
    """List the configured games with their display names."""
    return jsonify(current_app.games.to_list())
